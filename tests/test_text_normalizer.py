from __future__ import annotations

import html
import random
import re

import pytest

from exam_trainer.core.text_normalizer import normalize_question, normalize_text


def test_decodes_entities_and_strips_tags():
    assert normalize_text("<b>Hund</b> &amp; Katze") == "Hund & Katze"


def test_double_encoded_entities_end_up_plain():
    assert normalize_text("Leine &amp;amp; Halsband") == "Leine & Halsband"


def test_encoded_carriage_returns_become_single_line_break():
    assert normalize_text("Zeile 1&#x000D;&#x000A;&#x000D;&#x000A;Zeile 2") == "Zeile 1\nZeile 2"


def test_collapses_line_break_runs_and_trims():
    assert normalize_text("  a\r\n\r\n  \nb  ") == "a\nb"


def test_empty_and_none_give_empty_string():
    assert normalize_text(None) == ""
    assert normalize_text("") == ""


def test_unclosed_angle_bracket_is_kept():
    assert normalize_text("Gewicht < 10 kg") == "Gewicht < 10 kg"


def test_normalize_question_touches_text_options_and_category(make_question):
    question = make_question(
        text="<p>Frage &amp; Antwort</p>",
        options=["&lt;A&gt;", "B<br>"],
        category=" Schulhund ",
    )

    result = normalize_question(question)

    assert result.question_text == "Frage & Antwort"
    assert result.options == ["", "B"]
    assert result.category == "Schulhund"
    assert question.question_text == "<p>Frage &amp; Antwort</p>"


_TOKENS = (
    "Hund", "Leine", "ä", " ", "  ", "\t", "\n", "\r\n", "\r", "  \n  ",
    "&amp;", "&amp;amp;", "&amp;lt;b&amp;gt;", "&lt;", "&gt;", "&nbsp;", "&quot;",
    "&#x000D;", "&#x000A;", "&#10;", "&#13;", "&", "amp;", "#", ";",
    "<b>", "</b>", "<br>", "<br/>", "<p class='x'>", "<", ">",
)


def _random_text(rng: random.Random) -> str:
    return "".join(rng.choice(_TOKENS) for _ in range(rng.randint(0, 25)))


@pytest.mark.parametrize("seed", range(20))
def test_normalized_text_is_stable_and_plain(seed):
    rng = random.Random(seed)
    for _ in range(100):
        text = _random_text(rng)
        result = normalize_text(text)

        assert normalize_text(result) == result, text
        assert html.unescape(result) == result, text
        assert re.search(r"<[^>]*>", result) is None, text
        assert re.search(r"\n\s*\n", result) is None, text
        assert "\r" not in result, text
        assert result == result.strip(), text
