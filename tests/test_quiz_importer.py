from __future__ import annotations

import pytest

from exam_trainer.core.models import QuestionType
from exam_trainer.core.quiz_importer import QuizImportError, load_questions_from_file, parse_questions_csv

SEMICOLON_CSV = """\
Frage;Antwort 1;Antwort 1 korrekt;Antwort 2;Antwort 2 korrekt;Antwort 3;Antwort 3 korrekt;Kategorie;Fragetyp
Wie viele Zähne hat ein erwachsener Hund?;42;richtig;32;;28;;Hundeführerschein;Single Choice
Welche Signale können Stress anzeigen?;Gähnen;Richtig;Hecheln;RICHTIG;;;;
;Ohne Frage;richtig;;;;;;
Zwei richtige bei Single?;A;richtig;B;richtig;;;Allgemein;Single
"""


def test_parses_semicolon_file():
    result = parse_questions_csv(SEMICOLON_CSV, "DZKB")

    assert len(result.questions) == 2
    assert result.skipped_rows == 2

    first, second = result.questions
    assert first.options == ["42", "32", "28"]
    assert first.correct_answer_indices == [0]
    assert first.type is QuestionType.SINGLE
    assert first.category == "Hundeführerschein"
    assert first.association == "DZKB"

    assert second.options == ["Gähnen", "Hecheln"]
    assert second.correct_answer_indices == [0, 1]
    assert second.type is QuestionType.MULTI
    assert second.category == "Allgemein"


def test_blank_options_keep_correct_mapping():
    text = (
        "Frage,Antwort 1,Antwort 1 korrekt,Antwort 2,Antwort 2 korrekt,Antwort 3,Antwort 3 korrekt,Fragetyp\n"
        "Was stimmt?,Falsch,,,,Wahr,richtig,Single\n"
    )

    question = parse_questions_csv(text, "ProHunde").questions[0]

    assert question.options == ["Falsch", "Wahr"]
    assert question.correct_answer_indices == [1]


def test_comma_file_with_quoted_cells_and_bom():
    text = (
        "\ufeffFrage,Antwort 1,Antwort 1 korrekt,Antwort 2,Antwort 2 korrekt\n"
        '"Leine, Halsband oder Geschirr?","Geschirr, gut sitzend",richtig,Leine,\n'
    )

    question = parse_questions_csv(text, "DZKB").questions[0]

    assert question.question_text == "Leine, Halsband oder Geschirr?"
    assert question.options == ["Geschirr, gut sitzend", "Leine"]


def test_html_entities_are_cleaned():
    text = "Frage,Antwort 1,Antwort 1 korrekt\nHund &amp; Katze?,<b>Ja</b>,richtig\n"

    question = parse_questions_csv(text, "DZKB").questions[0]

    assert question.question_text == "Hund & Katze?"
    assert question.options == ["Ja"]


def test_association_is_required():
    with pytest.raises(QuizImportError):
        parse_questions_csv(SEMICOLON_CSV, " ")


def test_empty_file_is_rejected():
    with pytest.raises(QuizImportError):
        parse_questions_csv("", "DZKB")


def test_file_without_valid_rows_is_rejected():
    text = "Frage;Antwort 1;Antwort 1 korrekt\nOhne richtige Antwort;A;falsch\n"

    with pytest.raises(QuizImportError, match="No questions"):
        parse_questions_csv(text, "DZKB")


def test_load_from_file_falls_back_to_cp1252(tmp_path):
    path = tmp_path / "fragen.csv"
    path.write_bytes("Frage;Antwort 1;Antwort 1 korrekt\nGröße?;Ja;richtig\n".encode("cp1252"))

    result = load_questions_from_file(path, "DZKB")

    assert result.questions[0].question_text == "Größe?"
    assert result.source_path == path


def test_only_csv_files_are_accepted(tmp_path):
    path = tmp_path / "fragen.txt"
    path.write_text("Frage;Antwort 1;Antwort 1 korrekt\nX;Y;richtig\n", encoding="utf-8")

    with pytest.raises(QuizImportError):
        load_questions_from_file(path, "DZKB")
