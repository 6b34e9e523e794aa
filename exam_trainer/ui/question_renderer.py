"""Question rendering utilities for the admin preview."""

from __future__ import annotations

from exam_trainer.core.markdown_renderer import renderer


def question_preview_markdown(question_text: str, options: list[str], correct_indices: list[int]) -> str:
    """Markdown for a question with its options; correct options are marked with a check."""
    lines = [question_text.strip() or "(No question text)", ""]
    for idx, option in enumerate(options):
        letter = chr(ord("A") + idx)
        marker = " ✔" if idx in correct_indices else ""
        lines.append(f"**{letter}.** {option or '(empty)'}{marker}")
    return "\n\n".join(lines)


def render_question_with_options(question_text: str, options: list[str], correct_indices: list[int]) -> str:
    """Render a question with its options as an HTML fragment for a ``QTextBrowser``."""
    return renderer.render_fragment(question_preview_markdown(question_text, options, correct_indices))
