"""Export of the (filtered) question bank as CSV and printable PDF."""

from __future__ import annotations

import csv
import html
import io
from collections.abc import Sequence
from pathlib import Path

from PySide6.QtCore import QMarginsF
from PySide6.QtGui import QPageLayout, QPageSize, QPdfWriter, QTextDocument

from exam_trainer.core.models import Question

CSV_COLUMNS = (
    "Nr.",
    "Frage",
    "Typ",
    "Kategorie",
    "Verband",
    "Antwort_A",
    "Antwort_B",
    "Antwort_C",
    "Antwort_D",
    "Korrekte Indizes",
)
PDF_TITLE = "Fragenkatalog - DZKB Bayern e.V."
PDF_COLUMNS = ("Nr.", "Frage", "Kategorie", "Verband", "Korrekte Antwort(en)")

_HEADER_COLOR = "#0b79d0"


def _option(question: Question, index: int) -> str:
    return question.options[index] if index < len(question.options) else ""


def questions_to_csv(questions: Sequence[Question]) -> str:
    """Serialize questions in table order; only the first four options get a column."""

    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for number, question in enumerate(questions, start=1):
        writer.writerow(
            [
                number,
                question.question_text,
                question.type.value,
                question.category or "",
                question.association or "",
                *(_option(question, index) for index in range(4)),
                ", ".join(str(index) for index in question.correct_answer_indices),
            ]
        )
    return buffer.getvalue()


def save_questions_csv(file_path: Path, questions: Sequence[Question]) -> None:
    if not questions:
        raise ValueError("There are no questions to export.")
    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    # BOM so spreadsheet programs detect UTF-8 umlauts.
    file_path.write_text(questions_to_csv(questions), encoding="utf-8-sig", newline="")


def correct_answer_text(question: Question) -> str:
    return "; ".join(_option(question, index) for index in question.correct_answer_indices)


def questions_to_html(questions: Sequence[Question], title: str = PDF_TITLE) -> str:
    """Build the table document that is printed into the PDF catalogue."""

    header = "".join(
        f'<th style="background-color:{_HEADER_COLOR}; color:#ffffff; padding:4px;">{html.escape(column)}</th>'
        for column in PDF_COLUMNS
    )
    rows: list[str] = []
    for number, question in enumerate(questions, start=1):
        cells = (
            str(number),
            question.question_text,
            question.category or "",
            question.association or "",
            correct_answer_text(question),
        )
        rows.append(
            "<tr>" + "".join(f'<td style="padding:4px;">{html.escape(cell)}</td>' for cell in cells) + "</tr>"
        )
    return (
        "<html><body style=\"font-family: Helvetica, Arial, sans-serif; font-size: 8pt;\">"
        f"<h1 style=\"font-size: 18pt;\">{html.escape(title)}</h1>"
        '<table border="1" cellspacing="0" width="100%">'
        f"<thead><tr>{header}</tr></thead><tbody>{''.join(rows)}</tbody>"
        "</table></body></html>"
    )


def save_questions_pdf(file_path: Path, questions: Sequence[Question]) -> None:
    """Render the catalogue into an A4 PDF; needs a running ``QGuiApplication``."""

    if not questions:
        raise ValueError("There are no questions to export.")
    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)

    writer = QPdfWriter(str(file_path))
    writer.setPageSize(QPageSize(QPageSize.PageSizeId.A4))
    writer.setPageMargins(QMarginsF(14, 14, 14, 14), QPageLayout.Unit.Millimeter)
    writer.setTitle(PDF_TITLE)

    document = QTextDocument()
    document.setHtml(questions_to_html(questions))
    document.print_(writer)
