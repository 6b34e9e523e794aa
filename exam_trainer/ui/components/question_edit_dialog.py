"""Dialog for creating or editing a single question."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from exam_trainer.constants.quiz_constants import ASSOCIATION_CHOICES, MAX_IMPORT_OPTIONS, MODULE_CHOICES
from exam_trainer.constants.ui_constants import PLACEHOLDER_QUESTION
from exam_trainer.core.answer_accumulator import apply_type_change, select_option
from exam_trainer.core.models import Question, QuestionType, validate_question
from exam_trainer.ui.dialog_helpers import show_warning
from exam_trainer.ui.question_renderer import render_question_with_options

_MIN_OPTIONS = 2


def blank_question() -> Question:
    return Question(
        question_text="",
        options=["", "", "", ""],
        correct_answer_indices=[0],
        type=QuestionType.SINGLE,
        category=MODULE_CHOICES[0],
        association=ASSOCIATION_CHOICES[0],
    )


class QuestionEditDialog(QDialog):
    """Edits a copy of a question; :meth:`result_question` returns the edited version."""

    def __init__(
        self,
        question: Question | None = None,
        categories: list[str] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._original = question or blank_question()
        self.setWindowTitle("Edit Question" if self._original.id is not None else "New Question")
        self._correct: list[int] = list(self._original.correct_answer_indices)
        self._type = self._original.type
        self._result: Question | None = None
        self._option_rows: list[tuple[QLineEdit, QCheckBox]] = []

        self._build_ui(categories or [])
        self._populate(self._original)

    def result_question(self) -> Question | None:
        return self._result

    def _build_ui(self, categories: list[str]) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        form = QFormLayout()
        self.question_input = QPlainTextEdit(self)
        self.question_input.setPlaceholderText(PLACEHOLDER_QUESTION)
        self.question_input.textChanged.connect(self._refresh_preview)
        form.addRow("Question", self.question_input)

        self.type_combo = QComboBox(self)
        self.type_combo.addItem("Single choice", userData=QuestionType.SINGLE)
        self.type_combo.addItem("Multiple choice", userData=QuestionType.MULTI)
        self.type_combo.currentIndexChanged.connect(self._handle_type_change)
        form.addRow("Type", self.type_combo)

        self.category_combo = QComboBox(self)
        self.category_combo.setEditable(True)
        for name in dict.fromkeys([*MODULE_CHOICES, *categories]):
            self.category_combo.addItem(name)
        form.addRow("Category", self.category_combo)

        self.association_combo = QComboBox(self)
        self.association_combo.addItems(list(ASSOCIATION_CHOICES))
        form.addRow("Association", self.association_combo)

        self.image_input = QLineEdit(self)
        self.image_input.setPlaceholderText("Optional image URL")
        form.addRow("Image", self.image_input)
        layout.addLayout(form)

        self.options_layout = QVBoxLayout()
        layout.addLayout(self.options_layout)

        option_buttons = QHBoxLayout()
        self.add_option_button = QPushButton("Add Answer", self)
        self.add_option_button.clicked.connect(lambda: self._add_option_row(""))
        option_buttons.addWidget(self.add_option_button)
        self.remove_option_button = QPushButton("Remove Last Answer", self)
        self.remove_option_button.clicked.connect(self._remove_last_option_row)
        option_buttons.addWidget(self.remove_option_button)
        layout.addLayout(option_buttons)

        self.preview = QTextBrowser(self)
        self.preview.setOpenExternalLinks(False)
        layout.addWidget(self.preview)

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel, self)
        buttons.accepted.connect(self._handle_save)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _populate(self, question: Question) -> None:
        self.question_input.setPlainText(question.question_text)
        self.type_combo.blockSignals(True)
        self.type_combo.setCurrentIndex(0 if question.type is QuestionType.SINGLE else 1)
        self.type_combo.blockSignals(False)
        if question.category:
            self.category_combo.setCurrentText(question.category)
        if question.association:
            self.association_combo.setCurrentText(question.association)
        self.image_input.setText(question.image_url or "")
        for option in question.options:
            self._add_option_row(option)
        self._sync_checkboxes()

    def _add_option_row(self, text: str) -> None:
        if len(self._option_rows) >= MAX_IMPORT_OPTIONS:
            return
        index = len(self._option_rows)
        row = QHBoxLayout()
        option_input = QLineEdit(self)
        option_input.setPlaceholderText(f"Answer {chr(ord('A') + index)}")
        option_input.setText(text)
        option_input.textChanged.connect(self._refresh_preview)
        checkbox = QCheckBox("correct", self)
        checkbox.clicked.connect(lambda _checked, i=index: self._handle_correct_clicked(i))
        row.addWidget(option_input)
        row.addWidget(checkbox)
        self.options_layout.addLayout(row)
        self._option_rows.append((option_input, checkbox))
        self._update_option_buttons()
        self._sync_checkboxes()

    def _remove_last_option_row(self) -> None:
        if len(self._option_rows) <= _MIN_OPTIONS:
            return
        option_input, checkbox = self._option_rows.pop()
        removed = len(self._option_rows)
        row = self.options_layout.takeAt(self.options_layout.count() - 1)
        option_input.deleteLater()
        checkbox.deleteLater()
        if row is not None and row.layout() is not None:
            row.layout().deleteLater()
        self._correct = [index for index in self._correct if index != removed]
        self._update_option_buttons()
        self._sync_checkboxes()

    def _update_option_buttons(self) -> None:
        self.add_option_button.setEnabled(len(self._option_rows) < MAX_IMPORT_OPTIONS)
        self.remove_option_button.setEnabled(len(self._option_rows) > _MIN_OPTIONS)

    def _handle_correct_clicked(self, index: int) -> None:
        self._correct = select_option(self._correct, index, self._type is QuestionType.MULTI)
        self._sync_checkboxes()

    def _handle_type_change(self) -> None:
        new_type = self.type_combo.currentData()
        edited = apply_type_change(self._current_question(), new_type)
        self._type = edited.type
        self._correct = list(edited.correct_answer_indices)
        self._sync_checkboxes()

    def _sync_checkboxes(self) -> None:
        for index, (_, checkbox) in enumerate(self._option_rows):
            checkbox.blockSignals(True)
            checkbox.setChecked(index in self._correct)
            checkbox.blockSignals(False)
        self._refresh_preview()

    def _current_question(self) -> Question:
        return self._original.copy_with(
            question_text=self.question_input.toPlainText().strip(),
            options=[option_input.text().strip() for option_input, _ in self._option_rows],
            correct_answer_indices=sorted(self._correct),
            type=self._type,
            category=self.category_combo.currentText().strip() or None,
            association=self.association_combo.currentText() or None,
            image_url=self.image_input.text().strip() or None,
        )

    def _refresh_preview(self) -> None:
        if not hasattr(self, "preview"):
            return
        question = self._current_question()
        self.preview.setHtml(
            render_question_with_options(
                question.question_text,
                question.options,
                question.correct_answer_indices,
            )
        )

    def _handle_save(self) -> None:
        question = self._current_question()
        try:
            validate_question(question)
        except ValueError as exc:
            show_warning(self, "Invalid question", str(exc))
            return
        self._result = question
        self.accept()
