"""Component listing the question bank with filters, bulk actions and import/export."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QHeaderView,
    QInputDialog,
    QLabel,
    QLineEdit,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from exam_trainer.constants.quiz_constants import ASSOCIATION_CHOICES, DEFAULT_QUESTION_COUNT, QUIZ_TOPIC
from exam_trainer.constants.ui_constants import (
    BANK_BULK_DELETE_BUTTON,
    BANK_DELETE_BUTTON,
    BANK_EDIT_BUTTON,
    BANK_EXPORT_CSV_BUTTON,
    BANK_EXPORT_PDF_BUTTON,
    BANK_GENERATE_BUTTON,
    BANK_GUIDE_BUTTON,
    BANK_IMPORT_BUTTON,
    BANK_NEW_BUTTON,
    BANK_REFRESH_BUTTON,
    BANK_SEARCH_PLACEHOLDER,
    BANK_TITLE_TEMPLATE,
    EXPORT_CSV_DIALOG_TITLE,
    EXPORT_CSV_FILE_FILTER,
    EXPORT_PDF_DIALOG_TITLE,
    EXPORT_PDF_FILE_FILTER,
    FILTER_ALL,
    GUIDE_DIALOG_TITLE,
    GUIDE_FILE_FILTER,
    IMPORT_DIALOG_TITLE,
    IMPORT_FILE_FILTER,
    NO_QUESTIONS_MESSAGE,
)
from exam_trainer.core.errors import TrainerError
from exam_trainer.core.models import Question, QuestionType
from exam_trainer.core.question_filters import (
    filter_questions,
    list_categories,
    next_sort_state,
    select_all,
    select_ids_matching,
    sort_questions,
    toggle_id,
)
from exam_trainer.core.quiz_exporter import save_questions_csv, save_questions_pdf
from exam_trainer.core.quiz_importer import QuizImportError, load_questions_from_file
from exam_trainer.core.services.data_store import DataStore
from exam_trainer.core.services.question_generator import QuestionGenerator
from exam_trainer.styling.styles import Styles
from exam_trainer.ui.components.question_edit_dialog import QuestionEditDialog
from exam_trainer.ui.dialog_helpers import (
    confirm_bulk_delete,
    confirm_delete_question,
    show_error,
    show_info,
    show_warning,
)

# Column index -> Question attribute used for sorting
_COLUMNS: tuple[tuple[str, str | None], ...] = (
    ("", None),
    ("Question", "question_text"),
    ("Type", "type"),
    ("Category", "category"),
    ("Association", "association"),
)


class QuestionBankPanel(QWidget):
    """Question table with search, filters, sorting, selection and file actions."""

    def __init__(
        self,
        store: DataStore,
        generator: QuestionGenerator | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.store = store
        self.generator = generator
        self._questions: list[Question] = []
        self._visible: list[Question] = []
        self._selected: set[int] = set()
        self._sort_key: str | None = None
        self._sort_descending = False
        self._last_export_dir: Path = Path.cwd()

        self._build_ui()

    # --- Layout ---

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.title_label = QLabel(BANK_TITLE_TEMPLATE.format(count=0), self)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.title_label)

        action_row = QHBoxLayout()
        self.new_button = QPushButton(BANK_NEW_BUTTON, self)
        self.new_button.clicked.connect(self._handle_new_question)
        action_row.addWidget(self.new_button)

        self.edit_button = QPushButton(BANK_EDIT_BUTTON, self)
        self.edit_button.clicked.connect(self._handle_edit_question)
        action_row.addWidget(self.edit_button)

        self.delete_button = QPushButton(BANK_DELETE_BUTTON, self)
        self.delete_button.setProperty("danger", True)
        self.delete_button.clicked.connect(self._handle_delete_question)
        action_row.addWidget(self.delete_button)

        self.bulk_delete_button = QPushButton(BANK_BULK_DELETE_BUTTON.format(count=0), self)
        self.bulk_delete_button.setProperty("danger", True)
        self.bulk_delete_button.clicked.connect(self._handle_bulk_delete)
        action_row.addWidget(self.bulk_delete_button)

        self.refresh_button = QPushButton(BANK_REFRESH_BUTTON, self)
        self.refresh_button.clicked.connect(self.reload)
        action_row.addWidget(self.refresh_button)
        action_row.addStretch()
        layout.addLayout(action_row)

        file_row = QHBoxLayout()
        file_row.addWidget(QLabel("Association for import:", self))
        self.import_association_combo = QComboBox(self)
        self.import_association_combo.addItems(list(ASSOCIATION_CHOICES))
        file_row.addWidget(self.import_association_combo)

        self.import_button = QPushButton(BANK_IMPORT_BUTTON, self)
        self.import_button.clicked.connect(self._handle_import)
        file_row.addWidget(self.import_button)

        self.export_csv_button = QPushButton(BANK_EXPORT_CSV_BUTTON, self)
        self.export_csv_button.clicked.connect(self._handle_export_csv)
        file_row.addWidget(self.export_csv_button)

        self.export_pdf_button = QPushButton(BANK_EXPORT_PDF_BUTTON, self)
        self.export_pdf_button.clicked.connect(self._handle_export_pdf)
        file_row.addWidget(self.export_pdf_button)

        self.guide_button = QPushButton(BANK_GUIDE_BUTTON, self)
        self.guide_button.clicked.connect(self._handle_upload_guide)
        file_row.addWidget(self.guide_button)

        self.generate_button = QPushButton(BANK_GENERATE_BUTTON, self)
        self.generate_button.clicked.connect(self._handle_generate)
        self.generate_button.setEnabled(self.generator is not None)
        file_row.addWidget(self.generate_button)
        file_row.addStretch()
        layout.addLayout(file_row)

        filter_row = QHBoxLayout()
        self.search_input = QLineEdit(self)
        self.search_input.setPlaceholderText(BANK_SEARCH_PLACEHOLDER)
        self.search_input.textChanged.connect(self._refresh_table)
        filter_row.addWidget(self.search_input, stretch=2)

        self.category_filter = QComboBox(self)
        self.category_filter.addItem(FILTER_ALL, userData=None)
        self.category_filter.currentIndexChanged.connect(self._refresh_table)
        filter_row.addWidget(self.category_filter)

        self.association_filter = QComboBox(self)
        self.association_filter.addItem(FILTER_ALL, userData=None)
        for name in ASSOCIATION_CHOICES:
            self.association_filter.addItem(name, userData=name)
        self.association_filter.currentIndexChanged.connect(self._refresh_table)
        filter_row.addWidget(self.association_filter)

        self.type_filter = QComboBox(self)
        self.type_filter.addItem(FILTER_ALL, userData=None)
        for question_type in QuestionType:
            self.type_filter.addItem(question_type.value, userData=question_type)
        self.type_filter.currentIndexChanged.connect(self._refresh_table)
        filter_row.addWidget(self.type_filter)
        layout.addLayout(filter_row)

        select_row = QHBoxLayout()
        self.select_category_button = QPushButton("Select Category", self)
        self.select_category_button.clicked.connect(lambda: self._handle_select_matching("category"))
        select_row.addWidget(self.select_category_button)
        self.select_association_button = QPushButton("Select Association", self)
        self.select_association_button.clicked.connect(lambda: self._handle_select_matching("association"))
        select_row.addWidget(self.select_association_button)
        self.select_type_button = QPushButton("Select Type", self)
        self.select_type_button.clicked.connect(lambda: self._handle_select_matching("type"))
        select_row.addWidget(self.select_type_button)
        self.clear_selection_button = QPushButton("Clear Selection", self)
        self.clear_selection_button.clicked.connect(self._handle_clear_selection)
        select_row.addWidget(self.clear_selection_button)
        select_row.addStretch()
        layout.addLayout(select_row)

        self.table = QTableWidget(0, len(_COLUMNS), self)
        self.table.setHorizontalHeaderLabels([title for title, _ in _COLUMNS])
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        self.table.setAlternatingRowColors(True)
        header = self.table.horizontalHeader()
        header.setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        header.sectionClicked.connect(self._handle_header_clicked)
        self.table.itemChanged.connect(self._handle_item_changed)
        self.table.cellDoubleClicked.connect(lambda _row, _col: self._handle_edit_question())
        layout.addWidget(self.table)

        self.status_label = QLabel("", self)
        layout.addWidget(self.status_label)

    # --- Data ---

    def reload(self) -> None:
        try:
            self._questions = self.store.fetch_all_questions()
        except TrainerError as exc:
            show_error(self, "Loading failed", exc.user_message)
            return
        known = {q.id for q in self._questions}
        self._selected &= known
        self._refresh_category_filter()
        self._refresh_table()

    def _refresh_category_filter(self) -> None:
        current = self.category_filter.currentData()
        self.category_filter.blockSignals(True)
        self.category_filter.clear()
        self.category_filter.addItem(FILTER_ALL, userData=None)
        for name in list_categories(self._questions):
            self.category_filter.addItem(name, userData=name)
        position = self.category_filter.findData(current)
        self.category_filter.setCurrentIndex(max(position, 0))
        self.category_filter.blockSignals(False)

    def _filtered(self) -> list[Question]:
        return filter_questions(
            self._questions,
            search=self.search_input.text(),
            category=self.category_filter.currentData(),
            association=self.association_filter.currentData(),
            question_type=self.type_filter.currentData(),
        )

    def _refresh_table(self) -> None:
        self._visible = sort_questions(self._filtered(), self._sort_key, self._sort_descending)
        self.table.blockSignals(True)
        self.table.setRowCount(len(self._visible))
        for row, question in enumerate(self._visible):
            check_item = QTableWidgetItem()
            check_item.setFlags(Qt.ItemFlag.ItemIsUserCheckable | Qt.ItemFlag.ItemIsEnabled)
            check_item.setCheckState(
                Qt.CheckState.Checked if question.id in self._selected else Qt.CheckState.Unchecked
            )
            check_item.setData(Qt.ItemDataRole.UserRole, question.id)
            self.table.setItem(row, 0, check_item)
            self.table.setItem(row, 1, QTableWidgetItem(question.question_text))
            self.table.setItem(row, 2, QTableWidgetItem(question.type.value))
            self.table.setItem(row, 3, QTableWidgetItem(question.category or ""))
            self.table.setItem(row, 4, QTableWidgetItem(question.association or ""))
        self.table.blockSignals(False)
        self.title_label.setText(BANK_TITLE_TEMPLATE.format(count=len(self._visible)))
        self._refresh_selection_labels()

    def _refresh_selection_labels(self) -> None:
        self._update_header_labels()
        self.bulk_delete_button.setText(BANK_BULK_DELETE_BUTTON.format(count=len(self._selected)))
        self.bulk_delete_button.setEnabled(bool(self._selected))

    def _update_header_labels(self) -> None:
        for column, (title, key) in enumerate(_COLUMNS):
            if key is not None and key == self._sort_key:
                title = f"{title} {'▼' if self._sort_descending else '▲'}"
            elif column == 0:
                all_ids = select_all(self._visible, True)
                title = "☑" if all_ids and all_ids <= self._selected else "☐"
            self.table.horizontalHeaderItem(column).setText(title)

    def _current_question(self) -> Question | None:
        row = self.table.currentRow()
        if row < 0 or row >= len(self._visible):
            return None
        return self._visible[row]

    def _set_status(self, message: str, is_error: bool = False) -> None:
        self.status_label.setStyleSheet(Styles.get_status_style(is_error))
        self.status_label.setText(message)

    # --- Sorting and selection ---

    def _handle_header_clicked(self, column: int) -> None:
        key = _COLUMNS[column][1]
        if key is None:
            all_visible = select_all(self._visible, True)
            checked = not (all_visible and all_visible <= self._selected)
            self._selected = select_all(self._visible, checked)
        else:
            self._sort_key, self._sort_descending = next_sort_state(self._sort_key, self._sort_descending, key)
        self._refresh_table()

    def _handle_item_changed(self, item: QTableWidgetItem) -> None:
        if item.column() != 0:
            return
        question_id = item.data(Qt.ItemDataRole.UserRole)
        if question_id is None:
            return
        self._selected = toggle_id(self._selected, int(question_id))
        self._refresh_selection_labels()

    def _handle_select_matching(self, attribute: str) -> None:
        criteria = {
            "category": self.category_filter.currentData(),
            "association": self.association_filter.currentData(),
            "question_type": self.type_filter.currentData(),
        }
        key = "question_type" if attribute == "type" else attribute
        value = criteria[key]
        if value is None:
            show_info(self, "Select", "Choose a filter value first.")
            return
        self._selected, count = select_ids_matching(self._questions, self._selected, **{key: value})
        label = value.value if isinstance(value, QuestionType) else value
        self._set_status(f"{count} questions matching '{label}' added to the selection.")
        self._refresh_table()

    def _handle_clear_selection(self) -> None:
        self._selected = set()
        self._refresh_table()

    # --- CRUD ---

    def _handle_new_question(self) -> None:
        dialog = QuestionEditDialog(None, list_categories(self._questions), self)
        if not dialog.exec() or dialog.result_question() is None:
            return
        try:
            self.store.create_question(dialog.result_question())
        except (TrainerError, ValueError) as exc:
            show_error(self, "Save failed", getattr(exc, "user_message", str(exc)))
            return
        self._set_status("Question created.")
        self.reload()

    def _handle_edit_question(self) -> None:
        question = self._current_question()
        if question is None:
            show_info(self, "No selection", "Select a question first.")
            return
        dialog = QuestionEditDialog(question, list_categories(self._questions), self)
        if not dialog.exec() or dialog.result_question() is None:
            return
        try:
            self.store.update_question(dialog.result_question())
        except (TrainerError, ValueError) as exc:
            show_error(self, "Save failed", getattr(exc, "user_message", str(exc)))
            return
        self._set_status("Question updated.")
        self.reload()

    def _handle_delete_question(self) -> None:
        question = self._current_question()
        if question is None or question.id is None:
            show_info(self, "No selection", "Select a question first.")
            return
        if not confirm_delete_question(self, question.question_text):
            return
        try:
            self.store.delete_question(question.id)
        except TrainerError as exc:
            show_error(self, "Delete failed", exc.user_message)
            return
        self._set_status("Question deleted.")
        self.reload()

    def _handle_bulk_delete(self) -> None:
        if not self._selected:
            return
        count = len(self._selected)
        if not confirm_bulk_delete(self, count):
            return
        try:
            self.store.delete_questions(sorted(self._selected))
        except TrainerError as exc:
            show_error(self, "Delete failed", exc.user_message)
            return
        self._selected = set()
        self._set_status(f"{count} questions deleted.")
        self.reload()

    # --- Files ---

    def _handle_import(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            IMPORT_DIALOG_TITLE,
            str(Path.home()),
            IMPORT_FILE_FILTER,
        )
        if not file_path:
            return
        association = self.import_association_combo.currentText()
        try:
            imported = load_questions_from_file(Path(file_path), association)
            self.store.create_questions(imported.questions)
        except (OSError, QuizImportError) as exc:
            show_error(self, "Import failed", str(exc))
            return
        except TrainerError as exc:
            show_error(self, "Import failed", exc.user_message)
            return
        message = f"{len(imported.questions)} questions imported."
        if imported.skipped_rows:
            message += f" {imported.skipped_rows} rows were skipped."
        self._set_status(message)
        show_info(self, "Import finished", message)
        self.reload()

    def _export_target(self, title: str, file_filter: str, default_name: str) -> Path | None:
        if not self._visible:
            show_warning(self, "Nothing to export", NO_QUESTIONS_MESSAGE)
            return None
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            title,
            str(self._last_export_dir / default_name),
            file_filter,
        )
        if not file_path:
            return None
        target = Path(file_path)
        self._last_export_dir = target.parent
        return target

    def _handle_export_csv(self) -> None:
        target = self._export_target(EXPORT_CSV_DIALOG_TITLE, EXPORT_CSV_FILE_FILTER, "fragen-export.csv")
        if target is None:
            return
        try:
            save_questions_csv(target, self._visible)
        except (OSError, ValueError) as exc:
            show_error(self, "Export failed", str(exc))
            return
        self._set_status(f"{len(self._visible)} questions exported to {target}.")

    def _handle_export_pdf(self) -> None:
        target = self._export_target(EXPORT_PDF_DIALOG_TITLE, EXPORT_PDF_FILE_FILTER, "fragen-katalog.pdf")
        if target is None:
            return
        try:
            save_questions_pdf(target, self._visible)
        except (OSError, ValueError) as exc:
            show_error(self, "Export failed", str(exc))
            return
        self._set_status(f"Question catalogue written to {target}.")

    def _handle_upload_guide(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            GUIDE_DIALOG_TITLE,
            str(Path.home()),
            GUIDE_FILE_FILTER,
        )
        if not file_path:
            return
        path = Path(file_path)
        if path.suffix.lower() != ".pdf":
            show_warning(self, "Upload", "Please choose a PDF file.")
            return
        try:
            self.store.upload_study_guide(path.read_bytes())
        except (OSError, ValueError) as exc:
            show_error(self, "Upload failed", str(exc))
            return
        except TrainerError as exc:
            show_error(self, "Upload failed", exc.user_message)
            return
        self._set_status("Study guide uploaded.")

    def _handle_generate(self) -> None:
        if self.generator is None:
            return
        topic, ok = QInputDialog.getText(self, "Generate questions", "Topic:", text=QUIZ_TOPIC)
        if not ok or not topic.strip():
            return
        count, ok = QInputDialog.getInt(self, "Generate questions", "Number of questions:", DEFAULT_QUESTION_COUNT, 1, 30)
        if not ok:
            return
        association = self.import_association_combo.currentText()
        QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
        try:
            questions = self.generator.generate(topic, count)
            saved = self.store.create_questions([q.copy_with(association=association) for q in questions])
        except TrainerError as exc:
            show_error(self, "Generation failed", exc.user_message)
            return
        except ValueError as exc:
            show_warning(self, "Generation", str(exc))
            return
        finally:
            QApplication.restoreOverrideCursor()
        self._set_status(f"{len(saved)} generated questions saved.")
        self.reload()
