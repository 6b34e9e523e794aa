"""Component for creating, toggling and deleting student access codes."""

from __future__ import annotations

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from exam_trainer.constants.ui_constants import (
    CODES_COPY_BUTTON,
    CODES_DELETE_BUTTON,
    CODES_EMAIL_PLACEHOLDER,
    CODES_GENERATE_BUTTON,
    CODES_NAME_PLACEHOLDER,
    CODES_REFRESH_BUTTON,
)
from exam_trainer.core.access_codes import OptimisticToggle, generate_readable_code
from exam_trainer.core.errors import TrainerError
from exam_trainer.core.models import AccessCode
from exam_trainer.core.services.data_store import DataStore
from exam_trainer.styling.styles import Styles
from exam_trainer.ui.dialog_helpers import confirm_delete_access_code, show_error, show_info

_HEADERS = ("Active", "Code", "Name", "E-mail", "Created", "Mail status")


class AccessCodePanel(QWidget):
    """Lists access codes; the active flag is toggled optimistically."""

    def __init__(self, store: DataStore, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.store = store
        self._toggle = OptimisticToggle([], commit=self._commit_active)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.title_label = QLabel("Access Codes", self)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.title_label)

        create_row = QHBoxLayout()
        self.name_input = QLineEdit(self)
        self.name_input.setPlaceholderText(CODES_NAME_PLACEHOLDER)
        create_row.addWidget(self.name_input)
        self.email_input = QLineEdit(self)
        self.email_input.setPlaceholderText(CODES_EMAIL_PLACEHOLDER)
        create_row.addWidget(self.email_input)
        self.generate_button = QPushButton(CODES_GENERATE_BUTTON, self)
        self.generate_button.setProperty("primary", True)
        self.generate_button.clicked.connect(self._handle_create_code)
        create_row.addWidget(self.generate_button)
        layout.addLayout(create_row)

        action_row = QHBoxLayout()
        self.copy_button = QPushButton(CODES_COPY_BUTTON, self)
        self.copy_button.clicked.connect(self._handle_copy_code)
        action_row.addWidget(self.copy_button)
        self.delete_button = QPushButton(CODES_DELETE_BUTTON, self)
        self.delete_button.setProperty("danger", True)
        self.delete_button.clicked.connect(self._handle_delete_code)
        action_row.addWidget(self.delete_button)
        self.refresh_button = QPushButton(CODES_REFRESH_BUTTON, self)
        self.refresh_button.clicked.connect(self.reload)
        action_row.addWidget(self.refresh_button)
        action_row.addStretch()
        layout.addLayout(action_row)

        self.table = QTableWidget(0, len(_HEADERS), self)
        self.table.setHorizontalHeaderLabels(list(_HEADERS))
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        self.table.setAlternatingRowColors(True)
        self.table.horizontalHeader().setSectionResizeMode(3, QHeaderView.ResizeMode.Stretch)
        self.table.itemChanged.connect(self._handle_item_changed)
        layout.addWidget(self.table)

        self.status_label = QLabel("", self)
        layout.addWidget(self.status_label)

    # --- Data ---

    def reload(self) -> None:
        try:
            codes = self.store.fetch_all_access_codes()
        except TrainerError as exc:
            show_error(self, "Loading failed", exc.user_message)
            return
        self._toggle = OptimisticToggle(codes, commit=self._commit_active)
        self._refresh_table()

    def _commit_active(self, code_id: int, is_active: bool) -> AccessCode:
        return self.store.update_access_code(code_id, is_active=is_active)

    def _refresh_table(self) -> None:
        codes = self._toggle.codes
        self.table.blockSignals(True)
        self.table.setRowCount(len(codes))
        for row, record in enumerate(codes):
            active_item = QTableWidgetItem()
            active_item.setFlags(Qt.ItemFlag.ItemIsUserCheckable | Qt.ItemFlag.ItemIsEnabled)
            active_item.setCheckState(Qt.CheckState.Checked if record.is_active else Qt.CheckState.Unchecked)
            active_item.setData(Qt.ItemDataRole.UserRole, record.id)
            self.table.setItem(row, 0, active_item)
            self.table.setItem(row, 1, QTableWidgetItem(record.code))
            self.table.setItem(row, 2, QTableWidgetItem(record.student_name or ""))
            self.table.setItem(row, 3, QTableWidgetItem(record.email or ""))
            created = record.created_at.strftime("%d.%m.%Y") if record.created_at else ""
            self.table.setItem(row, 4, QTableWidgetItem(created))
            self.table.setItem(row, 5, QTableWidgetItem(_mail_status(record)))
        self.table.blockSignals(False)
        active = sum(1 for record in codes if record.is_active)
        self.title_label.setText(f"Access Codes ({active} active / {len(codes)} total)")

    def _selected_code(self) -> AccessCode | None:
        row = self.table.currentRow()
        codes = self._toggle.codes
        if row < 0 or row >= len(codes):
            return None
        return codes[row]

    def _set_status(self, message: str, is_error: bool = False) -> None:
        self.status_label.setStyleSheet(Styles.get_status_style(is_error))
        self.status_label.setText(message)

    # --- Actions ---

    def _handle_create_code(self) -> None:
        name = self.name_input.text().strip()
        email = self.email_input.text().strip().lower()
        try:
            record = self.store.create_access_code(generate_readable_code(), name, email)
        except ValueError as exc:
            self._set_status(str(exc), is_error=True)
            return
        except TrainerError as exc:
            show_error(self, "Create failed", exc.user_message)
            return
        self.name_input.clear()
        self.email_input.clear()
        QApplication.clipboard().setText(record.code)
        self._set_status(f"Created code {record.code} (copied to clipboard).")
        self.reload()

    def _handle_item_changed(self, item: QTableWidgetItem) -> None:
        if item.column() != 0:
            return
        code_id = item.data(Qt.ItemDataRole.UserRole)
        if code_id is None:
            return
        try:
            confirmed = self._toggle.toggle(int(code_id))
        except TrainerError as exc:
            show_error(self, "Update failed", exc.user_message)
        else:
            state = "activated" if confirmed.is_active else "deactivated"
            self._set_status(f"Code {confirmed.code} {state}.")
        # Rebuild after the signal returns; the table still owns ``item`` here.
        QTimer.singleShot(0, self._refresh_table)

    def _handle_copy_code(self) -> None:
        record = self._selected_code()
        if record is None:
            show_info(self, "No selection", "Select an access code first.")
            return
        QApplication.clipboard().setText(record.code)
        self._set_status(f"Code {record.code} copied to clipboard.")

    def _handle_delete_code(self) -> None:
        record = self._selected_code()
        if record is None:
            show_info(self, "No selection", "Select an access code first.")
            return
        if not confirm_delete_access_code(self, record.code):
            return
        try:
            self.store.delete_access_code(record.id)
        except TrainerError as exc:
            show_error(self, "Delete failed", exc.user_message)
            return
        self._set_status(f"Code {record.code} deleted.")
        self.reload()


def _mail_status(record: AccessCode) -> str:
    if record.send_status is None:
        return ""
    if record.sent_at is not None:
        return f"{record.send_status} ({record.sent_at.strftime('%d.%m.%Y %H:%M')})"
    return record.send_status
