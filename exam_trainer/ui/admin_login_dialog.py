"""Login dialog shown before the admin console opens."""

from __future__ import annotations

import logging
from collections.abc import Callable

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
    QWidget,
)

from exam_trainer.constants.ui_constants import LOGIN_DIALOG_TITLE, LOGIN_FAILED_MESSAGE
from exam_trainer.core.errors import TrainerError
from exam_trainer.styling.styles import Styles

logger = logging.getLogger(__name__)


class AdminLoginDialog(QDialog):
    """Asks for admin credentials and checks them through ``validate``."""

    def __init__(self, validate: Callable[[str, str], bool], parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(LOGIN_DIALOG_TITLE)
        self._validate = validate
        self._username: str | None = None
        self._build_ui()

    @property
    def username(self) -> str | None:
        return self._username

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        form = QFormLayout()
        self.username_input = QLineEdit(self)
        form.addRow("Username", self.username_input)
        self.password_input = QLineEdit(self)
        self.password_input.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Password", self.password_input)
        layout.addLayout(form)

        self.error_label = QLabel("", self)
        self.error_label.setStyleSheet(Styles.get_status_style(is_error=True))
        layout.addWidget(self.error_label)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel, self)
        buttons.accepted.connect(self._handle_login)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _handle_login(self) -> None:
        username = self.username_input.text().strip()
        password = self.password_input.text()
        self.error_label.setText("")
        try:
            accepted = self._validate(username, password)
        except TrainerError as exc:
            logger.warning("Admin login could not be checked: %s", exc)
            self._fail(exc.user_message)
            return
        if not accepted:
            self._fail(LOGIN_FAILED_MESSAGE)
            return
        self._username = username
        self.accept()

    def _fail(self, message: str) -> None:
        self.error_label.setText(message)
        self.password_input.clear()
        self.password_input.setFocus()
