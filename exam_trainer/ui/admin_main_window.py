"""Qt main window of the admin console: question bank and access codes."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from exam_trainer.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from exam_trainer.constants.ui_constants import (
    MODE_BUTTON_ABOUT,
    MODE_BUTTON_ACCESS_CODES,
    MODE_BUTTON_HELP,
    MODE_BUTTON_LOGOUT,
    MODE_BUTTON_QUESTIONS,
    STATUS_REFRESH_INTERVAL_MS,
    STUDENT_URL_PLACEHOLDER,
    WINDOW_TITLE,
)
from exam_trainer.core.services.question_generator import QuestionGenerator
from exam_trainer.core.services.trainer_manager import TrainerManager
from exam_trainer.styling.styles import Styles
from exam_trainer.ui.components.access_code_panel import AccessCodePanel
from exam_trainer.ui.components.question_bank_panel import QuestionBankPanel
from exam_trainer.ui.dialog_helpers import show_info


class AdminMode(Enum):
    """Page shown in the admin console."""

    QUESTIONS = auto()
    ACCESS_CODES = auto()


class AdminMainWindow(QMainWindow):
    """Main Qt window switching between the question bank and the access codes."""

    def __init__(
        self,
        manager: TrainerManager,
        generator: QuestionGenerator | None = None,
        student_url: str | None = None,
        on_logout: Callable[[], None] | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.manager = manager
        self.generator = generator
        self.student_url = student_url or STUDENT_URL_PLACEHOLDER
        self._on_logout = on_logout
        self._mode = AdminMode.QUESTIONS

        self._build_ui()
        self._configure_refresh_timer()
        self.setStyleSheet(Styles.get_main_window_style())
        self.question_panel.reload()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_mode_buttons(root_layout)

        self.mode_stack = QStackedWidget(self)
        self.question_panel = QuestionBankPanel(self.manager.store, self.generator, self)
        self.access_code_panel = AccessCodePanel(self.manager.store, self)
        self.mode_stack.addWidget(self.question_panel)
        self.mode_stack.addWidget(self.access_code_panel)
        root_layout.addWidget(self.mode_stack)

        self.server_label = QLabel("", self)
        self.server_label.setStyleSheet(Styles.get_server_banner_style())
        root_layout.addWidget(self.server_label)

        self._set_mode(AdminMode.QUESTIONS)

    def _build_mode_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.questions_mode_button = QPushButton(MODE_BUTTON_QUESTIONS, self)
        self.questions_mode_button.setCheckable(True)
        self.questions_mode_button.clicked.connect(lambda: self._set_mode(AdminMode.QUESTIONS))
        button_row.addWidget(self.questions_mode_button)

        self.codes_mode_button = QPushButton(MODE_BUTTON_ACCESS_CODES, self)
        self.codes_mode_button.setCheckable(True)
        self.codes_mode_button.clicked.connect(lambda: self._set_mode(AdminMode.ACCESS_CODES))
        button_row.addWidget(self.codes_mode_button)

        button_row.addStretch()

        self.about_button = QPushButton(MODE_BUTTON_ABOUT, self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton(MODE_BUTTON_HELP, self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        self.logout_button = QPushButton(MODE_BUTTON_LOGOUT, self)
        self.logout_button.clicked.connect(self._handle_logout)
        button_row.addWidget(self.logout_button)

        layout.addLayout(button_row)

    def _configure_refresh_timer(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(STATUS_REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self._refresh_server_status)
        self.refresh_timer.start()
        self._refresh_server_status()

    def _refresh_server_status(self) -> None:
        sessions = self.manager.active_session_count()
        self.server_label.setText(f"Student page: {self.student_url}    Logged-in students: {sessions}")

    def _set_mode(self, mode: AdminMode) -> None:
        self._mode = mode
        self.questions_mode_button.setChecked(mode == AdminMode.QUESTIONS)
        self.codes_mode_button.setChecked(mode == AdminMode.ACCESS_CODES)

        index_map = {
            AdminMode.QUESTIONS: 0,
            AdminMode.ACCESS_CODES: 1,
        }
        self.mode_stack.setCurrentIndex(index_map[mode])
        if mode == AdminMode.ACCESS_CODES:
            self.access_code_panel.reload()

    def _handle_about(self) -> None:
        details = f"{APP_NAME} v{APP_VERSION}\nLicense: {APP_LICENSE}\n\n{APP_ABOUT_TEXT}"
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)

    def _handle_logout(self) -> None:
        self.refresh_timer.stop()
        self.hide()
        if self._on_logout is not None:
            self._on_logout()
        self.close()
