"""Application entry point for the exam trainer."""

from __future__ import annotations

import logging
import socket
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication, QDialog

from exam_trainer.constants.quiz_constants import ASSOCIATION_CHOICES
from exam_trainer.core.quiz_importer import QuizImportError, load_questions_from_file
from exam_trainer.core.services.access_code_mailer import AccessCodeMailer
from exam_trainer.core.services.data_store import DataStore
from exam_trainer.core.services.memory_store import MemoryDataStore
from exam_trainer.core.services.question_generator import QuestionGenerator
from exam_trainer.core.services.rate_limiter import SlidingWindowLimiter
from exam_trainer.core.services.rest_store import RestDataStore
from exam_trainer.core.services.trainer_manager import TrainerManager
from exam_trainer.server.api_server import start_api_server
from exam_trainer.ui.admin_login_dialog import AdminLoginDialog
from exam_trainer.ui.admin_main_window import AdminMainWindow
from exam_trainer.utils.logging_config import configure_logging
from exam_trainer.utils.settings import Settings, load_settings

logger = logging.getLogger("exam_trainer")

# Keeps the current admin window alive between logins.
_open_windows: list[AdminMainWindow] = []


def _determine_student_url(settings: Settings) -> str:
    """Best-effort determination of the student-facing URL."""
    if settings.app_url:
        return settings.app_url
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{settings.port}/"


def _build_store(settings: Settings) -> DataStore:
    if settings.store_url:
        logger.info("Using REST backend at %s", settings.store_url)
        return RestDataStore(
            settings.store_url,
            settings.store_api_key,
            bucket=settings.study_guide_bucket,
            timeout=settings.store_timeout_seconds,
            access_code_max_age_days=settings.access_code_max_age_days,
        )

    logger.info("No STORE_URL configured; using the in-memory demo store")
    admin_users = {settings.admin_username: settings.admin_password} if settings.admin_password else {}
    store = MemoryDataStore(admin_users=admin_users, access_code_max_age_days=settings.access_code_max_age_days)
    if settings.demo_questions_file:
        try:
            imported = load_questions_from_file(Path(settings.demo_questions_file), ASSOCIATION_CHOICES[0])
            store.create_questions(imported.questions)
            logger.info("Loaded %d demo questions", len(imported.questions))
        except (OSError, QuizImportError) as exc:
            logger.warning("Demo questions could not be loaded: %s", exc)
    if settings.demo_access_code:
        store.create_access_code(settings.demo_access_code, "Demo", "demo@example.org")
    return store


def _build_mailer(settings: Settings, store: DataStore, student_url: str) -> AccessCodeMailer:
    return AccessCodeMailer(
        store,
        api_url=settings.mail_api_url,
        api_key=settings.mail_api_key,
        sender=settings.mail_sender,
        app_url=student_url,
        email_limiter=SlidingWindowLimiter(settings.self_service_email_limit, settings.self_service_window_seconds),
        ip_limiter=SlidingWindowLimiter(settings.self_service_ip_limit, settings.self_service_window_seconds),
    )


def _open_admin_console(
    app: QApplication,
    manager: TrainerManager,
    generator: QuestionGenerator | None,
    student_url: str,
) -> bool:
    """Ask for admin credentials and show the console; False when the login was cancelled."""
    dialog = AdminLoginDialog(manager.store.validate_admin_credentials)
    if dialog.exec() != QDialog.DialogCode.Accepted:
        return False
    logger.info("Admin %s logged in", dialog.username)

    def handle_logout() -> None:
        if not _open_admin_console(app, manager, generator, student_url):
            app.quit()

    window = AdminMainWindow(manager, generator, student_url, on_logout=handle_logout)
    _open_windows[:] = [window]
    window.show()
    return True


def main() -> None:
    """Initialize logging, start the API server, and launch the Qt admin console."""
    configure_logging()
    settings = load_settings()
    logger.info("Starting exam trainer…")

    student_url = _determine_student_url(settings)
    store = _build_store(settings)
    manager = TrainerManager(
        store,
        mailer=_build_mailer(settings, store, student_url),
        passing_percentage=settings.passing_percentage,
        track_by_index=settings.shuffle_track_by_index,
    )
    server_thread = start_api_server(
        manager,
        host=settings.host,
        port=settings.port,
        trust_proxy_headers=settings.trust_proxy_headers,
    )
    logger.info("Student page available at %s", student_url)

    if settings.headless:
        server_thread.join()
        return

    generator = QuestionGenerator.from_settings(settings) if settings.generator_enabled else None
    app = QApplication(sys.argv)
    if not _open_admin_console(app, manager, generator, student_url):
        return
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
