"""Qt UI components for the admin console."""

from .admin_login_dialog import AdminLoginDialog
from .admin_main_window import AdminMainWindow, AdminMode
from .dialog_helpers import (
    confirm_bulk_delete,
    confirm_delete_access_code,
    confirm_delete_question,
    show_error,
    show_info,
    show_warning,
)
from .question_renderer import render_question_with_options

__all__ = [
    "AdminLoginDialog",
    "AdminMainWindow",
    "AdminMode",
    "confirm_bulk_delete",
    "confirm_delete_access_code",
    "confirm_delete_question",
    "show_error",
    "show_info",
    "show_warning",
    "render_question_with_options",
]
