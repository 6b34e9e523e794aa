"""Helper functions for common dialog patterns in the admin console."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget


def _confirm(parent: QWidget, title: str, message: str) -> bool:
    reply = QMessageBox.question(
        parent,
        title,
        message,
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No
    )
    return reply == QMessageBox.Yes


def confirm_delete_question(parent: QWidget, question_text: str) -> bool:
    """Show confirmation dialog for deleting a single question.

    Args:
        parent: Parent widget for the dialog
        question_text: Text of the question, shortened for display

    Returns:
        True if user confirmed, False otherwise
    """
    preview = question_text if len(question_text) <= 80 else question_text[:77] + "..."
    return _confirm(
        parent,
        "Confirm Delete",
        f"Do you really want to delete this question?\n\n{preview}",
    )


def confirm_bulk_delete(parent: QWidget, count: int) -> bool:
    """Show confirmation dialog for deleting all selected questions."""
    return _confirm(
        parent,
        "Confirm Bulk Delete",
        f"Do you really want to delete {count} selected questions? This cannot be undone.",
    )


def confirm_delete_access_code(parent: QWidget, code: str) -> bool:
    return _confirm(
        parent,
        "Confirm Delete",
        f"Delete access code {code}? Students using it will no longer be able to log in.",
    )


def show_error(parent: QWidget, title: str, message: str) -> None:
    """Show error dialog.

    Args:
        parent: Parent widget for the dialog
        title: Dialog title
        message: Error message
    """
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.information(parent, title, message)


def show_warning(parent: QWidget, title: str, message: str) -> None:
    """Show warning dialog.

    Args:
        parent: Parent widget for the dialog
        title: Dialog title
        message: Warning message
    """
    QMessageBox.warning(parent, title, message)
