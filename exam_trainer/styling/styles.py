"""Qt stylesheets for the admin console."""

from .color_palette import ColorPalette, Theme


class Styles:
    """Builds the console stylesheets for a theme."""

    @staticmethod
    def get_main_window_style(theme: Theme = Theme.LIGHT) -> str:
        text = ColorPalette.TEXT_PRIMARY.get(theme)
        muted = ColorPalette.TEXT_SECONDARY.get(theme)
        base = ColorPalette.BACKGROUND_PRIMARY.get(theme)
        panel = ColorPalette.BACKGROUND_SECONDARY.get(theme)
        border = ColorPalette.BORDER_PRIMARY.get(theme)
        accent = ColorPalette.ACCENT_PRIMARY.get(theme)
        return f"""
            QMainWindow, QDialog {{
                background-color: {panel};
                color: {text};
            }}
            QWidget {{
                color: {text};
                font-family: 'Segoe UI', 'Roboto', sans-serif;
                font-size: 13px;
            }}
            QPushButton {{
                background-color: {ColorPalette.BUTTON_SECONDARY_BG.get(theme)};
                border: 1px solid {border};
                border-radius: 4px;
                padding: 5px 10px;
            }}
            QPushButton:hover {{
                background-color: {ColorPalette.BUTTON_HOVER_BG.get(theme)};
            }}
            QPushButton:checked, QPushButton[primary="true"] {{
                background-color: {accent};
                color: {ColorPalette.BUTTON_PRIMARY_TEXT.get(theme)};
                border-color: {ColorPalette.ACCENT_DARK.get(theme)};
            }}
            QPushButton[danger="true"] {{
                color: {ColorPalette.ERROR.get(theme)};
                border-color: {ColorPalette.ERROR.get(theme)};
            }}
            QPushButton:disabled {{
                color: {muted};
                border-color: {border};
            }}
            QLineEdit, QPlainTextEdit, QComboBox, QTextBrowser {{
                background-color: {base};
                border: 1px solid {border};
                border-radius: 4px;
                padding: 3px;
            }}
            QLineEdit:focus, QPlainTextEdit:focus {{
                border-color: {accent};
            }}
            QTableWidget {{
                background-color: {base};
                alternate-background-color: {panel};
                border: 1px solid {border};
                gridline-color: {border};
                selection-background-color: {ColorPalette.SELECTION_BG.get(theme)};
                selection-color: {text};
            }}
            QHeaderView::section {{
                background-color: {panel};
                border: none;
                border-bottom: 2px solid {accent};
                padding: 5px;
                font-weight: bold;
            }}
        """

    @staticmethod
    def get_large_label_style() -> str:
        return "font-size: 16pt; font-weight: bold;"

    @staticmethod
    def get_server_banner_style(theme: Theme = Theme.LIGHT) -> str:
        """Footer line showing the student URL and the session count."""
        return (
            f"background-color: {ColorPalette.SELECTION_BG.get(theme)};"
            f" color: {ColorPalette.ACCENT_DARK.get(theme)};"
            " padding: 4px 8px; border-radius: 4px;"
        )

    @staticmethod
    def get_status_style(is_error: bool, theme: Theme = Theme.LIGHT) -> str:
        color = ColorPalette.ERROR if is_error else ColorPalette.SUCCESS
        return f"color: {color.get(theme)};"
