"""Color palette for the admin console supporting light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    """Application theme options."""
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    """Color definitions for a specific theme."""
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        """Get color value for the specified theme."""
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the application."""

    TEXT_PRIMARY = ThemeColors(light="#1F2937", dark="#F5F5F5")
    TEXT_SECONDARY = ThemeColors(light="#6B7280", dark="#AAAAAA")

    BACKGROUND_PRIMARY = ThemeColors(light="#FFFFFF", dark="#1E1E1E")
    BACKGROUND_SECONDARY = ThemeColors(light="#F2F4F7", dark="#2D2D2D")

    # Association blue, also used for the PDF table header
    ACCENT_PRIMARY = ThemeColors(light="#0B79D0", dark="#4A9EFF")
    ACCENT_DARK = ThemeColors(light="#0968B4", dark="#2F7FD8")

    SUCCESS = ThemeColors(light="#15803D", dark="#6FCF6F")
    WARNING = ThemeColors(light="#B45309", dark="#FFC83D")
    ERROR = ThemeColors(light="#B91C1C", dark="#FF6B6B")

    BORDER_PRIMARY = ThemeColors(light="#CBD5E1", dark="#555555")
    SELECTION_BG = ThemeColors(light="#E0F2FE", dark="#1E3A5F")

    BUTTON_PRIMARY_TEXT = ThemeColors(light="#FFFFFF", dark="#000000")
    BUTTON_SECONDARY_BG = ThemeColors(light="#F5F5F5", dark="#3A3A3A")
    BUTTON_HOVER_BG = ThemeColors(light="#E8E8E8", dark="#505050")
