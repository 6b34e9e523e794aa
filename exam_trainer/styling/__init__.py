"""Styling module for the ExamTrainer admin console."""

from .color_palette import ColorPalette, Theme

__all__ = ["ColorPalette", "Theme"]
