"""Dialog widgets for the any door intention."""

from .text_area import HINT_COLORS, QtPayloadPrompt, TextAreaDialog

__all__ = ["HINT_COLORS", "QtPayloadPrompt", "TextAreaDialog"]
