"""Editable JSON payload dialog used by the any door intention."""

from __future__ import annotations

import json
import logging
from typing import Callable

from PySide6.QtGui import QFontDatabase
from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QHBoxLayout,
    QLabel,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ...prompts import PROMPT_TITLE

__all__ = [
    "TextAreaDialog",
    "QtPayloadPrompt",
    "HINT_COLORS",
]

LOGGER = logging.getLogger(__name__)
HINT_COLORS = {
    "info": "#6a737d",
    "success": "#1a7f37",
    "error": "#d73a49",
}


class TextAreaDialog(QDialog):
    """Modal dialog holding a plain-text editor pre-filled with JSON."""

    def __init__(
        self,
        initial_text: str = "",
        *,
        parent: QWidget | None = None,
        title: str = PROMPT_TITLE,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.resize(560, 360)
        self._ok_action: Callable[[], None] | None = None

        layout = QVBoxLayout(self)

        self._editor = QPlainTextEdit()
        self._editor.setObjectName("payload_editor")
        self._editor.setFont(QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont))
        self._editor.setPlainText(initial_text)
        layout.addWidget(self._editor, 1)

        self._hint_label = QLabel("")
        self._hint_label.setObjectName("payload_hint_label")
        self._hint_label.setWordWrap(True)
        layout.addWidget(self._hint_label)

        format_button = QPushButton("Format JSON")
        format_button.setObjectName("payload_format_button")
        format_button.clicked.connect(self.format_json)

        self._buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self._buttons.setObjectName("payload_buttons")
        self._buttons.accepted.connect(self._on_accept)
        self._buttons.rejected.connect(self.reject)

        button_row = QHBoxLayout()
        button_row.addWidget(format_button, 0)
        button_row.addStretch(1)
        button_row.addWidget(self._buttons, 0)
        layout.addLayout(button_row)

    def text(self) -> str:
        return self._editor.toPlainText()

    def set_text(self, text: str) -> None:
        self._editor.setPlainText(text)

    def set_ok_action(self, action: Callable[[], None] | None) -> None:
        """Register the callback fired when the user confirms with OK."""

        self._ok_action = action

    def hint_text(self) -> str:
        return self._hint_label.text()

    def format_json(self) -> bool:
        """Re-indent the payload in place; leave it untouched and show why when invalid."""

        try:
            parsed = json.loads(self.text())
        except json.JSONDecodeError as exc:
            self._set_hint(f"Invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})", "error")
            return False
        self.set_text(json.dumps(parsed, indent=2, ensure_ascii=False))
        self._set_hint("JSON formatted.", "success")
        return True

    def _set_hint(self, message: str, level: str = "info") -> None:
        color = HINT_COLORS.get(level, HINT_COLORS["info"])
        self._hint_label.setStyleSheet(f"color: {color};")
        self._hint_label.setText(message)

    def _on_accept(self) -> None:
        if self._ok_action is not None:
            self._ok_action()
        self.accept()


class QtPayloadPrompt:
    """:class:`~anydoor.prompts.PayloadPrompt` backed by :class:`TextAreaDialog`."""

    def __init__(self, parent: QWidget | None = None, *, title: str = PROMPT_TITLE) -> None:
        self._parent = parent
        self._title = title

    def present(self, initial_text: str) -> str | None:
        dialog = TextAreaDialog(initial_text, parent=self._parent, title=self._title)
        confirmed: list[str] = []
        dialog.set_ok_action(lambda: confirmed.append(dialog.text()))
        dialog.exec()
        dialog.deleteLater()
        if not confirmed:
            LOGGER.debug("Payload dialog dismissed")
            return None
        return confirmed[0]
