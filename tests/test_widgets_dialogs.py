"""Tests for the payload dialog widgets."""

from __future__ import annotations

import json

import pytest
from PySide6.QtWidgets import QDialogButtonBox, QLabel, QPlainTextEdit, QPushButton

from anydoor.prompts import PROMPT_TITLE, PayloadPrompt
from anydoor.widgets.dialogs import QtPayloadPrompt, TextAreaDialog


def _click(dialog: TextAreaDialog, button: QDialogButtonBox.StandardButton) -> int:
    box = dialog.findChild(QDialogButtonBox, "payload_buttons")
    assert box is not None
    box.button(button).click()
    return 0


def test_dialog_prefills_editor_and_title(qtbot) -> None:
    dialog = TextAreaDialog('{"id": null}')
    qtbot.addWidget(dialog)

    editor = dialog.findChild(QPlainTextEdit, "payload_editor")

    assert editor is not None
    assert editor.toPlainText() == '{"id": null}'
    assert dialog.windowTitle() == PROMPT_TITLE
    assert dialog.isModal()


def test_ok_runs_action_with_edited_text(qtbot) -> None:
    dialog = TextAreaDialog("{}")
    qtbot.addWidget(dialog)
    seen: list[str] = []
    dialog.set_ok_action(lambda: seen.append(dialog.text()))
    dialog.set_text('{"id": 5}')

    _click(dialog, QDialogButtonBox.StandardButton.Ok)

    assert seen == ['{"id": 5}']


def test_cancel_skips_action(qtbot) -> None:
    dialog = TextAreaDialog("{}")
    qtbot.addWidget(dialog)
    seen: list[str] = []
    dialog.set_ok_action(lambda: seen.append(dialog.text()))

    _click(dialog, QDialogButtonBox.StandardButton.Cancel)

    assert seen == []


def test_format_button_reindents_valid_json(qtbot) -> None:
    dialog = TextAreaDialog('{"id":5,"name":"a"}')
    qtbot.addWidget(dialog)

    button = dialog.findChild(QPushButton, "payload_format_button")
    assert button is not None
    button.click()

    assert dialog.text() == json.dumps({"id": 5, "name": "a"}, indent=2)
    assert dialog.hint_text() == "JSON formatted."


def test_format_keeps_invalid_json_and_explains(qtbot) -> None:
    dialog = TextAreaDialog('{"id": }')
    qtbot.addWidget(dialog)

    assert dialog.format_json() is False
    assert dialog.text() == '{"id": }'
    hint = dialog.findChild(QLabel, "payload_hint_label")
    assert hint is not None
    assert hint.text().startswith("Invalid JSON")


def test_qt_prompt_returns_confirmed_text(qtbot, monkeypatch: pytest.MonkeyPatch) -> None:
    def _confirm(self: TextAreaDialog) -> int:
        self.set_text('{"id": 7}')
        return _click(self, QDialogButtonBox.StandardButton.Ok)

    monkeypatch.setattr(TextAreaDialog, "exec", _confirm)
    prompt = QtPayloadPrompt()

    assert isinstance(prompt, PayloadPrompt)
    assert prompt.present('{"id": null}') == '{"id": 7}'


def test_qt_prompt_returns_none_when_dismissed(qtbot, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        TextAreaDialog, "exec", lambda self: _click(self, QDialogButtonBox.StandardButton.Cancel)
    )

    assert QtPayloadPrompt().present('{"id": null}') is None
