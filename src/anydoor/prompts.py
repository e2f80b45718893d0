"""Payload prompt contract shared by the façade and its UI realisations."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

__all__ = ["PayloadPrompt", "PresetPayloadPrompt", "PROMPT_TITLE"]

PROMPT_TITLE = "Generate call code"


@runtime_checkable
class PayloadPrompt(Protocol):
    """Modal, single-shot editor for the JSON argument text.

    Returns the confirmed text, or ``None`` when the user dismisses.
    """

    def present(self, initial_text: str) -> str | None:
        ...


class PresetPayloadPrompt:
    """Non-interactive prompt that confirms a fixed payload."""

    def __init__(self, text: str | None) -> None:
        self._text = text

    def present(self, initial_text: str) -> str | None:
        del initial_text
        return self._text
