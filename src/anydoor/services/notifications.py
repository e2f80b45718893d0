"""Notification sinks for user-visible error messages."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol, runtime_checkable

__all__ = ["NotificationSink", "LoggingNotifier"]

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class NotificationSink(Protocol):
    """Receives human-readable error strings for display."""

    def notify_error(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Sink that logs every error and forwards it to optional listeners.

    The dispatcher may report from a worker thread, so the history is guarded
    and listeners must be thread-safe themselves.
    """

    def __init__(self, *listeners: Callable[[str], None], logger: logging.Logger | None = None) -> None:
        self._listeners = list(listeners)
        self._logger = logger or LOGGER
        self._lock = threading.Lock()
        self._history: list[str] = []

    @property
    def history(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._history)

    def add_listener(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def notify_error(self, message: str) -> None:
        message = (message or "").strip()
        if not message:
            return
        with self._lock:
            self._history.append(message)
        self._logger.error(message)
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                self._logger.debug("Notification listener failed", exc_info=True)
