"""Service layer helpers (settings, session, dispatch, notifications)."""

from .dispatcher import RemoteInvocationDispatcher
from .notifications import LoggingNotifier, NotificationSink
from .session import AnyDoorSession, ArgumentTemplateCache
from .settings import Settings, SettingsStore

__all__ = [
    "AnyDoorSession",
    "ArgumentTemplateCache",
    "LoggingNotifier",
    "NotificationSink",
    "RemoteInvocationDispatcher",
    "Settings",
    "SettingsStore",
]
