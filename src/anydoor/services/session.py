"""Session object owning the port and the argument template cache."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Mapping, MutableMapping

from .settings import Settings, SettingsStore

__all__ = ["ArgumentTemplateCache", "AnyDoorSession"]

LOGGER = logging.getLogger(__name__)


class ArgumentTemplateCache:
    """Unbounded signature-key to JSON-text mapping.

    Entries live as long as the owning session and are only dropped by
    :meth:`clear`. ``on_change`` fires after every mutation so the owner can
    persist the backing mapping.
    """

    def __init__(
        self,
        entries: MutableMapping[str, str] | None = None,
        *,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._entries: MutableMapping[str, str] = entries if entries is not None else {}
        self._on_change = on_change

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def put(self, key: str, value: str) -> None:
        self._entries[key] = value
        self._changed()

    def clear(self) -> None:
        if not self._entries:
            return
        self._entries.clear()
        self._changed()

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()


class AnyDoorSession:
    """Configuration/session store consumed by the invocation façade."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: SettingsStore | None = None,
        autosave: bool = True,
    ) -> None:
        self._settings = settings or Settings()
        self._store = store
        self._autosave = autosave and store is not None
        self._cache = ArgumentTemplateCache(self._settings.argument_cache, on_change=self._persist)

    @classmethod
    def from_store(
        cls, store: SettingsStore, *, overrides: Mapping[str, Any] | None = None
    ) -> "AnyDoorSession":
        return cls(store.load(overrides=overrides), store=store)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def port(self) -> int:
        return self._settings.port

    @property
    def cache(self) -> ArgumentTemplateCache:
        return self._cache

    def get_cache(self, key: str) -> str | None:
        return self._cache.get(key)

    def put_cache(self, key: str, value: str) -> None:
        self._cache.put(key, value)

    def reset(self) -> None:
        """Drop every cached argument template."""

        count = len(self._cache)
        self._cache.clear()
        LOGGER.info("Cleared %d cached argument template(s)", count)

    def _persist(self) -> None:
        if not self._autosave or self._store is None:
            return
        try:
            self._store.save_argument_cache(self._settings.argument_cache)
        except OSError as exc:
            LOGGER.warning("Failed to persist argument cache to %s: %s", self._store.path, exc)
