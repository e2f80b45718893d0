"""Settings dataclass and persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = [
    "Settings",
    "SettingsStore",
    "DEFAULT_PORT",
    "SETTINGS_DIR",
]

LOGGER = logging.getLogger(__name__)
SETTINGS_DIR = Path.home() / ".anydoor"
_DEFAULT_SETTINGS_PATH = SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
DEFAULT_PORT = 8080
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "ANYDOOR_DEBUG_LOGGING": "debug_logging",
}
_INT_ENV_OVERRIDES: Mapping[str, str] = {
    "ANYDOOR_PORT": "port",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
# Rewritten to disk on every cache update; only ever loaded from the file.
_PERSISTED_ONLY_FIELDS = frozenset({"argument_cache"})


@dataclass(slots=True)
class Settings:
    """User-configurable settings persisted between sessions."""

    port: int = DEFAULT_PORT
    debug_logging: bool = False
    argument_cache: dict[str, str] = field(default_factory=dict)


class SettingsStore:
    """Persistence adapter for :class:`Settings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Load settings from disk, applying CLI/environment overrides when present."""

        payload = self._read_payload()
        settings = Settings()
        if payload:
            data = _filter_fields(payload)
            data["argument_cache"] = _coerce_cache(data.get("argument_cache"))
            try:
                settings = Settings(**data)
            except TypeError as exc:
                LOGGER.warning("Settings payload contained unexpected data: %s", exc)
                settings = Settings()
            if not _valid_port(settings.port):
                LOGGER.warning("Ignoring invalid port %r in %s", settings.port, self._path)
                settings = replace(settings, port=DEFAULT_PORT)
        LOGGER.debug(
            "Settings loaded from %s: port=%s, %d cached template(s)",
            self._path,
            settings.port,
            len(settings.argument_cache),
        )

        if overrides:
            settings = self._apply_overrides(settings, overrides, source="CLI")

        return self._apply_env_overrides(settings)

    def save(self, settings: Settings) -> Path:
        """Persist settings to disk with atomic file writes."""

        self._write_payload(asdict(settings))
        LOGGER.debug(
            "Settings saved to %s: %d cached template(s)",
            self._path,
            len(settings.argument_cache),
        )
        return self._path

    def save_argument_cache(self, entries: Mapping[str, str]) -> Path:
        """Rewrite only the argument cache, leaving the other persisted fields as found.

        Runtime overrides applied by :meth:`load` never leak to disk this way.
        """

        payload = self._read_payload()
        payload["argument_cache"] = dict(entries)
        self._write_payload(payload)
        LOGGER.debug("Argument cache saved to %s: %d template(s)", self._path, len(entries))
        return self._path

    def _write_payload(self, payload: Dict[str, Any]) -> None:
        payload["version"] = _SETTINGS_VERSION
        body = json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            data = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(data, Mapping):
            LOGGER.warning("Settings file %s does not contain a JSON object", self._path)
            return {}
        return dict(data)

    def _apply_overrides(
        self,
        settings: Settings,
        overrides: Mapping[str, Any],
        *,
        source: str = "runtime",
    ) -> Settings:
        allowed = {item.name for item in fields(Settings)} - _PERSISTED_ONLY_FIELDS
        filtered: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key in _PERSISTED_ONLY_FIELDS:
                LOGGER.warning("Ignoring %s override for %s; it is only read from disk", source, key)
                continue
            if key not in allowed or value is None:
                continue
            filtered[key] = value
        if "port" in filtered and not _valid_port(filtered["port"]):
            LOGGER.warning("Ignoring %s port override %r", source, filtered.pop("port"))
        if filtered:
            LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
            settings = replace(settings, **filtered)
        return settings

    def _apply_env_overrides(self, settings: Settings) -> Settings:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        for env_name, field_name in _INT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = int(value, 10)
            except ValueError:
                LOGGER.warning(
                    "Environment override %s=%s is not a valid integer",
                    env_name,
                    value,
                )
        if overrides:
            settings = self._apply_overrides(settings, overrides, source="environment")
        return settings


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {item.name for item in fields(Settings)}
    return {key: value for key, value in payload.items() if key in allowed}


def _coerce_cache(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        if value not in (None, ""):
            LOGGER.debug("Ignoring non-mapping argument cache of type %s", type(value))
        return {}
    return {key: entry for key, entry in value.items() if isinstance(key, str) and isinstance(entry, str)}


def _valid_port(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value < 65536
