"""Command-line host for the any door intention."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence, TextIO

from .analysis.locator import PythonSourceAnalyzer, module_name_for_path
from .core.call_site import MethodTarget
from .intention import AnyDoorIntention
from .prompts import PayloadPrompt, PresetPayloadPrompt
from .services.dispatcher import RemoteInvocationDispatcher
from .services.notifications import LoggingNotifier
from .services.session import AnyDoorSession
from .services.settings import Settings, SettingsStore
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}
_LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def configure_logging(debug: bool = False, *, force: bool = False) -> None:
    """Configure file logging; the console only echoes records in debug mode."""

    level = logging.DEBUG if debug else logging.INFO
    logging_utils.setup_logging(level, console=debug, force=force)
    _LOGGER.debug("Logging configured (level=%s)", logging.getLevelName(level))
    _install_qt_message_handler()


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point invoked by the `anydoor` console script."""

    raise SystemExit(run(argv))


def run(argv: Sequence[str] | None = None, *, stdout: TextIO | None = None, stderr: TextIO | None = None) -> int:
    out = stdout or sys.stdout
    err = stderr or sys.stderr
    args = _parse_cli_args(argv)

    debug = _env_flag("ANYDOOR_DEBUG", default=False)
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("ANYDOOR_SETTINGS_PATH")
    store = SettingsStore(Path(settings_path).expanduser() if settings_path else None)
    try:
        overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=err)
        return EXIT_USAGE

    try:
        settings = store.load(overrides=overrides or None)
    except OSError as exc:
        print(f"Unable to read settings from {store.path}: {exc}", file=err)
        return EXIT_FAILED
    if settings.debug_logging and not debug:
        configure_logging(True, force=True)

    if args.dump_settings:
        _dump_settings(settings, store, overrides=overrides, stream=out)
        return EXIT_OK

    if args.clear_cache:
        AnyDoorSession.from_store(store).reset()
        print(f"Cleared argument templates in {store.path}", file=out)
        return EXIT_OK

    if not args.target:
        print("A FILE:LINE[:COLUMN] target is required.", file=err)
        return EXIT_USAGE
    try:
        path, line, column = _parse_target(args.target)
    except ValueError as exc:
        print(f"Invalid target: {exc}", file=err)
        return EXIT_USAGE

    analyzer = PythonSourceAnalyzer(args.module or module_name_for_path(path))
    try:
        target = analyzer.locate_file(path, line, column)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Unable to read {path}: {exc}", file=err)
        return EXIT_FAILED

    if target is None:
        print(f"No invocable member at {args.target}", file=err)
        return EXIT_FAILED

    try:
        prompt = _build_prompt(args.content)
    except RuntimeError as exc:
        print(str(exc), file=err)
        return EXIT_FAILED

    notifier = LoggingNotifier(lambda message: print(message, file=err))
    dispatcher = _build_dispatcher()
    intention = AnyDoorIntention(
        session_provider=_session_provider(store, overrides),
        prompt=prompt,
        dispatcher=dispatcher,
        notifier=notifier,
    )
    dispatched = asyncio.run(_invoke(intention, dispatcher, target))
    if not dispatched or notifier.history:
        return EXIT_FAILED
    call_site = target.call_site
    print(f"Opened any door for {call_site.qualified_type_name}#{call_site.member_name}", file=out)
    return EXIT_OK


async def _invoke(
    intention: AnyDoorIntention, dispatcher: RemoteInvocationDispatcher, target: MethodTarget
) -> bool:
    dispatched = intention.invoke(target)
    # The process exits right after this, so let in-flight requests settle first.
    await dispatcher.aclose()
    return dispatched


def _build_dispatcher() -> RemoteInvocationDispatcher:
    return RemoteInvocationDispatcher()


def _build_prompt(content: str | None) -> PayloadPrompt:
    if content is not None:
        return PresetPayloadPrompt(content)
    try:  # Local import to avoid mandatory PySide6 dependency for scripted use.
        from PySide6.QtWidgets import QApplication

        from .widgets.dialogs import QtPayloadPrompt
    except ImportError as exc:  # pragma: no cover - depends on desktop stack
        raise RuntimeError("PySide6 must be installed to edit payloads interactively; pass --content instead.") from exc

    if QApplication.instance() is None:
        QApplication(sys.argv[:1])
    return QtPayloadPrompt()


def _session_provider(store: SettingsStore, overrides: Mapping[str, Any]) -> Callable[[], AnyDoorSession]:
    loaded: list[AnyDoorSession] = []

    def provide() -> AnyDoorSession:
        if not loaded:
            loaded.append(AnyDoorSession.from_store(store, overrides=overrides or None))
        return loaded[0]

    return provide


def _parse_target(raw: str) -> tuple[Path, int, int]:
    """Split ``FILE:LINE[:COLUMN]``; the file part may itself contain colons."""

    head, sep, tail = raw.rpartition(":")
    if not sep or not tail.isdigit():
        raise ValueError(f"'{raw}' must look like FILE:LINE[:COLUMN]")
    file_part, sep, line_part = head.rpartition(":")
    if sep and line_part.isdigit():
        line, column = int(line_part), int(tail)
    else:
        file_part, line, column = head, int(tail), 0
    if not file_part:
        raise ValueError(f"'{raw}' is missing a file path")
    if line < 1:
        raise ValueError("line numbers start at 1")
    return Path(file_part).expanduser(), line, column


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _install_qt_message_handler() -> None:
    """Send the payload dialog's Qt diagnostics to the anydoor log file."""

    try:
        from PySide6.QtCore import QtMsgType, qInstallMessageHandler
    except ImportError:  # pragma: no cover - scripted runs may lack PySide6
        return

    qt_logger = logging.getLogger("anydoor.qt")
    # Qt debug and info output lands at debug level.
    escalated = {
        QtMsgType.QtWarningMsg: logging.WARNING,
        QtMsgType.QtCriticalMsg: logging.ERROR,
        QtMsgType.QtFatalMsg: logging.CRITICAL,
    }

    def _forward(msg_type, context, message):  # type: ignore[no-untyped-def]
        origin = f" [{context.file}:{context.line}]" if context.file else ""
        qt_logger.log(escalated.get(msg_type, logging.DEBUG), "%s%s", message, origin)

    qInstallMessageHandler(_forward)


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="anydoor",
        description="Send the method under a FILE:LINE[:COLUMN] caret to a local any door server.",
    )
    parser.add_argument(
        "target",
        nargs="?",
        metavar="FILE:LINE[:COLUMN]",
        help="Source position inside the method to invoke.",
    )
    parser.add_argument(
        "--content",
        metavar="JSON",
        help="Use this argument payload instead of opening the editor dialog.",
    )
    parser.add_argument(
        "--module",
        metavar="NAME",
        help="Module name used to qualify the class (derived from the path by default).",
    )
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload and exit.",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Forget every cached argument template and exit.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.anydoor/settings.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings for this run (repeatable).",
    )
    return parser.parse_args(argv)


def _coerce_cli_overrides(items: Sequence[str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for entry in items:
        key, sep, raw_value = entry.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        parse = _OVERRIDE_PARSERS.get(key)
        if parse is None:
            if key in {item.name for item in fields(Settings)}:
                raise ValueError(f"Setting '{key}' is only read from the settings file.")
            raise ValueError(f"Unknown setting '{key}'.")
        overrides[key] = parse(raw_value.strip())
    return overrides


def _parse_port(value: str) -> int:
    try:
        return int(value, 10)
    except ValueError as exc:
        raise ValueError(f"Port must be an integer, got '{value}'.") from exc


def _parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot coerce '{value}' to a boolean.")


_OVERRIDE_PARSERS: Mapping[str, Callable[[str], Any]] = {
    "port": _parse_port,
    "debug_logging": _parse_bool,
}


def _dump_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    metadata = {
        "path": str(store.path),
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": _active_env_overrides(),
    }
    output = {"settings": asdict(settings), "meta": metadata}
    json.dump(output, destination, indent=2)
    destination.write("\n")


def _active_env_overrides() -> list[str]:
    return sorted(name for name in os.environ if name.startswith("ANYDOOR_"))
