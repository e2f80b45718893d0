"""Shared pytest fixtures."""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from anydoor.core.call_site import CallSite, MethodTarget  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in ("ANYDOOR_PORT", "ANYDOOR_DEBUG_LOGGING", "ANYDOOR_DEBUG", "ANYDOOR_SETTINGS_PATH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ANYDOOR_LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture
def user_target() -> MethodTarget:
    return MethodTarget(
        call_site=CallSite("com.example.UserService", "rename", ("long", "java.lang.String")),
        parameter_names=("id", "name"),
    )


@pytest.fixture
def no_arg_target() -> MethodTarget:
    return MethodTarget(call_site=CallSite("com.example.UserService", "refresh"))
