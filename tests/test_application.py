from __future__ import annotations

import pytest

from shellagent.commands.permissions import PrivilegeGate, console_confirm
from shellagent.constants import API_KEY_ENV_VAR
from shellagent.core import application as application_module
from shellagent.core.application import create_application
from shellagent.errors import ConfigError, ServiceError


class RaisingLoop:
    def __init__(self, exc: BaseException) -> None:
        self.exc = exc

    def run(self, task: str):
        raise self.exc


@pytest.fixture(autouse=True)
def _isolated(monkeypatch):
    monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)
    monkeypatch.setattr(application_module.signal, "signal", lambda *args: None)


def test_missing_api_key_is_config_error(tmp_path) -> None:
    with pytest.raises(ConfigError, match=API_KEY_ENV_VAR):
        create_application(config_dir=str(tmp_path))


def test_wiring_follows_configuration(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(API_KEY_ENV_VAR, "sk-test")
    def confirm(prompt: str) -> bool:
        return False

    app = create_application(
        config_dir=str(tmp_path / "cfg"),
        overrides={"output_dir": str(tmp_path / "runs"), "max_iterations": 7, "command_timeout": 12, "force_root": True},
        confirm=confirm,
    )

    assert app.client.api_key == "sk-test"
    assert app.loop.max_iterations == 7
    assert app.loop.command_timeout == 12
    assert app.loop.output_dir == tmp_path / "runs"
    assert app.executor.default_timeout == 12
    assert app.privilege_gate.force_root is True
    assert app.privilege_gate.confirm is confirm


@pytest.mark.parametrize("exc", [ServiceError("API Error: overloaded"), KeyboardInterrupt()])
def test_aborted_run_returns_none(tmp_path, monkeypatch, exc) -> None:
    monkeypatch.setenv(API_KEY_ENV_VAR, "sk-test")
    app = create_application(config_dir=str(tmp_path), overrides={"output_dir": str(tmp_path / "runs")})
    app.loop = RaisingLoop(exc)

    assert app.run_task("anything") is None


@pytest.mark.parametrize(("typed", "expected"), [("y", True), ("YES", True), ("", False), ("n", False)])
def test_console_confirm(monkeypatch, typed: str, expected: bool) -> None:
    monkeypatch.setattr("builtins.input", lambda prompt: typed)

    assert console_confirm("Allow?") is expected


def test_console_confirm_without_terminal_declines(monkeypatch) -> None:
    def eof(prompt):
        raise EOFError

    monkeypatch.setattr("builtins.input", eof)

    assert console_confirm("Allow?") is False


def test_privilege_gate_asks_unless_forced() -> None:
    prompts: list[str] = []

    def deny(prompt: str) -> bool:
        prompts.append(prompt)
        return False

    assert PrivilegeGate(confirm=deny).allow("fdisk -l") is False
    assert PrivilegeGate(force_root=True, confirm=deny).allow("fdisk -l") is True
    assert len(prompts) == 1
