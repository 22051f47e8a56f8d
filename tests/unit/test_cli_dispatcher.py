"""
Unit tests for ecflow_light.dispatch.cli_dispatcher and the process runner.

No process is spawned: the dispatcher receives a fake runner, and
subprocess.run is monkeypatched where the runner itself is tested.
"""

from __future__ import annotations

from typing import List

import pytest

from ecflow_light.core.config.yaml_config import ClientCfg
from ecflow_light.core.environment import Environment
from ecflow_light.core.options import Options
from ecflow_light.dispatch.cli_dispatcher import CLIDispatcher
from ecflow_light.domain.errors import NotImplementedRequest, TransportError
from ecflow_light.domain.models import ClientKind, Protocol
from ecflow_light.domain.requests import update_node_attribute, update_node_status
from ecflow_light.transport.process_runner import run_command

CFG = ClientCfg(kind=ClientKind.CLI, protocol=Protocol.TCP)


def _mk_environment() -> Environment:
    return (
        Environment()
        .with_variable("ECF_RID", "1")
        .with_variable("ECF_NAME", "/s/f/t")
        .with_variable("ECF_PASS", "pw")
        .with_variable("ECF_TRYNO", "1")
    )


class FakeRunner:
    """Runner double recording commands and returning a fixed exit code."""

    def __init__(self, code: int = 0) -> None:
        self.code = code
        self.commands: List[str] = []

    def __call__(self, command: str) -> int:
        self.commands.append(command)
        return self.code


def test_dispatch_runs_formatted_command() -> None:
    runner = FakeRunner()
    options = Options().with_option("command", "event").with_option("name", "ready").with_option("value", "0")

    response = CLIDispatcher(CFG, runner=runner).dispatch(update_node_attribute(_mk_environment(), options))

    assert runner.commands == ['ecflow_client --event=ready "clear" &']
    assert response.ok
    assert response.exit_code == 0


def test_non_zero_exit_code_is_reported() -> None:
    runner = FakeRunner(code=127)
    options = Options().with_option("command", "meter").with_option("name", "m").with_option("value", "1")

    response = CLIDispatcher(CFG, runner=runner).dispatch(update_node_attribute(_mk_environment(), options))

    assert not response.ok
    assert response.exit_code == 127


def test_status_update_not_supported() -> None:
    runner = FakeRunner()
    request = update_node_status(_mk_environment(), Options().with_option("action", "init"))

    with pytest.raises(NotImplementedRequest):
        CLIDispatcher(CFG, runner=runner).dispatch(request)
    assert runner.commands == []


def test_run_command_uses_shell(monkeypatch) -> None:
    calls = []

    class Completed:
        returncode = 3

    def fake_run(command, shell, check):
        calls.append((command, shell, check))
        return Completed()

    monkeypatch.setattr("subprocess.run", fake_run)

    assert run_command("true &") == 3
    assert calls == [("true &", True, False)]


def test_run_command_wraps_spawn_failure(monkeypatch) -> None:
    def fake_run(*args, **kwargs):
        raise OSError("no shell")

    monkeypatch.setattr("subprocess.run", fake_run)

    with pytest.raises(TransportError, match="no shell"):
        run_command("anything")
