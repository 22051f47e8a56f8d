"""
Unit tests for ecflow_light.core.environment.

These tests validate:
- capturing variables from a provided OS mapping
- immutability of fluent construction
- not-found errors and optional lookups
- alias lookup order and task identity checks
- $ENV{NAME} placeholder replacement with cached/OS fallback

No real OS environment is read; every test passes an explicit mapping.
"""

from __future__ import annotations

import logging

import pytest

from ecflow_light.core.environment import Environment, replace_env_var
from ecflow_light.domain.errors import EnvironmentVariableNotFound, InvalidEnvironment
from ecflow_light.domain.models import Variable


def _mk_identity() -> Environment:
    """Environment holding a complete task identity."""
    return (
        Environment()
        .with_variable("ECF_RID", "12345")
        .with_variable("ECF_NAME", "/path/to/task")
        .with_variable("ECF_PASS", "qwerty")
        .with_variable("ECF_TRYNO", "0")
    )


def test_from_os_captures_only_defined_variables() -> None:
    env = Environment.from_os(names=["ECF_NAME", "ECF_HOST"], environ={"ECF_NAME": "/s/t", "OTHER": "x"})

    assert env.get("ECF_NAME") == Variable("ECF_NAME", "/s/t")
    assert "ECF_HOST" not in env
    assert "OTHER" not in env
    assert len(env) == 1


def test_with_variable_returns_new_environment() -> None:
    base = Environment()
    updated = base.with_variable("A", "1")

    assert "A" not in base
    assert updated.get("A").value == "1"


def test_get_missing_variable_raises() -> None:
    with pytest.raises(EnvironmentVariableNotFound):
        Environment().get("ECF_NAME")


def test_get_optional_missing_variable_returns_none() -> None:
    assert Environment().get_optional("ECF_NAME") is None


def test_get_first_follows_argument_order() -> None:
    env = Environment().with_variable("NOSMS", "1").with_variable("NO_SMS", "1")

    found = env.get_first("NO_ECF", "NO_SMS", "NOECF", "NOSMS")

    assert found is not None
    assert found.name == "NO_SMS"


def test_get_first_returns_none_when_no_alias_defined() -> None:
    assert Environment().get_first("NO_ECF", "NOECF") is None


def test_require_task_identity_accepts_complete_identity() -> None:
    _mk_identity().require_task_identity()


@pytest.mark.parametrize("missing", ["ECF_RID", "ECF_NAME", "ECF_PASS", "ECF_TRYNO"])
def test_require_task_identity_rejects_incomplete_identity(missing: str) -> None:
    values = {v.name: v.value for v in _mk_identity() if v.name != missing}
    env = Environment.from_os(names=values.keys(), environ=values)

    with pytest.raises(InvalidEnvironment, match=missing):
        env.require_task_identity()


def test_replace_env_var_prefers_cached_environment() -> None:
    env = Environment().with_variable("ECF_HOST", "cached-host")

    assert replace_env_var("$ENV{ECF_HOST}", env, environ={"ECF_HOST": "os-host"}) == "cached-host"


def test_replace_env_var_falls_back_to_os_environment() -> None:
    assert replace_env_var("$ENV{ECF_PORT}", Environment(), environ={"ECF_PORT": "3141"}) == "3141"


def test_replace_env_var_keeps_parameter_when_unresolved(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        value = replace_env_var("$ENV{UNKNOWN}", Environment(), environ={})

    assert value == "$ENV{UNKNOWN}"
    assert "UNKNOWN" in caplog.text


def test_replace_env_var_ignores_plain_values() -> None:
    assert replace_env_var("localhost", Environment(), environ={}) == "localhost"
