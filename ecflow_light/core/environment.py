"""
Task environment captured from the OS.

An :class:`Environment` is loaded once at startup and then passed explicitly
to request construction and configuration resolution. Components never read
``os.environ`` by name on their own, with the single exception of
``$ENV{NAME}`` placeholders that name a variable not captured up front.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Dict, Iterable, Iterator, Mapping, Optional

from ecflow_light.config.settings import CAPTURED_VARIABLES, TASK_IDENTITY_VARIABLES
from ecflow_light.domain.errors import EnvironmentVariableNotFound, InvalidEnvironment
from ecflow_light.domain.models import Variable

logger = logging.getLogger(__name__)

_ENV_PLACEHOLDER = re.compile(r"\$ENV\{([^}]*)\}")


class Environment:
    """
    Immutable mapping from variable name to :class:`Variable`.

    Instances are built fluently; every ``with_*``/``from_*`` call returns a
    new Environment and leaves the receiver untouched.

    Parameters
    ----------
    variables
        Initial variables, keyed by name.
    """

    def __init__(self, variables: Optional[Mapping[str, Variable]] = None):
        self._variables: Dict[str, Variable] = dict(variables or {})

    @classmethod
    def from_os(
        cls,
        names: Iterable[str] = CAPTURED_VARIABLES,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Environment":
        """
        Capture the given variables from the OS environment.

        Variables that are not defined are simply not captured.

        Parameters
        ----------
        names
            Variable names to capture.
        environ
            Source mapping; defaults to ``os.environ``.

        Returns
        -------
        Environment
            Environment holding every defined variable among ``names``.
        """
        source = os.environ if environ is None else environ
        env = cls()
        for name in names:
            env = env.from_environment(name, source)
        return env

    def from_environment(self, name: str, environ: Optional[Mapping[str, str]] = None) -> "Environment":
        """Return a copy with ``name`` captured from ``environ`` (or the OS), if defined."""
        source = os.environ if environ is None else environ
        value = source.get(name)
        if value is None:
            return self
        return self.with_variable(name, value)

    def with_variable(self, name: str, value: str) -> "Environment":
        """Return a copy where ``name`` is set to ``value``."""
        variables = dict(self._variables)
        variables[name] = Variable(name=name, value=value)
        return Environment(variables)

    def get(self, name: str) -> Variable:
        """
        Get a captured variable.

        Raises
        ------
        EnvironmentVariableNotFound
            If the variable was not captured.
        """
        try:
            return self._variables[name]
        except KeyError:
            raise EnvironmentVariableNotFound(f"Environment Variable '{name}' not found") from None

    def get_optional(self, name: str) -> Optional[Variable]:
        return self._variables.get(name)

    def get_first(self, *names: str) -> Optional[Variable]:
        """
        Return the first captured variable among ``names``, in argument order.

        Used for alias sets such as ``NO_ECF``/``NO_SMS``/``NOECF``/``NOSMS``.
        """
        for name in names:
            variable = self._variables.get(name)
            if variable is not None:
                return variable
        return None

    def require_task_identity(self) -> None:
        """
        Check that the full task identity was captured.

        Raises
        ------
        InvalidEnvironment
            If any of ``ECF_RID``, ``ECF_NAME``, ``ECF_PASS``, ``ECF_TRYNO`` is missing.
        """
        missing = [name for name in TASK_IDENTITY_VARIABLES if name not in self._variables]
        if missing:
            raise InvalidEnvironment(f"Task identity incomplete, missing: {', '.join(missing)}")

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables.values())

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"Environment({sorted(self._variables)})"


def replace_env_var(parameter: str, environment: Environment, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Resolve a ``$ENV{NAME}`` placeholder.

    The whole parameter must be the placeholder. The variable is looked up in
    the captured Environment first, then in the OS environment. When neither
    defines it, a warning is logged and the parameter is returned unchanged.

    Parameters
    ----------
    parameter
        Raw configuration value (e.g., "$ENV{ECF_HOST}" or "localhost").
    environment
        Captured task environment.
    environ
        OS environment fallback; defaults to ``os.environ``.

    Returns
    -------
    str
        The resolved value, or ``parameter`` when no replacement applies.
    """
    match = _ENV_PLACEHOLDER.fullmatch(parameter)
    if match is None:
        return parameter

    name = match.group(1)
    variable = environment.get_optional(name)
    if variable is not None:
        return variable.value

    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is not None:
        return value

    logger.warning("Environment variable '%s' not found. Replacement not possible...", name)
    return parameter
