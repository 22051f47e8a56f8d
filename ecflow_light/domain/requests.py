"""
Request model.

A :class:`Request` is a tagged union over :class:`~ecflow_light.domain.models.RequestKind`.
Each request bundles the task identity (an Environment snapshot) with the
command parameters (an Options snapshot), both fixed at construction.

Requests are opaque to callers except through :meth:`Request.description`
(for logging) and :meth:`Request.dispatch` (for delivery). The protocol
specific formatting lives with the dispatchers, which resolve the pair
(request kind, protocol) through a single lookup table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ecflow_light.core.environment import Environment
from ecflow_light.core.options import Options
from ecflow_light.domain.models import RequestKind, Response

if TYPE_CHECKING:
    from ecflow_light.dispatch.base import Dispatcher


@dataclass(frozen=True)
class Request:
    """
    Immutable request addressed to the ecFlow server.

    Parameters
    ----------
    kind
        Request variant.
    environment
        Task identity (``ECF_RID``, ``ECF_NAME``, ``ECF_PASS``, ``ECF_TRYNO``, ...).
    options
        Command parameters (``command``/``name``/``value`` or ``action``/...).
    """

    kind: RequestKind
    environment: Environment
    options: Options

    def description(self) -> str:
        """
        Human readable summary of the request, for logging only.

        Returns
        -------
        str
            e.g. "UpdateNodeAttribute: name=m, value=1, at node=/s/f/t".
        """
        node = self._optional_env("ECF_NAME")
        if self.kind is RequestKind.UPDATE_NODE_ATTRIBUTE:
            return (
                f"UpdateNodeAttribute: name={self._optional_opt('name')}, "
                f"value={self._optional_opt('value')}, at node={node}"
            )
        return f"UpdateNodeStatus: new_status={self._optional_opt('action')}, at node={node}"

    def dispatch(self, dispatcher: "Dispatcher") -> Response:
        """Deliver this request through ``dispatcher``."""
        return dispatcher.dispatch(self)

    def get_environment(self, name: str) -> str:
        """Value of a mandatory environment variable; raises EnvironmentVariableNotFound."""
        return self.environment.get(name).value

    def get_option(self, name: str) -> str:
        """Value of a mandatory option; raises OptionNotFound."""
        return self.options.get(name).value

    def _optional_env(self, name: str) -> str:
        variable = self.environment.get_optional(name)
        return variable.value if variable is not None else "?"

    def _optional_opt(self, name: str) -> str:
        option = self.options.find(name)
        return option.value if option is not None else "?"

    def __str__(self) -> str:
        return self.description()


def make_request(kind: RequestKind, environment: Environment, options: Options) -> Request:
    """
    Build a request of the given kind.

    Parameters
    ----------
    kind
        Request variant.
    environment
        Task identity snapshot.
    options
        Command parameters snapshot.

    Returns
    -------
    Request
        Immutable request.
    """
    return Request(kind=RequestKind(kind), environment=environment, options=options)


def update_node_attribute(environment: Environment, options: Options) -> Request:
    return make_request(RequestKind.UPDATE_NODE_ATTRIBUTE, environment, options)


def update_node_status(environment: Environment, options: Options) -> Request:
    return make_request(RequestKind.UPDATE_NODE_STATUS, environment, options)
