from __future__ import annotations

from typing import Any, Protocol as TypingProtocol

from ecflow_light.core.config.yaml_config import ClientCfg
from ecflow_light.dispatch.formatters import match
from ecflow_light.domain.models import Protocol, Response
from ecflow_light.domain.requests import Request


class Dispatcher(TypingProtocol):
    """
    Protocol interface for request delivery.

    Any object providing ``dispatch(request) -> Response`` can serve as an
    endpoint's dispatcher, which keeps the composite client easy to test
    with fakes.
    """

    def dispatch(self, request: Request) -> Response:
        """
        Format and deliver one request.

        Raises
        ------
        EcflowLightError
            If the request cannot be formatted or delivered.
        """
        ...


class BaseDispatcher:
    """
    Common dispatch flow: format through the lookup table, then exchange.

    Subclasses set :attr:`protocol` and implement :meth:`exchange`, which
    receives the formatter's output.

    Parameters
    ----------
    cfg
        Configuration of the endpoint this dispatcher delivers to.
    """

    protocol: Protocol = Protocol.NONE

    def __init__(self, cfg: ClientCfg):
        self._cfg = cfg

    @property
    def cfg(self) -> ClientCfg:
        return self._cfg

    def format(self, request: Request) -> Any:
        """Build the protocol payload for ``request`` without sending it."""
        return match(request.kind, self.protocol)(request, self._cfg)

    def dispatch(self, request: Request) -> Response:
        payload = self.format(request)
        return self.exchange(payload)

    def exchange(self, payload: Any) -> Response:
        raise NotImplementedError
