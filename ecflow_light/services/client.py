from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from ecflow_light.core.config.yaml_config import ClientCfg, Configuration
from ecflow_light.core.tokens import Tokens
from ecflow_light.dispatch.base import Dispatcher
from ecflow_light.dispatch.cli_dispatcher import CLIDispatcher
from ecflow_light.dispatch.http_dispatcher import HTTPDispatcher
from ecflow_light.dispatch.phony_dispatcher import PhonyDispatcher
from ecflow_light.dispatch.udp_dispatcher import UDPDispatcher
from ecflow_light.domain.errors import ConfigurationError, EcflowLightError
from ecflow_light.domain.models import ClientKind, Protocol, Response
from ecflow_light.domain.requests import Request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientEndpoint:
    """
    One configured backend and the dispatcher delivering to it.

    Parameters
    ----------
    cfg
        Backend configuration.
    dispatcher
        Dispatcher owned by this endpoint.
    """

    cfg: ClientCfg
    dispatcher: Dispatcher

    def process(self, request: Request) -> Response:
        return request.dispatch(self.dispatcher)


@dataclass(frozen=True)
class CompositeResponse:
    """
    Per-endpoint results of one fan-out, in registration order.

    Aggregation policy
    ------------------
    - :attr:`ok` is True only if every endpoint succeeded (True when there
      are no endpoints).
    - :attr:`response` is the last endpoint's Response, or None when empty.
    """

    responses: Tuple[Response, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.responses)

    @property
    def response(self) -> Optional[Response]:
        return self.responses[-1] if self.responses else None

    @property
    def failures(self) -> List[Response]:
        return [r for r in self.responses if not r.ok]

    def __str__(self) -> str:
        return "[" + ", ".join(str(r) for r in self.responses) + "]"


class CompositeClient:
    """
    Broadcast each request to every registered endpoint.

    Endpoints are attempted once each, in registration order. A failing
    endpoint is logged and recorded as a failed Response; the remaining
    endpoints are still attempted.
    """

    def __init__(self, endpoints: Optional[List[ClientEndpoint]] = None):
        self._endpoints: List[ClientEndpoint] = list(endpoints or [])

    @property
    def endpoints(self) -> Tuple[ClientEndpoint, ...]:
        return tuple(self._endpoints)

    def add(self, endpoint: ClientEndpoint) -> None:
        self._endpoints.append(endpoint)

    def process(self, request: Request) -> CompositeResponse:
        """
        Deliver ``request`` to all endpoints.

        Parameters
        ----------
        request
            Request to deliver.

        Returns
        -------
        CompositeResponse
            One Response per endpoint.
        """
        if not self._endpoints:
            logger.warning("No clients configured; request not delivered: %s", request.description())
            return CompositeResponse()

        responses: List[Response] = []
        for endpoint in self._endpoints:
            try:
                response = endpoint.process(request)
            except EcflowLightError as e:
                logger.error("Unable to deliver '%s' to %s: %s", request.description(), endpoint.cfg, e)
                response = Response(str(e), ok=False)
            responses.append(response)
        return CompositeResponse(tuple(responses))


DispatcherFactory = Callable[[ClientCfg, Tokens], Dispatcher]

DISPATCHER_FACTORIES: Dict[Tuple[ClientKind, Protocol], DispatcherFactory] = {
    (ClientKind.LIBRARY, Protocol.UDP): lambda cfg, tokens: UDPDispatcher(cfg),
    (ClientKind.LIBRARY, Protocol.HTTP): lambda cfg, tokens: HTTPDispatcher(cfg, tokens=tokens),
    (ClientKind.CLI, Protocol.TCP): lambda cfg, tokens: CLIDispatcher(cfg),
    (ClientKind.PHONY, Protocol.NONE): lambda cfg, tokens: PhonyDispatcher(cfg),
}


def make_endpoint(cfg: ClientCfg, tokens: Tokens) -> ClientEndpoint:
    """
    Create the endpoint serving ``cfg``.

    Raises
    ------
    ConfigurationError
        If the kind/protocol combination has no dispatcher.
    """
    factory = DISPATCHER_FACTORIES.get((cfg.kind, cfg.protocol))
    if factory is None:
        raise ConfigurationError(f"No dispatcher for kind '{cfg.kind.value}' and protocol '{cfg.protocol.value}'")
    return ClientEndpoint(cfg=cfg, dispatcher=factory(cfg, tokens))


def build_composite_client(
    configuration: Configuration,
    tokens: Tokens,
    endpoint_factory: Callable[[ClientCfg, Tokens], ClientEndpoint] = make_endpoint,
) -> CompositeClient:
    """Create one endpoint per configured backend, skipping unusable ones."""
    clients = CompositeClient()
    for cfg in configuration.clients:
        try:
            clients.add(endpoint_factory(cfg, tokens))
        except ConfigurationError as e:
            logger.error("Ignoring client %s: %s", cfg, e)
    return clients
