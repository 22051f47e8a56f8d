"""
Unit tests for ecflow_light.services.client.

These tests validate fan-out behavior:
- zero endpoints: no exception, warning logged, empty (successful) response
- N endpoints: each dispatched exactly once, in registration order
- a failing endpoint is recorded and does not stop later endpoints
- endpoint assembly from configuration, skipping unusable entries
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from ecflow_light.core.config.yaml_config import ClientCfg, Configuration
from ecflow_light.core.environment import Environment
from ecflow_light.core.options import Options
from ecflow_light.core.tokens import Tokens
from ecflow_light.dispatch.cli_dispatcher import CLIDispatcher
from ecflow_light.dispatch.http_dispatcher import HTTPDispatcher
from ecflow_light.dispatch.phony_dispatcher import PhonyDispatcher
from ecflow_light.dispatch.udp_dispatcher import UDPDispatcher
from ecflow_light.domain.errors import TransportError
from ecflow_light.domain.models import ClientKind, Protocol, Response
from ecflow_light.domain.requests import Request, update_node_attribute
from ecflow_light.services.client import (
    ClientEndpoint,
    CompositeClient,
    CompositeResponse,
    build_composite_client,
    make_endpoint,
)


@dataclass
class FakeDispatcher:
    """Dispatcher double appending its label to a shared call log."""

    label: str
    log: List[str]
    fail: bool = False
    seen: List[Request] = field(default_factory=list)

    def dispatch(self, request: Request) -> Response:
        self.log.append(self.label)
        self.seen.append(request)
        if self.fail:
            raise TransportError(f"{self.label} unreachable")
        return Response(f"OK {self.label}")


def _mk_request() -> Request:
    options = Options().with_option("command", "meter").with_option("name", "m").with_option("value", "1")
    return update_node_attribute(Environment().with_variable("ECF_NAME", "/t"), options)


def _mk_endpoint(dispatcher: FakeDispatcher) -> ClientEndpoint:
    return ClientEndpoint(cfg=ClientCfg.make_phony(), dispatcher=dispatcher)


def test_zero_endpoints_is_a_logged_no_op(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        response = CompositeClient().process(_mk_request())

    assert response == CompositeResponse()
    assert response.ok
    assert response.response is None
    assert "No clients configured" in caplog.text


def test_each_endpoint_dispatched_once_in_order() -> None:
    log: List[str] = []
    dispatchers = [FakeDispatcher(label, log) for label in ("a", "b", "c")]
    clients = CompositeClient()
    for d in dispatchers:
        clients.add(_mk_endpoint(d))

    request = _mk_request()
    response = clients.process(request)

    assert log == ["a", "b", "c"]
    assert all(d.seen == [request] for d in dispatchers)
    assert response.ok
    assert response.response == Response("OK c")
    assert [r.response for r in response.responses] == ["OK a", "OK b", "OK c"]


def test_failure_is_recorded_and_later_endpoints_still_attempted() -> None:
    log: List[str] = []
    clients = CompositeClient(
        [
            _mk_endpoint(FakeDispatcher("a", log)),
            _mk_endpoint(FakeDispatcher("b", log, fail=True)),
            _mk_endpoint(FakeDispatcher("c", log)),
        ]
    )

    response = clients.process(_mk_request())

    assert log == ["a", "b", "c"]
    assert not response.ok
    assert [r.response for r in response.failures] == ["b unreachable"]
    assert response.response == Response("OK c")


def test_make_endpoint_selects_dispatcher_by_kind_and_protocol() -> None:
    tokens = Tokens(Environment())
    expected = {
        (ClientKind.LIBRARY, Protocol.UDP): UDPDispatcher,
        (ClientKind.LIBRARY, Protocol.HTTP): HTTPDispatcher,
        (ClientKind.CLI, Protocol.TCP): CLIDispatcher,
        (ClientKind.PHONY, Protocol.NONE): PhonyDispatcher,
    }
    for (kind, protocol), cls in expected.items():
        cfg = ClientCfg(kind=kind, protocol=protocol, host="h", port="1")
        endpoint = make_endpoint(cfg, tokens)
        assert endpoint.cfg is cfg
        assert isinstance(endpoint.dispatcher, cls)


def test_build_composite_client_skips_unusable_entries(caplog) -> None:
    configuration = Configuration(
        clients=(
            ClientCfg(kind=ClientKind.PHONY, protocol=Protocol.NONE),
            ClientCfg(kind=ClientKind.CLI, protocol=Protocol.UDP),
        )
    )

    with caplog.at_level(logging.ERROR):
        clients = build_composite_client(configuration, Tokens(Environment()))

    assert len(clients.endpoints) == 1
    assert isinstance(clients.endpoints[0].dispatcher, PhonyDispatcher)
    assert "Ignoring client" in caplog.text


def test_phony_endpoint_accepts_any_request() -> None:
    endpoint = make_endpoint(ClientCfg.make_phony(), Tokens(Environment()))
    assert endpoint.process(_mk_request()) == Response("OK")
