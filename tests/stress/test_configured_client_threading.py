"""
Stress tests for ecflow_light.services.configured_client.ConfiguredClient.

These tests validate the concurrency contract:
- configuration is resolved once even when many threads race on first use
- at most one fan-out is in flight at any time
- every endpoint sees every request exactly once

Notes
-----
Thread stress tests are probabilistic: passing increases confidence but does not
prove the absence of races. Run repeatedly for higher confidence.
"""

from __future__ import annotations

import threading
import time
from typing import List

from ecflow_light.core.config.yaml_config import ClientCfg, Configuration
from ecflow_light.core.environment import Environment
from ecflow_light.core.tokens import Tokens
from ecflow_light.domain.models import ClientKind, Protocol, Response
from ecflow_light.domain.requests import Request
from ecflow_light.services import configured_client as module
from ecflow_light.services.client import ClientEndpoint
from ecflow_light.services.configured_client import ConfiguredClient

THREADS = 8
REQUESTS_PER_THREAD = 50


class ConcurrencyProbe:
    """Dispatcher double tracking how many dispatches overlap."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0
        self.seen: List[Request] = []

    def dispatch(self, request: Request) -> Response:
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        time.sleep(0.0005)
        with self._lock:
            self.in_flight -= 1
            self.seen.append(request)
        return Response("OK")


def _mk_identity() -> Environment:
    return (
        Environment()
        .with_variable("ECF_RID", "12345")
        .with_variable("ECF_NAME", "/path/to/task")
        .with_variable("ECF_PASS", "qwerty")
        .with_variable("ECF_TRYNO", "0")
    )


def test_concurrent_updates_are_serialized(monkeypatch) -> None:
    resolutions: List[int] = []

    def fake_resolve(environment: Environment) -> Configuration:
        resolutions.append(1)
        return Configuration(
            clients=(
                ClientCfg(kind=ClientKind.PHONY, protocol=Protocol.NONE),
                ClientCfg(kind=ClientKind.CLI, protocol=Protocol.TCP),
            )
        )

    monkeypatch.setattr(module, "resolve_configuration", fake_resolve)

    probes: List[ConcurrencyProbe] = []

    def factory(cfg: ClientCfg, tokens: Tokens) -> ClientEndpoint:
        probe = ConcurrencyProbe()
        probes.append(probe)
        return ClientEndpoint(cfg=cfg, dispatcher=probe)

    client = ConfiguredClient(environment=_mk_identity(), endpoint_factory=factory)
    start = threading.Barrier(THREADS)
    errors: List[Exception] = []

    def worker(i: int) -> None:
        start.wait()
        try:
            for j in range(REQUESTS_PER_THREAD):
                assert client.update_meter(f"m{i}", j).ok
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30.0)

    assert errors == []
    assert resolutions == [1]
    assert len(probes) == 2
    for probe in probes:
        assert probe.max_in_flight == 1
        assert len(probe.seen) == THREADS * REQUESTS_PER_THREAD
    assert [r.get_option("name") for r in probes[0].seen] == [r.get_option("name") for r in probes[1].seen]
