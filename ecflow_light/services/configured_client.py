from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ecflow_light.core.config.yaml_config import ClientCfg, Configuration, resolve_configuration
from ecflow_light.core.environment import Environment
from ecflow_light.core.options import Options
from ecflow_light.core.tokens import Tokens
from ecflow_light.domain.requests import Request, update_node_attribute, update_node_status
from ecflow_light.logs import set_level
from ecflow_light.services.client import (
    ClientEndpoint,
    CompositeClient,
    CompositeResponse,
    build_composite_client,
    make_endpoint,
)

logger = logging.getLogger(__name__)


class ConfiguredClient:
    """
    Client delivering requests to every backend named by the configuration.

    The configuration is resolved lazily, once, on the first request. All
    request processing is serialized behind a lock, so at most one fan-out
    is in flight per instance.

    Parameters
    ----------
    environment
        Task environment; captured from the OS when omitted.
    configuration
        Pre-resolved configuration; resolved from ``environment`` when omitted.
    tokens
        Token cache for HTTP endpoints; built from ``environment`` when omitted.
    endpoint_factory
        Creates the endpoint for one backend configuration.
    """

    def __init__(
        self,
        environment: Optional[Environment] = None,
        configuration: Optional[Configuration] = None,
        tokens: Optional[Tokens] = None,
        endpoint_factory: Callable[[ClientCfg, Tokens], ClientEndpoint] = make_endpoint,
    ):
        self._environment = environment if environment is not None else Environment.from_os()
        self._configuration = configuration
        self._tokens = tokens
        self._endpoint_factory = endpoint_factory
        self._clients: Optional[CompositeClient] = None
        self._lock = threading.Lock()

    @property
    def environment(self) -> Environment:
        return self._environment

    def _resolve(self) -> Configuration:
        if self._configuration is None:
            self._configuration = resolve_configuration(self.environment)
            set_level(self._configuration.log_level)
        return self._configuration

    def _setup(self) -> CompositeClient:
        if self._clients is None:
            configuration = self._resolve()
            if self._tokens is None:
                self._tokens = Tokens(self.environment)
            self._clients = build_composite_client(configuration, self._tokens, self._endpoint_factory)
            logger.debug("Configured %d client(s)", len(self._clients.endpoints))
        return self._clients

    @property
    def configuration(self) -> Configuration:
        with self._lock:
            return self._resolve()

    def process(self, request: Request) -> CompositeResponse:
        """
        Deliver a request to all configured backends.

        Raises
        ------
        InvalidEnvironment
            If the task identity is incomplete (first call only).
        ConfigurationError
            If the configuration cannot be resolved (first call only).
        """
        with self._lock:
            clients = self._setup()
            logger.debug("Processing request: %s", request.description())
            return clients.process(request)

    def update_attribute(self, command: str, name: str, value: str) -> CompositeResponse:
        options = Options().with_option("command", command).with_option("name", name).with_option("value", value)
        return self.process(update_node_attribute(self.environment, options))

    def update_meter(self, name: str, value: int) -> CompositeResponse:
        return self.update_attribute("meter", name, str(int(value)))

    def update_label(self, name: str, value: str) -> CompositeResponse:
        return self.update_attribute("label", name, value)

    def update_event(self, name: str, value: bool) -> CompositeResponse:
        return self.update_attribute("event", name, "1" if value else "0")

    def update_status(self, options: Options) -> CompositeResponse:
        return self.process(update_node_status(self.environment, options))

    def init(self) -> CompositeResponse:
        return self.update_status(Options().with_option("action", "init"))

    def complete(self) -> CompositeResponse:
        return self.update_status(Options().with_option("action", "complete"))

    def abort(self, reason: str = "") -> CompositeResponse:
        return self.update_status(Options().with_option("action", "abort").with_option("abort_why", reason))

    def wait(self, expression: str) -> CompositeResponse:
        return self.update_status(Options().with_option("action", "wait").with_option("wait_expression", expression))


_default_client: Optional[ConfiguredClient] = None
_default_lock = threading.Lock()


def the_configured_client() -> ConfiguredClient:
    """Process-wide client used by the public API, created on first use."""
    global _default_client
    with _default_lock:
        if _default_client is None:
            _default_client = ConfiguredClient()
        return _default_client


def reset_configured_client(client: Optional[ConfiguredClient] = None) -> None:
    """Replace (or drop) the process-wide client; the next call recreates it when None."""
    global _default_client
    with _default_lock:
        _default_client = client
