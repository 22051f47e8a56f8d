from __future__ import annotations

import logging
from typing import Dict, Optional

from ecflow_light.config.settings import HTTP_API_ROOT
from ecflow_light.core.config.yaml_config import ClientCfg
from ecflow_light.core.tokens import Tokens
from ecflow_light.dispatch.base import BaseDispatcher
from ecflow_light.dispatch.formatters import HTTPPayload
from ecflow_light.domain.models import Protocol, Response
from ecflow_light.transport.rest_client import RESTClient, RESTRequest

logger = logging.getLogger(__name__)


class HTTPDispatcher(BaseDispatcher):
    """
    Deliver attribute and status updates with HTTP PUT to the REST API.

    When a bearer token is registered for ``https://<host>:<port>/v1`` it is
    sent in the ``Authorization`` header; otherwise the request is sent
    unauthenticated. TLS certificates are verified unless the endpoint is
    configured as ``insecure``.

    Parameters
    ----------
    cfg
        Endpoint configuration.
    tokens
        Token cache used to authenticate requests; None disables lookup.
    client
        REST transport; defaults to a ``requests`` based client.
    """

    protocol = Protocol.HTTP

    def __init__(self, cfg: ClientCfg, tokens: Optional[Tokens] = None, client: Optional[RESTClient] = None):
        super().__init__(cfg)
        self._tokens = tokens
        if cfg.insecure:
            logger.warning("TLS certificate verification disabled for %s:%s", cfg.host, cfg.port)
        self._client = client if client is not None else RESTClient(verify_tls=not cfg.insecure)

    @property
    def base_url(self) -> str:
        return f"https://{self._cfg.host}:{self._cfg.port}"

    def headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "charsets": "utf-8",
        }
        if self._tokens is not None:
            token = self._tokens.secret(self.base_url + HTTP_API_ROOT)
            if token is not None:
                headers["Authorization"] = f"Bearer {token.key}"
        return headers

    def exchange(self, payload: HTTPPayload) -> Response:
        logger.info(
            "Dispatching HTTP Request: %s to host: %s:%s and target: %s",
            payload.body,
            self._cfg.host,
            self._cfg.port,
            payload.target,
        )
        request = RESTRequest(url=self.base_url + payload.target, body=payload.body, headers=self.headers())
        self._client.handle(request)
        return Response("OK")
