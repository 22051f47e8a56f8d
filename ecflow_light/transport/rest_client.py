from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict

import requests

from ecflow_light.domain.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RESTResponse:
    """Status code and body of one HTTP exchange."""

    status: int
    body: str


@dataclass(frozen=True)
class RESTRequest:
    """
    One HTTP request to the ecFlow REST API.

    Parameters
    ----------
    url
        Full target URL (scheme, host, port and path).
    body
        JSON document, already serialised.
    headers
        Header fields to send.
    method
        HTTP method; ecFlow child updates use PUT.
    """

    url: str
    body: str
    headers: Dict[str, str] = field(default_factory=dict)
    method: str = "PUT"


class RESTClient:
    """
    HTTP transport backed by ``requests``.

    Notes
    -----
    - No timeout is applied; the call blocks until ``requests`` returns.
    - HTTP errors are surfaced via ``raise_for_status()`` and wrapped in
      :class:`~ecflow_light.domain.errors.TransportError`.

    Parameters
    ----------
    verify_tls
        Whether to verify the server TLS certificate.
    """

    def __init__(self, verify_tls: bool = True):
        self._verify_tls = verify_tls

    def handle(self, request: RESTRequest) -> RESTResponse:
        """
        Perform the request.

        Raises
        ------
        TransportError
            On connection failures and non-2xx responses.
        """
        try:
            r = requests.request(
                request.method,
                request.url,
                data=request.body.encode("utf-8"),
                headers=request.headers,
                verify=self._verify_tls,
            )
            r.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"HTTP {request.method} {request.url} failed: {e}") from e

        logger.info("Collected HTTP Response: %s, body: %s", r.status_code, r.text)
        return RESTResponse(status=r.status_code, body=r.text)
