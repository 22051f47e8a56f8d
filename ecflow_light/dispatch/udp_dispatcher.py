from __future__ import annotations

import logging

from ecflow_light.config.settings import UDP_PACKET_MAXIMUM_SIZE
from ecflow_light.core.config.yaml_config import ClientCfg
from ecflow_light.dispatch.base import BaseDispatcher
from ecflow_light.domain.errors import InvalidRequest
from ecflow_light.domain.models import Protocol, Response
from ecflow_light.transport.udp_client import UDPClient

logger = logging.getLogger(__name__)


def build_packet(contents: str) -> bytes:
    """
    Encode a formatted request as a datagram (UTF-8 text plus a trailing NUL).

    Raises
    ------
    InvalidRequest
        If the packet exceeds :data:`UDP_PACKET_MAXIMUM_SIZE` bytes.
    """
    packet = contents.encode("utf-8") + b"\0"
    if len(packet) > UDP_PACKET_MAXIMUM_SIZE:
        raise InvalidRequest(
            f"Request too large. Maximum size expected is {UDP_PACKET_MAXIMUM_SIZE}, but found: {len(packet)}"
        )
    return packet


class UDPDispatcher(BaseDispatcher):
    """
    Deliver attribute updates as single JSON datagrams.

    Status updates are not supported over UDP. Packet size is checked before
    any socket is opened.
    """

    protocol = Protocol.UDP

    def __init__(self, cfg: ClientCfg):
        super().__init__(cfg)
        try:
            port = int(cfg.port)
        except ValueError:
            port = None
        self._port = port

    def exchange(self, payload: str) -> Response:
        logger.info("Dispatching UDP Request: %s, to %s:%s", payload, self._cfg.host, self._cfg.port)

        packet = build_packet(payload)
        if self._port is None:
            raise InvalidRequest(f"Invalid UDP port '{self._cfg.port}' for host '{self._cfg.host}'")

        UDPClient(host=self._cfg.host, port=self._port).send(packet)
        return Response("OK")
