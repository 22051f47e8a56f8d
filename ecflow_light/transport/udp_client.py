from __future__ import annotations

import logging
import socket
from dataclasses import dataclass

from ecflow_light.domain.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class UDPClient:
    """
    Fire-and-forget UDP sender.

    Each :meth:`send` opens a datagram socket, sends the payload once and
    closes the socket. No acknowledgement is read.

    Parameters
    ----------
    host
        Destination host name or address.
    port
        Destination UDP port.
    """

    host: str
    port: int

    def send(self, payload: bytes) -> int:
        """
        Send one datagram.

        The host is resolved with ``getaddrinfo`` and the first address is
        used, so both IPv4 and IPv6 destinations work.

        Parameters
        ----------
        payload
            Bytes to send, as a single datagram.

        Returns
        -------
        int
            Number of bytes sent.

        Raises
        ------
        TransportError
            If the host cannot be resolved, or the datagram cannot be sent.
        """
        try:
            family, socktype, proto, _, address = socket.getaddrinfo(self.host, self.port, type=socket.SOCK_DGRAM)[0]
            with socket.socket(family, socktype, proto) as sock:
                sent = sock.sendto(payload, address)
        except OSError as e:
            raise TransportError(f"Unable to send UDP request to {self.host}:{self.port}: {e}") from e
        logger.debug("Sent %d byte(s) to %s:%s", sent, self.host, self.port)
        return sent
