"""
Domain models and enums.

This module defines the value types shared across the request, dispatch and
configuration layers:
- Variable and Option, the key/value pairs held by Environment and Options
- Request kinds, client kinds and protocols
- Response, the result of one transport call
- Token, one bearer credential from the local token cache

All types are frozen dataclasses or string enums so they can be shared across
threads without copying.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Variable:
    """
    One captured environment variable.

    Parameters
    ----------
    name
        Variable name (e.g., "ECF_NAME").
    value
        Variable value, exactly as read from the environment.
    """

    name: str
    value: str


@dataclass(frozen=True)
class Option:
    """
    One command parameter of a request.

    Parameters
    ----------
    name
        Option name (e.g., "command", "name", "value", "action").
    value
        Option value as a string.
    """

    name: str
    value: str


class RequestKind(str, Enum):
    """
    Kinds of request understood by the ecFlow server.

    Members
    -------
    UPDATE_NODE_ATTRIBUTE : str
        Update a meter, label, event or queue attached to the task.
    UPDATE_NODE_STATUS : str
        Move the task to a new status (init, complete, abort, wait).
    """

    UPDATE_NODE_ATTRIBUTE = "UpdateNodeAttribute"
    UPDATE_NODE_STATUS = "UpdateNodeStatus"


class ClientKind(str, Enum):
    """
    Kind of configured backend.

    Members
    -------
    LIBRARY : str
        Requests are sent directly by this library (UDP or HTTP).
    CLI : str
        Requests are delegated to the external ``ecflow_client`` executable.
    PHONY : str
        Requests are accepted and discarded.
    """

    LIBRARY = "library"
    CLI = "cli"
    PHONY = "phony"


class Protocol(str, Enum):
    """
    Wire protocol used to reach a backend.

    Members
    -------
    UDP : str
        Single JSON datagram, fire-and-forget.
    TCP : str
        Delegated to ``ecflow_client``, which talks TCP to the server.
    HTTP : str
        JSON body sent with an HTTP PUT to the REST API.
    NONE : str
        No transport (phony backend).
    """

    UDP = "udp"
    TCP = "tcp"
    HTTP = "http"
    NONE = "none"


@dataclass(frozen=True)
class Response:
    """
    Result of delivering one request to one endpoint.

    Parameters
    ----------
    response
        Short status text ("OK", or a description of the failure).
    ok
        Whether the delivery succeeded.
    exit_code
        Exit code of the spawned process, for CLI endpoints only.
    """

    response: str
    ok: bool = True
    exit_code: Optional[int] = None

    def __str__(self) -> str:
        return "{" + self.response + "}"


@dataclass(frozen=True)
class Token:
    """
    Bearer token registered for one REST API URL.

    Parameters
    ----------
    url
        API URL the token is valid for (e.g., "https://host:8443/v1").
    key
        Secret sent in the ``Authorization: Bearer`` header.
    email
        Owner of the token.
    """

    url: str
    key: str
    email: str

    def __repr__(self) -> str:
        return f"Token(url={self.url!r}, key='***', email={self.email!r})"
