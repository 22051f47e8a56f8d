"""
Protocol formatters.

A formatter turns a :class:`~ecflow_light.domain.requests.Request` into the
payload one protocol sends. Formatters are pure functions of the request and
the endpoint configuration; they never perform I/O.

Formatters are registered in :data:`FORMATTERS`, keyed by
``(protocol, request kind)``. :func:`match` is the single lookup resolving
both dimensions; a missing entry means the protocol does not support that
request kind.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

from ecflow_light.config.settings import CLI_EXECUTABLE, HTTP_API_ROOT
from ecflow_light.core.config.yaml_config import ClientCfg
from ecflow_light.domain.errors import InvalidRequest, NotImplementedRequest
from ecflow_light.domain.models import Protocol, RequestKind
from ecflow_light.domain.requests import Request

Formatter = Callable[[Request, ClientCfg], Any]

_EVENT_VALUES = {
    "1": "set",
    "true": "set",
    "set": "set",
    "0": "clear",
    "false": "clear",
    "clear": "clear",
}

_SHELL_WORD = re.compile(r"[A-Za-z0-9_.:/-]+")
_DOUBLE_QUOTE_SPECIALS = re.compile(r'[\\"$`]')


@dataclass(frozen=True)
class HTTPPayload:
    """
    Target path and JSON body of an HTTP request.

    Parameters
    ----------
    target
        Path below the server root (e.g., "/v1/suites/s/f/t/attributes").
    body
        Serialised JSON body.
    """

    target: str
    body: str


def _compact(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def _try_no(request: Request) -> int:
    raw = request.get_environment("ECF_TRYNO")
    try:
        return int(raw)
    except ValueError:
        raise InvalidRequest(f"ECF_TRYNO must be an integer, but found: '{raw}'") from None


def event_parameter(value: str) -> str:
    """
    Translate an event value into the ``set``/``clear`` literal.

    Raises
    ------
    InvalidRequest
        If the value is not a recognised boolean spelling.
    """
    try:
        return _EVENT_VALUES[value.strip().lower()]
    except KeyError:
        raise InvalidRequest(f"Incorrect event value '{value}'. Expected either 'set' or 'clear'") from None


def format_udp_attribute(request: Request, cfg: ClientCfg) -> str:
    """
    Format an attribute update as a single-line JSON datagram.

    Example::

        {"method":"put","version":"1.0",
         "header":{"task_rid":"12345","task_password":"qwerty","task_try_no":0},
         "payload":{"command":"event","path":"/path/to/task","name":"event","value":"1"}}
    """
    message = {
        "method": "put",
        "version": cfg.version,
        "header": {
            "task_rid": request.get_environment("ECF_RID"),
            "task_password": request.get_environment("ECF_PASS"),
            "task_try_no": _try_no(request),
        },
        "payload": {
            "command": request.get_option("command"),
            "path": request.get_environment("ECF_NAME"),
            "name": request.get_option("name"),
            "value": request.get_option("value"),
        },
    }
    return _compact(message)


def _quote_value(value: str) -> str:
    """Escape the characters the shell still interprets inside double quotes."""
    return _DOUBLE_QUOTE_SPECIALS.sub(r"\\\g<0>", value)


def _check_word(kind: str, word: str) -> str:
    if not _SHELL_WORD.fullmatch(word):
        raise InvalidRequest(f"Invalid {kind} '{word}' for ecflow_client: only letters, digits and '_.:/-' are allowed")
    return word


def format_cli_attribute(request: Request, cfg: ClientCfg) -> str:
    """
    Format an attribute update as an ``ecflow_client`` invocation.

    Event values are translated to ``set``/``clear``. The value is escaped
    for a double quoted shell word; command and name must be plain words.

    Raises
    ------
    InvalidRequest
        If the command or name contains shell metacharacters.
    """
    command = _check_word("command", request.get_option("command"))
    name = _check_word("name", request.get_option("name"))
    value = request.get_option("value")
    if command == "event":
        value = event_parameter(value)
    return f'{CLI_EXECUTABLE} --{command}={name} "{_quote_value(value)}" &'


def _identity(request: Request) -> Dict[str, Any]:
    return {
        "ECF_NAME": request.get_environment("ECF_NAME"),
        "ECF_PASS": request.get_environment("ECF_PASS"),
        "ECF_RID": request.get_environment("ECF_RID"),
        "ECF_TRYNO": request.get_environment("ECF_TRYNO"),
    }


def format_http_attribute(request: Request, cfg: ClientCfg) -> HTTPPayload:
    body = _identity(request)
    body["type"] = request.get_option("command")
    body["name"] = request.get_option("name")
    for optional in ("queue_action", "queue_step", "queue_path", "value"):
        found = request.options.find(optional)
        if found is not None:
            body[optional] = found.value

    target = f"{HTTP_API_ROOT}/suites{request.get_environment('ECF_NAME')}/attributes"
    return HTTPPayload(target=target, body=_compact(body))


def format_http_status(request: Request, cfg: ClientCfg) -> HTTPPayload:
    body = _identity(request)
    action = request.get_option("action")
    body["action"] = action
    if action == "abort":
        body["abort_why"] = request.get_option("abort_why")
    elif action == "wait":
        body["wait_expression"] = request.get_option("wait_expression")

    target = f"{HTTP_API_ROOT}/suites{request.get_environment('ECF_NAME')}/status"
    return HTTPPayload(target=target, body=_compact(body))


def format_phony(request: Request, cfg: ClientCfg) -> str:
    return request.description()


FORMATTERS: Dict[Tuple[Protocol, RequestKind], Formatter] = {
    (Protocol.UDP, RequestKind.UPDATE_NODE_ATTRIBUTE): format_udp_attribute,
    (Protocol.TCP, RequestKind.UPDATE_NODE_ATTRIBUTE): format_cli_attribute,
    (Protocol.HTTP, RequestKind.UPDATE_NODE_ATTRIBUTE): format_http_attribute,
    (Protocol.HTTP, RequestKind.UPDATE_NODE_STATUS): format_http_status,
    (Protocol.NONE, RequestKind.UPDATE_NODE_ATTRIBUTE): format_phony,
    (Protocol.NONE, RequestKind.UPDATE_NODE_STATUS): format_phony,
}


def match(kind: RequestKind, protocol: Protocol) -> Formatter:
    """
    Find the formatter for a request kind on a protocol.

    Raises
    ------
    NotImplementedRequest
        If the protocol does not support the request kind.
    """
    try:
        return FORMATTERS[(protocol, kind)]
    except KeyError:
        raise NotImplementedRequest(
            f"Protocol '{protocol.value}' does not support request '{kind.value}'"
        ) from None
