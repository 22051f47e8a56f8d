"""
Public entry points.

Each function delivers one update through the process-wide
:class:`~ecflow_light.services.configured_client.ConfiguredClient` and
returns a status code. No exception crosses this boundary: failures are
logged and reported as :data:`EXIT_FAILURE`, which a task should read as
"the scheduler was not informed".
"""

from __future__ import annotations

import logging
from typing import Callable

from ecflow_light.services.client import CompositeResponse
from ecflow_light.services.configured_client import ConfiguredClient, the_configured_client

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def _call(operation: str, action: Callable[[ConfiguredClient], CompositeResponse]) -> int:
    try:
        response = action(the_configured_client())
    except Exception as e:
        logger.error("Request '%s' failed: %s", operation, e)
        return EXIT_FAILURE

    logger.debug("Request '%s' processed. Response: %s", operation, response)
    if not response.ok:
        logger.error("Request '%s' not delivered to all clients: %s", operation, response)
        return EXIT_FAILURE
    return EXIT_SUCCESS


def update_meter(name: str, value: int) -> int:
    return _call("update_meter", lambda client: client.update_meter(name, value))


def update_label(name: str, value: str) -> int:
    return _call("update_label", lambda client: client.update_label(name, value))


def update_event(name: str, value: bool) -> int:
    return _call("update_event", lambda client: client.update_event(name, value))


def init() -> int:
    return _call("init", lambda client: client.init())


def complete() -> int:
    return _call("complete", lambda client: client.complete())


def abort(reason: str = "") -> int:
    return _call("abort", lambda client: client.abort(reason))


def wait(expression: str) -> int:
    return _call("wait", lambda client: client.wait(expression))
