from __future__ import annotations

import logging

from ecflow_light.dispatch.base import BaseDispatcher
from ecflow_light.domain.models import Protocol, Response

logger = logging.getLogger(__name__)


class PhonyDispatcher(BaseDispatcher):
    """Accept every request and deliver nothing."""

    protocol = Protocol.NONE

    def exchange(self, payload: str) -> Response:
        logger.debug("Phony client discarding request: %s", payload)
        return Response("OK")
