from __future__ import annotations

import logging
from typing import Callable

from ecflow_light.core.config.yaml_config import ClientCfg
from ecflow_light.dispatch.base import BaseDispatcher
from ecflow_light.domain.models import Protocol, Response
from ecflow_light.transport.process_runner import run_command

logger = logging.getLogger(__name__)


class CLIDispatcher(BaseDispatcher):
    """
    Deliver attribute updates by invoking the external ``ecflow_client``.

    The command runs in the background (``&``), so the exit code reported in
    the Response reflects whether the shell could spawn it. Status updates
    are not supported.

    Parameters
    ----------
    cfg
        Endpoint configuration.
    runner
        Callable executing a command line and returning its exit code.
    """

    protocol = Protocol.TCP

    def __init__(self, cfg: ClientCfg, runner: Callable[[str], int] = run_command):
        super().__init__(cfg)
        self._runner = runner

    def exchange(self, payload: str) -> Response:
        logger.info("Dispatching CLI Request: %s", payload)
        code = self._runner(payload)
        if code != 0:
            logger.error("CLI Request '%s' failed with exit code %d", payload, code)
            return Response(f"FAILED (exit code {code})", ok=False, exit_code=code)
        return Response("OK", exit_code=code)
