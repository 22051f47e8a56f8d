from __future__ import annotations

import logging
import subprocess

from ecflow_light.domain.errors import TransportError

logger = logging.getLogger(__name__)


def run_command(command: str) -> int:
    """
    Execute a shell command line and wait for the shell to exit.

    Output is not captured. Commands ending in ``&`` return as soon as the
    shell has spawned them, so the exit code reflects the spawn only.

    Parameters
    ----------
    command
        Command line, interpreted by the system shell.

    Returns
    -------
    int
        Exit code of the shell.

    Raises
    ------
    TransportError
        If the shell itself cannot be started.
    """
    try:
        completed = subprocess.run(command, shell=True, check=False)
    except OSError as e:
        raise TransportError(f"Unable to execute '{command}': {e}") from e
    logger.debug("Command '%s' exited with code %d", command, completed.returncode)
    return completed.returncode
