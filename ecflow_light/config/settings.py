"""
Static settings shared across ecFlow Light.

These values describe the contract with the ecFlow server and the task
environment: variable names, wire limits, and file locations. They are
imported by the configuration, dispatch and token layers.

Attributes
----------
VERSION
    Library version reported by the command line tool.
TASK_IDENTITY_VARIABLES
    Mandatory variables identifying one task invocation.
OPT_OUT_VARIABLES
    Aliases that disable all real endpoints when any is defined.
CONFIG_PATH_VARIABLE
    Variable naming the YAML configuration file.
LOG_LEVEL_VARIABLE
    Variable selecting the log level of the command line tool.
CAPTURED_VARIABLES
    Every variable captured into the process Environment at startup.
DEFAULT_CLIENT_VERSION
    Version reported to the server when the YAML entry omits one.
UDP_PACKET_MAXIMUM_SIZE
    Largest datagram accepted by the UDP dispatcher, in bytes.
CLI_EXECUTABLE
    External client invoked by the CLI dispatcher.
HTTP_API_ROOT
    Root path of the ecFlow REST API.
TOKENS_RELATIVE_PATH
    Location of the bearer token cache, relative to ``$HOME``.
"""

from __future__ import annotations

from typing import Tuple

VERSION: str = "0.1.0"

TASK_IDENTITY_VARIABLES: Tuple[str, ...] = ("ECF_RID", "ECF_NAME", "ECF_PASS", "ECF_TRYNO")
OPT_OUT_VARIABLES: Tuple[str, ...] = ("NO_ECF", "NO_SMS", "NOECF", "NOSMS")
CONFIG_PATH_VARIABLE: str = "IFS_ECF_CONFIG_PATH"
LOG_LEVEL_VARIABLE: str = "ECFLOW_LIGHT_LOG_LEVEL"

CAPTURED_VARIABLES: Tuple[str, ...] = (
    *TASK_IDENTITY_VARIABLES,
    "ECF_HOST",
    *OPT_OUT_VARIABLES,
    CONFIG_PATH_VARIABLE,
    LOG_LEVEL_VARIABLE,
    "HOME",
)

DEFAULT_CLIENT_VERSION: str = "1.0"
UDP_PACKET_MAXIMUM_SIZE: int = 65_507
CLI_EXECUTABLE: str = "ecflow_client"
HTTP_API_ROOT: str = "/v1"
TOKENS_RELATIVE_PATH: Tuple[str, ...] = (".ecflowrc", "ssl", "api-tokens.json")
