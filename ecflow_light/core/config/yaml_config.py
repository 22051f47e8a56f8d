from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

import yaml

from ecflow_light.config.settings import CONFIG_PATH_VARIABLE, DEFAULT_CLIENT_VERSION, OPT_OUT_VARIABLES
from ecflow_light.core.environment import Environment, replace_env_var
from ecflow_light.domain.errors import ConfigurationError
from ecflow_light.domain.models import ClientKind, Protocol

logger = logging.getLogger(__name__)

VALID_COMBINATIONS: FrozenSet[Tuple[ClientKind, Protocol]] = frozenset(
    {
        (ClientKind.LIBRARY, Protocol.UDP),
        (ClientKind.LIBRARY, Protocol.HTTP),
        (ClientKind.CLI, Protocol.TCP),
        (ClientKind.PHONY, Protocol.NONE),
    }
)


@dataclass(frozen=True)
class ClientCfg:
    """
    One configured backend.

    Parameters
    ----------
    kind
        Backend kind (library, cli, phony).
    protocol
        Wire protocol (udp, tcp, http, none).
    host
        Server host name, after ``$ENV{...}`` substitution.
    port
        Server port as text, after ``$ENV{...}`` substitution.
    version
        Protocol version reported to the server.
    insecure
        Disable TLS certificate verification (HTTP only).
    """

    kind: ClientKind
    protocol: Protocol
    host: str = ""
    port: str = ""
    version: str = DEFAULT_CLIENT_VERSION
    insecure: bool = False

    @classmethod
    def make_phony(cls) -> "ClientCfg":
        return cls(kind=ClientKind.PHONY, protocol=Protocol.NONE)

    def __str__(self) -> str:
        return (
            f'{{"kind":"{self.kind.value}","protocol":"{self.protocol.value}",'
            f'"host":"{self.host}","port":"{self.port}","version":"{self.version}"}}'
        )


@dataclass(frozen=True)
class Configuration:
    """
    Resolved client configuration.

    Parameters
    ----------
    clients
        Backends, in the order they appear in the YAML file.
    skip
        True when an opt-out variable replaced the backends with a phony one.
    log_level
        Optional log level requested by the YAML file.
    """

    clients: Tuple[ClientCfg, ...] = field(default_factory=tuple)
    skip: bool = False
    log_level: Optional[str] = None

    @classmethod
    def make_phony(cls) -> "Configuration":
        return cls(clients=(ClientCfg.make_phony(),), skip=True)


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Unable to load YAML configuration '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"YAML configuration '{path}' must contain a mapping at the root")
    return data


def _text(item: Dict[str, Any], key: str, default: str = "") -> str:
    value = item.get(key)
    if value is None:
        return default
    return str(value)


def _flag(item: Dict[str, Any], key: str) -> Optional[bool]:
    """YAML boolean (or the text "true"/"false") under ``key``; None when it is neither."""
    value = item.get(key)
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return None


def _parse_client(item: Any, environment: Environment) -> Optional[ClientCfg]:
    """
    Convert one YAML entry into a ClientCfg.

    Returns None, after logging an error, when the entry is not a mapping or
    names an unknown kind/protocol combination or a non-boolean
    ``insecure`` flag.
    """
    if not isinstance(item, dict):
        logger.error("Ignoring client configuration %r: expected a mapping", item)
        return None

    raw_kind = _text(item, "kind")
    raw_protocol = _text(item, "protocol")
    try:
        kind = ClientKind(raw_kind)
        protocol = Protocol(raw_protocol)
    except ValueError:
        kind, protocol = None, None

    if (kind, protocol) not in VALID_COMBINATIONS:
        logger.error("Ignoring client with unknown kind/protocol combination: '%s'/'%s'", raw_kind, raw_protocol)
        return None

    insecure = _flag(item, "insecure")
    if insecure is None:
        logger.error("Ignoring client with invalid 'insecure' value %r: expected true or false", item.get("insecure"))
        return None

    return ClientCfg(
        kind=kind,
        protocol=protocol,
        host=replace_env_var(_text(item, "host"), environment),
        port=replace_env_var(_text(item, "port"), environment),
        version=_text(item, "version", DEFAULT_CLIENT_VERSION),
        insecure=insecure,
    )


def load_configuration(path: str, environment: Environment) -> Configuration:
    """
    Load client configuration from a YAML file.

    The document must hold a ``clients`` (or, for older files, ``connections``)
    list. Each entry provides ``kind``, ``protocol``, ``host``, ``port`` and
    optionally ``version`` (default "1.0") and ``insecure``. ``host`` and
    ``port`` may be ``$ENV{NAME}`` placeholders.

    Parameters
    ----------
    path
        Path to the YAML file.
    environment
        Captured environment used to resolve placeholders.

    Returns
    -------
    Configuration
        Valid backends, in file order.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or is not a YAML mapping.
    """
    cfg_path = Path(path).expanduser()
    raw = _read_yaml(cfg_path)

    entries = raw.get("clients")
    if entries is None:
        entries = raw.get("connections", [])
    if not isinstance(entries, list):
        raise ConfigurationError(f"'clients' in '{cfg_path}' must be a list")

    clients: List[ClientCfg] = []
    for item in entries:
        client = _parse_client(item, environment)
        if client is not None:
            logger.debug("Client configuration: %s", client)
            clients.append(client)

    log_level = raw.get("log_level")
    return Configuration(
        clients=tuple(clients),
        log_level=str(log_level) if log_level is not None else None,
    )


def resolve_configuration(environment: Environment) -> Configuration:
    """
    Determine which backends requests are delivered to.

    Resolution order:
    1) the task identity (``ECF_RID``, ``ECF_NAME``, ``ECF_PASS``, ``ECF_TRYNO``) must be present
    2) any of ``NO_ECF``/``NO_SMS``/``NOECF``/``NOSMS`` selects a single phony backend
    3) otherwise the YAML file named by ``IFS_ECF_CONFIG_PATH`` is loaded

    Parameters
    ----------
    environment
        Captured task environment.

    Returns
    -------
    Configuration
        Resolved configuration.

    Raises
    ------
    InvalidEnvironment
        If the task identity is incomplete.
    ConfigurationError
        If no opt-out variable is set and the YAML file is missing or invalid.
    """
    environment.require_task_identity()

    opt_out = environment.get_first(*OPT_OUT_VARIABLES)
    if opt_out is not None:
        logger.warning("'%s' environment variable detected. Configuring Phony client.", opt_out.name)
        return Configuration.make_phony()

    cfg_file = environment.get_optional(CONFIG_PATH_VARIABLE)
    if cfg_file is None:
        raise ConfigurationError(f"Unable to load YAML configuration as '{CONFIG_PATH_VARIABLE}' is not defined")

    logger.debug("YAML defined by %s: '%s'", CONFIG_PATH_VARIABLE, cfg_file.value)
    return load_configuration(cfg_file.value, environment)
