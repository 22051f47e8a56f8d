"""
Exception hierarchy for ecFlow Light.

Every error raised by the library derives from :class:`EcflowLightError`, so
the public API can translate any failure into a status code at a single
boundary.

Taxonomy
--------
- Environment errors: a mandatory task variable is missing.
- Configuration errors: YAML unreadable, or no configuration path given.
- Lookup errors: a mandatory request option is missing.
- Request errors: a request cannot be formatted or is too large to send.
- Transport errors: socket, HTTP or subprocess delivery failed.
"""

from __future__ import annotations


class EcflowLightError(Exception):
    """Base class for all ecFlow Light errors."""


class EnvironmentVariableNotFound(EcflowLightError, LookupError):
    """Raised when an environment variable is looked up but was never captured."""


class InvalidEnvironment(EcflowLightError):
    """Raised when the task identity variables are incomplete."""


class ConfigurationError(EcflowLightError):
    """Raised when the client configuration cannot be determined."""


class OptionNotFound(EcflowLightError, LookupError):
    """Raised when a mandatory request option is missing."""


class InvalidRequest(EcflowLightError):
    """Raised when a request cannot be turned into a valid protocol payload."""


class NotImplementedRequest(EcflowLightError):
    """Raised when a protocol does not support the given request kind."""


class TransportError(EcflowLightError):
    """Raised when the underlying transport fails to deliver a payload."""
