from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional

from ecflow_light.domain.errors import OptionNotFound
from ecflow_light.domain.models import Option


class Options:
    """
    Immutable mapping from option name to :class:`Option`.

    Options carry the command-specific parameters of a request (``command``,
    ``name``, ``value``, ``action``, ``abort_why``, ...). They are built
    fluently::

        options = Options().with_option("command", "meter").with_option("name", "m").with_option("value", "1")
    """

    def __init__(self, options: Optional[Mapping[str, Option]] = None):
        self._options: Dict[str, Option] = dict(options or {})

    def with_option(self, name: str, value: str) -> "Options":
        """Return a copy where ``name`` is set to ``value``."""
        options = dict(self._options)
        options[name] = Option(name=name, value=value)
        return Options(options)

    def get(self, name: str) -> Option:
        """
        Get a mandatory option.

        Raises
        ------
        OptionNotFound
            If the option is not defined.
        """
        try:
            return self._options[name]
        except KeyError:
            raise OptionNotFound(f"Option '{name}' not found") from None

    def find(self, name: str) -> Optional[Option]:
        """Get an optional option, or None when absent."""
        return self._options.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._options

    def __iter__(self) -> Iterator[Option]:
        return iter(self._options.values())

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        values = {name: option.value for name, option in self._options.items()}
        return f"Options({values})"
