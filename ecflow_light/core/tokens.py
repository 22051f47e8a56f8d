from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import List, Optional

from ecflow_light.config.settings import TOKENS_RELATIVE_PATH
from ecflow_light.core.environment import Environment
from ecflow_light.domain.models import Token

logger = logging.getLogger(__name__)


def tokens_path(environment: Environment) -> Optional[Path]:
    """Location of the token cache, or None when ``HOME`` is not captured."""
    home = environment.get_optional("HOME")
    if home is None:
        return None
    return Path(home.value).joinpath(*TOKENS_RELATIVE_PATH)


def read_tokens(path: Path) -> List[Token]:
    """
    Parse a token cache file.

    The file holds a JSON array of ``{"url": ..., "key": ..., "email": ...}``
    objects. Entries missing ``url`` or ``key`` are skipped.

    Raises
    ------
    OSError
        If the file cannot be read.
    ValueError
        If the file is not valid JSON or not a JSON array.
    """
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Token cache '{path}' must contain a JSON array")

    tokens: List[Token] = []
    for item in data:
        if not isinstance(item, dict) or "url" not in item or "key" not in item:
            logger.warning("Ignoring malformed token entry in '%s'", path)
            continue
        tokens.append(Token(url=str(item["url"]), key=str(item["key"]), email=str(item.get("email", ""))))
    return tokens


class Tokens:
    """
    Bearer tokens registered in ``$HOME/.ecflowrc/ssl/api-tokens.json``.

    The file is read lazily, once, on the first :meth:`secret` call, and the
    result is kept for the lifetime of the instance. A missing or unreadable
    file is logged and treated as an empty cache, so requests proceed
    unauthenticated.

    Parameters
    ----------
    environment
        Environment providing ``HOME``.
    path
        Explicit cache location; overrides the ``HOME`` based one.
    """

    def __init__(self, environment: Environment, path: Optional[Path] = None):
        self._path = path if path is not None else tokens_path(environment)
        self._tokens: Optional[List[Token]] = None
        self._lock = threading.Lock()

    def _load(self) -> List[Token]:
        with self._lock:
            if self._tokens is None:
                self._tokens = self._read()
            return self._tokens

    def _read(self) -> List[Token]:
        if self._path is None:
            logger.error("Unable to load secret tokens: 'HOME' environment variable not found")
            return []
        try:
            tokens = read_tokens(self._path)
        except (OSError, ValueError) as e:
            logger.error("Unable to load secret tokens from '%s', due to: %s", self._path, e)
            return []
        logger.debug("Loaded %d secret token(s) from '%s'", len(tokens), self._path)
        return tokens

    def secret(self, url: str) -> Optional[Token]:
        """
        Find the token registered for ``url`` (exact match).

        Returns
        -------
        Token or None
            The first matching token, or None when there is none.
        """
        for token in self._load():
            if token.url == url:
                return token
        logger.info("No secret token found for URL: %s", url)
        return None
