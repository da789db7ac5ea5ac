# Licensed under the Apache License, Version 2.0
from __future__ import annotations

import logging
from enum import Enum
from typing import Union

from ..domain.errors import AccessDenied, ConfigurationError
from .path_resolver import PathResolver

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "llm.config.js"


class AccessLevel(str, Enum):
    READ = "r"
    WRITE = "w"
    DELETE = "d"

    @classmethod
    def parse(cls, level: Union[str, "AccessLevel"]) -> "AccessLevel":
        if isinstance(level, cls):
            return level
        aliases = {"read": cls.READ, "write": cls.WRITE, "delete": cls.DELETE}
        value = str(level).lower()
        if value in aliases:
            return aliases[value]
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Unknown access level: {level}") from None


class AccessGuard:
    """
    Keeps every read/write/delete inside the store root.

    The one exception is the config file (`config_filename`), which may be
    loaded from anywhere.
    """

    def __init__(
        self, resolver: PathResolver, config_filename: str = DEFAULT_CONFIG_FILENAME
    ) -> None:
        self._resolver = resolver
        self._config_filename = config_filename

    def ensure_access(self, uri: str, level: Union[str, AccessLevel] = AccessLevel.READ) -> bool:
        level = AccessLevel.parse(level)
        if self._config_filename and self._resolver.basename(uri) == self._config_filename:
            return True
        rel = self._resolver.resolve(uri)
        if rel == ".." or rel.startswith("../"):
            logger.debug("AccessGuard: denied %s access to %s (%s)", level.value, uri, rel)
            raise AccessDenied("No access outside of the db container")
        return True
