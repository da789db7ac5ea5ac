# Licensed under the Apache License, Version 2.0
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class FormatHandler(ABC):
    """
    One link of the ordered load/save chains of DocumentStore.

    The store walks its chain in order and uses the first handler that
    `accepts()` the extension and, for saving, returns a payload from
    `encode()`. `encode()` returns None when the handler cannot represent
    the document, letting the next handler try.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def accepts(self, ext: str) -> bool:
        """`ext` is lowercase and includes the dot (".json"), or "" when absent."""
        raise NotImplementedError

    @abstractmethod
    def decode(self, text: str) -> Any:
        raise NotImplementedError

    @abstractmethod
    def encode(self, document: Any) -> Optional[str]:
        raise NotImplementedError
