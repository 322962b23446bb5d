"""Abstract base class for cache providers.

The embedding service memoises remote embedding vectors through this
contract.  The cache is injected, so its lifetime is exactly that of the
service owning it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are async so a network-backed store could be swapped in
    without blocking the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve the value stored under *key*.

        Returns
        -------
        Any or None
            The cached value if present and not expired; ``None`` otherwise.
        """

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry stored under *key*; a no-op if absent."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry."""

    @abstractmethod
    def size(self) -> int:
        """Return the number of live entries."""
