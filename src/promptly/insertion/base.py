"""Abstract base class for text insertion backends.

Insertion is fire-and-forget from the session's point of view: the
backend either completes or raises InsertionError, and the caller only
logs the outcome.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class TextInserter(ABC):
    """Abstract interface for typing text into another process's control.

    Example usage::

        async with HttpTextInserter(base_url="http://localhost:8766") as inserter:
            await inserter.insert(4242, "Rewrite this paragraph ...")
    """

    async def connect(self) -> None:
        """Prepare the backend. The default implementation does nothing."""

    async def disconnect(self) -> None:
        """Release backend resources. Safe to call multiple times."""

    @abstractmethod
    async def insert(self, process_id: int, text: str) -> None:
        """Insert text into the focused control of the given process.

        Raises:
            InsertionError: If the text could not be delivered.
        """
        ...

    async def __aenter__(self) -> TextInserter:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


class InsertionError(Exception):
    """Raised when text insertion fails."""

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend
