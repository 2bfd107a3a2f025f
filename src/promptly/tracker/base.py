"""Abstract base class for caret observation sources.

All caret sources must conform to this interface, enabling the runtime
to consume records from the OS watcher process, a recorded session, or
an in-memory test source without changing the rest of the pipeline.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class CaretSource(ABC):
    """Abstract interface for a producer of raw caret records.

    Records are delivered in arrival order. Parsing and validation are
    left to the consumer so that one malformed record never stalls the
    stream.

    Example usage::

        async with ProcessCaretSource(command=["tracker.exe"]) as source:
            async for record in source.records():
                handle(record)
    """

    def __init__(self) -> None:
        self._is_open: bool = False

    @property
    def is_open(self) -> bool:
        """Whether the source is currently producing records."""
        return self._is_open

    @abstractmethod
    async def open(self) -> None:
        """Start producing records.

        Raises:
            TrackerError: If the source cannot be started.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Stop producing records and release resources.

        Should be safe to call multiple times.
        """
        ...

    @abstractmethod
    def records(self) -> AsyncIterator[str]:
        """Yield raw records until the source is closed or exhausted."""
        ...

    async def __aenter__(self) -> CaretSource:
        """Async context manager entry -- opens the source."""
        await self.open()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        """Async context manager exit -- closes the source."""
        await self.close()


class TrackerError(Exception):
    """Raised when the caret source cannot be started or fails."""
