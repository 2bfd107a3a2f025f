"""HTTP text insertion backend.

Sends insertion requests to a helper service that owns the OS-level
typing, e.g. one running with elevated rights.
"""

from __future__ import annotations

import logging

import httpx

from promptly.insertion.base import InsertionError, TextInserter

logger = logging.getLogger(__name__)


class HttpTextInserter(TextInserter):
    """Posts insertion requests to an HTTP helper service."""

    def __init__(
        self,
        base_url: str = "http://localhost:8766",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the HTTP client and verify the helper is reachable."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            logger.info("Connected to insertion service at %s", self._base_url)
        except Exception as e:
            await self._client.aclose()
            self._client = None
            raise InsertionError(
                f"Failed to connect to insertion service: {e}", backend="http"
            ) from e

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from insertion service")

    async def insert(self, process_id: int, text: str) -> None:
        if self._client is None:
            raise InsertionError("Not connected to insertion service", backend="http")
        try:
            resp = await self._client.post(
                "/insert", json={"process_id": process_id, "text": text}
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise InsertionError(f"HTTP request to /insert failed: {e}", backend="http") from e
        logger.debug("Sent %d characters to PID %d", len(text), process_id)
