"""Caret source backed by the external watcher process.

The watcher is a long-running OS script that prints one JSON record per
line on stdout. A reader task drains stdout into an asyncio queue so the
consumer receives records in arrival order without blocking the watcher.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from promptly.tracker.base import CaretSource, TrackerError

logger = logging.getLogger(__name__)

# Marks the end of the stream in the queue.
_EOF = None

# Largest watcher line kept; longer lines (e.g. a huge pasted prompt) are dropped.
DEFAULT_LINE_LIMIT = 1024 * 1024


class ProcessCaretSource(CaretSource):
    """Spawns the watcher subprocess and streams its stdout lines."""

    def __init__(
        self,
        command: list[str],
        queue_size: int = 0,
        terminate_timeout: float = 2.0,
        line_limit: int = DEFAULT_LINE_LIMIT,
    ) -> None:
        super().__init__()
        if not command:
            raise ValueError("Tracker command must not be empty")
        self._command = list(command)
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=queue_size)
        self._terminate_timeout = terminate_timeout
        self._line_limit = line_limit
        self._process: asyncio.subprocess.Process | None = None
        self._stdout_task: asyncio.Task[None] | None = None
        self._stderr_task: asyncio.Task[None] | None = None

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    async def open(self) -> None:
        """Start the watcher subprocess and its reader tasks."""
        if self._is_open:
            return
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self._command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=self._line_limit,
            )
        except OSError as e:
            raise TrackerError(f"Cannot start tracker {self._command[0]!r}: {e}") from e

        self._is_open = True
        self._stdout_task = asyncio.create_task(self._read_stdout(), name="tracker-stdout")
        self._stderr_task = asyncio.create_task(self._read_stderr(), name="tracker-stderr")
        logger.info("Started tracker %s (pid=%d)", self._command[0], self.pid)

    async def close(self) -> None:
        """Stop the reader tasks and terminate the watcher."""
        if not self._is_open:
            return
        self._is_open = False

        for task in (self._stdout_task, self._stderr_task):
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                except Exception as e:
                    logger.error("Tracker reader %s failed: %s", task.get_name(), e)
        self._stdout_task = None
        self._stderr_task = None

        if self._process is not None and self._process.returncode is None:
            try:
                self._process.terminate()
            except ProcessLookupError:
                pass
            try:
                await asyncio.wait_for(self._process.wait(), timeout=self._terminate_timeout)
            except asyncio.TimeoutError:
                logger.warning("Tracker did not exit after terminate, killing it")
                self._process.kill()
                await self._process.wait()
        if self._process is not None:
            logger.info("Tracker stopped (exit code %s)", self._process.returncode)
        self._process = None

        # Wake a consumer blocked on the queue.
        self._signal_eof()

    async def records(self) -> AsyncIterator[str]:
        """Yield stdout lines until the watcher exits or the source closes."""
        while True:
            record = await self._queue.get()
            if record is _EOF:
                return
            yield record

    async def _read_stdout(self) -> None:
        assert self._process is not None and self._process.stdout is not None
        try:
            async for line in self._iter_lines(self._process.stdout):
                text = line.decode("utf-8", errors="replace").strip()
                if text:
                    await self._queue.put(text)
            logger.info("Tracker output ended")
        finally:
            self._signal_eof()

    def _signal_eof(self) -> None:
        if self._queue.full():
            # Drop the oldest record rather than block the shutdown path.
            self._queue.get_nowait()
        self._queue.put_nowait(_EOF)

    async def _read_stderr(self) -> None:
        assert self._process is not None and self._process.stderr is not None
        async for line in self._iter_lines(self._process.stderr):
            logger.warning("Tracker error output: %s", line.decode("utf-8", errors="replace").rstrip())

    async def _iter_lines(self, stream: asyncio.StreamReader) -> AsyncIterator[bytes]:
        """Yield complete lines, skipping any line longer than the stream limit."""
        skipping = False
        while True:
            try:
                line = await stream.readuntil(b"\n")
            except asyncio.IncompleteReadError as e:
                # EOF; a final unterminated line still counts.
                if e.partial and not skipping:
                    yield e.partial
                return
            except asyncio.LimitOverrunError as e:
                await stream.readexactly(e.consumed)
                if not skipping:
                    logger.warning("Dropping tracker line longer than %d bytes", self._line_limit)
                skipping = True
                continue
            if skipping:
                # Tail of the oversized line.
                skipping = False
                continue
            yield line
