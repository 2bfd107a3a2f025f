"""Process-based text insertion backend.

Runs the configured inserter script once per request, substituting the
target process id and the text into the command template.
"""

from __future__ import annotations

import asyncio
import logging

from promptly.insertion.base import InsertionError, TextInserter

logger = logging.getLogger(__name__)


class ProcessTextInserter(TextInserter):
    """Spawns an OS helper that types text into another process."""

    def __init__(self, command: list[str], timeout: float = 30.0) -> None:
        if not command:
            raise ValueError("Inserter command must not be empty")
        self._command = list(command)
        self._timeout = timeout

    def build_command(self, process_id: int, text: str) -> list[str]:
        """Fill the {process_id} and {text} placeholders of the template."""
        return [
            arg.replace("{process_id}", str(process_id)).replace("{text}", text)
            for arg in self._command
        ]

    async def insert(self, process_id: int, text: str) -> None:
        argv = self.build_command(process_id, text)
        logger.info("Inserting text into PID %d: %s...", process_id, text[:20])
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise InsertionError(f"Cannot start inserter {argv[0]!r}: {e}", backend="process") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise InsertionError(
                f"Inserter timed out after {self._timeout:.0f}s", backend="process"
            ) from e

        if stdout:
            logger.debug("Inserter output: %s", stdout.decode("utf-8", errors="replace").strip())
        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
            raise InsertionError(
                f"Inserter exited with code {proc.returncode}: {detail}", backend="process"
            )
        logger.info("Inserter finished for PID %d", process_id)
