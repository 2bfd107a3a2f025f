"""Overlay runtime: the owned lifecycle around one session.

Ties together the caret source, the coordinate mapper, the session
state machine and (optionally) the HTTP bridge the presentation layer
talks to. Lifecycle is ``create -> run -> dispose``; ``run`` returns
when the user quits, the watcher exits, or ``stop`` is called.
"""

from __future__ import annotations

import asyncio
import logging

from promptly.mapping.mapper import CoordinateMapper, parse_observation
from promptly.session.machine import OverlaySession
from promptly.tracker.base import CaretSource

logger = logging.getLogger(__name__)


class OverlayRuntime:
    """Runs the observe -> map -> update loop for a session."""

    def __init__(
        self,
        source: CaretSource,
        mapper: CoordinateMapper,
        session: OverlaySession,
        server: object | None = None,
    ) -> None:
        self._source = source
        self._mapper = mapper
        self._session = session
        self._server = server  # uvicorn.Server, if the bridge is enabled
        self._stop_event: asyncio.Event | None = None
        self._running = False
        self._observations = 0
        self._dropped = 0
        session.add_quit_callback(self.stop)

    @property
    def session(self) -> OverlaySession:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def observation_count(self) -> int:
        return self._observations

    @property
    def dropped_count(self) -> int:
        return self._dropped

    def stop(self) -> None:
        """Signal the runtime to stop."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._server is not None:
            self._server.should_exit = True
        logger.info("Overlay runtime stop requested")

    def handle_record(self, record: str) -> bool:
        """Process one raw watcher record. Returns False if it was dropped."""
        observation = parse_observation(record)
        if observation is None:
            self._dropped += 1
            return False
        try:
            position = self._mapper.map(observation)
        except Exception as e:
            # A display lookup failure must not take down the loop.
            logger.warning("Could not map caret observation: %s", e)
            self._dropped += 1
            return False
        self._session.handle_observation(observation, position)
        self._observations += 1
        return True

    async def run(self) -> None:
        """Consume caret records until stopped."""
        self._stop_event = asyncio.Event()
        if self._session.state.quitting:
            self._stop_event.set()
        self._running = True
        logger.info("Overlay runtime starting")

        try:
            async with self._source:
                tasks = [
                    asyncio.create_task(self._consume(), name="caret-consumer"),
                    asyncio.create_task(self._stop_event.wait(), name="stop-wait"),
                ]
                if self._server is not None:
                    tasks.append(asyncio.create_task(self._server.serve(), name="bridge-server"))

                done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
                for task in pending:
                    if task.get_name() == "bridge-server":
                        self._server.should_exit = True
                        continue
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
                for task in done:
                    if not task.cancelled() and task.exception() is not None:
                        logger.error("Overlay runtime task %s failed: %s", task.get_name(), task.exception())
        finally:
            self._running = False
            logger.info(
                "Overlay runtime finished: %d observations, %d dropped",
                self._observations,
                self._dropped,
            )

    async def dispose(self) -> None:
        """Release the session's outstanding work."""
        await self._session.dispose()
        logger.info("Overlay runtime disposed")

    async def _consume(self) -> None:
        async for record in self._source.records():
            self.handle_record(record)
        logger.info("Caret source exhausted")
