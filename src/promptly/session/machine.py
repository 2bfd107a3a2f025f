"""The overlay session state machine.

Owns the analysis lifecycle (idle -> loading -> success/error), the
latest caret data, and the sidebar/manual-entry flags. Every mutation
goes through ``_transition`` which validates the new snapshot and
replaces the old one, so readers always see a consistent state.

The session never talks to the network itself. Analysis, translation,
insertion and clipboard access are delegated to injected collaborators
and their failures are converted into state transitions or log entries.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from promptly.analysis.base import AnalysisError, PromptAnalyzer, TranslationError, Translator
from promptly.domain.models import (
    AnalysisResult,
    AnalysisStatus,
    CaretObservation,
    LanguageChoice,
    LogicalPosition,
    SessionState,
)
from promptly.insertion.base import InsertionError, TextInserter

logger = logging.getLogger(__name__)

ClipboardWriter = Callable[[str], None]


def _pyperclip_copy(text: str) -> None:
    import pyperclip

    pyperclip.copy(text)


class OverlaySession:
    """Single owner of the mutable overlay state.

    All methods must be called from the event loop thread. Actions that
    start an analysis return the task running it (or None for a no-op)
    so callers can await completion when they need to.
    """

    def __init__(
        self,
        analyzer: PromptAnalyzer,
        translator: Translator | None = None,
        inserter: TextInserter | None = None,
        clipboard: ClipboardWriter | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._translator = translator
        self._inserter = inserter
        self._clipboard = clipboard or _pyperclip_copy
        self._state = SessionState()
        self._sequence = 0
        self._last_analyzed_text: str | None = None
        self._analysis_task: asyncio.Task[None] | None = None
        self._translating = False
        self._background: set[asyncio.Task[None]] = set()
        self._quit_callbacks: list[Callable[[], None]] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_analyzing(self) -> bool:
        return self._analysis_task is not None and not self._analysis_task.done()

    def add_quit_callback(self, callback: Callable[[], None]) -> None:
        self._quit_callbacks.append(callback)

    def _transition(self, **changes: object) -> SessionState:
        old = self._state
        new = SessionState.model_validate({**dict(old), **changes})
        if new.status != old.status:
            logger.info("Session %s -> %s", old.status.value, new.status.value)
        self._state = new
        return new

    # ------------------------------------------------------------------
    # Caret observations
    # ------------------------------------------------------------------

    def handle_observation(self, observation: CaretObservation, position: LogicalPosition) -> None:
        """Apply a mapped observation. Later observations always win.

        A missing process id keeps the last known one; missing text keeps
        the current prompt text.
        """
        changes: dict[str, object] = {"latest_position": position}
        if observation.owner_process_id is not None:
            changes["active_process_id"] = observation.owner_process_id
            if observation.owner_process_id != self._state.active_process_id:
                logger.debug(
                    "Tracking process %s (pid=%d)",
                    observation.owner_process_name or "unknown",
                    observation.owner_process_id,
                )
        if position.text is not None:
            changes["prompt_text"] = position.text
        self._transition(**changes)

    def set_prompt_text(self, text: str) -> None:
        self._transition(prompt_text=text)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def analyze(self) -> asyncio.Task[None] | None:
        """Analyze the current prompt text. Blank text is a no-op."""
        return self._start_analysis(self._state.prompt_text)

    def reanalyze(self) -> asyncio.Task[None] | None:
        """Run the last analyzed prompt again, or the current one if none."""
        text = self._last_analyzed_text
        if text is None:
            text = self._state.prompt_text
        return self._start_analysis(text)

    def toggle_sidebar(self) -> asyncio.Task[None] | None:
        """Open/close the sidebar; the first open with a prompt analyzes it."""
        if self._state.status == AnalysisStatus.IDLE and self._state.has_prompt:
            return self.analyze()
        self._transition(sidebar_open=not self._state.sidebar_open)
        return None

    def close_sidebar(self) -> None:
        """Close the sidebar. Outside manual mode this also resets to idle."""
        if self._state.manual_mode:
            self._transition(sidebar_open=False, manual_mode=False)
            return
        self._transition(
            status=AnalysisStatus.IDLE,
            result=None,
            error=None,
            translation=None,
            selected_language=LanguageChoice.ORIGINAL,
            sidebar_open=False,
        )

    def open_manual(self) -> None:
        self._transition(manual_mode=True, sidebar_open=True)

    def submit_manual(self, text: str) -> asyncio.Task[None] | None:
        """Take the typed prompt, leave manual mode and analyze it."""
        if not text.strip():
            logger.debug("Ignoring empty manual submission")
            return None
        self._transition(prompt_text=text, manual_mode=False)
        return self.analyze()

    async def apply_fix(self, text: str) -> bool:
        """Copy an improved prompt to the clipboard.

        The copy runs in a worker thread; on Linux pyperclip shells out to
        xclip or xsel.
        """
        try:
            await asyncio.to_thread(self._clipboard, text)
        except Exception as e:
            logger.error("Failed to copy to clipboard: %s", e)
            return False
        logger.info("Copied %d characters to clipboard", len(text))
        return True

    def insert(self, text: str) -> asyncio.Task[None] | None:
        """Insert text into the control of the last tracked process."""
        pid = self._state.active_process_id
        if pid is None:
            logger.warning("No tracked process to insert text into")
            return None
        if self._inserter is None:
            logger.warning("No text inserter configured")
            return None
        task = asyncio.create_task(self._run_insertion(pid, text))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def select_language(self, choice: LanguageChoice) -> SessionState:
        """Switch the displayed rewrite, translating it on first use."""
        if choice == LanguageChoice.ORIGINAL:
            return self._transition(selected_language=LanguageChoice.ORIGINAL)
        if self._state.result is None:
            logger.debug("No result to translate")
            return self._state
        if self._state.translation is None:
            if await self.translate_result() is None:
                return self._state
        return self._transition(selected_language=LanguageChoice.TRANSLATED)

    async def translate_result(self) -> str | None:
        """Translate the current optimized prompt once and cache it.

        Returns the translation, or None when there is nothing to translate
        or the translation failed. Failures never change the primary status.
        """
        result = self._state.result
        if result is None:
            return None
        if self._state.translation is not None:
            return self._state.translation
        if self._translator is None:
            logger.warning("Translation requested but no translator is configured")
            return None
        if self._translating:
            logger.debug("Translation already in progress")
            return None

        self._translating = True
        try:
            translated = await self._translator.translate(result.optimized_prompt)
        except TranslationError as e:
            logger.error("Translation failed: %s", e)
            return None
        except Exception as e:
            logger.error("Translation failed unexpectedly: %s", e)
            return None
        finally:
            self._translating = False

        if self._state.result is not result:
            logger.info("Discarding translation for a replaced result")
            return None
        self._transition(translation=translated)
        return translated

    def quit(self) -> None:
        """Mark the session as quitting and notify the runtime."""
        if self._state.quitting:
            return
        self._transition(quitting=True)
        logger.info("Quit requested")
        for callback in list(self._quit_callbacks):
            callback()

    async def dispose(self) -> None:
        """Cancel outstanding work at the end of the session's lifetime."""
        pending = [t for t in (self._analysis_task, *self._background) if t is not None and not t.done()]
        for task in pending:
            task.cancel()
        for task in pending:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._analysis_task = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start_analysis(self, text: str) -> asyncio.Task[None] | None:
        if not text.strip():
            logger.debug("Ignoring analyze request with empty prompt")
            return None

        if self.is_analyzing:
            # Most recent request wins; the stale task is cancelled and any
            # late response is dropped by the sequence check.
            logger.info("Replacing in-flight analysis request #%d", self._sequence)
            self._analysis_task.cancel()

        self._sequence += 1
        sequence = self._sequence
        self._last_analyzed_text = text
        self._transition(
            status=AnalysisStatus.LOADING,
            result=None,
            error=None,
            translation=None,
            selected_language=LanguageChoice.ORIGINAL,
        )
        self._analysis_task = asyncio.create_task(self._run_analysis(sequence, text))
        return self._analysis_task

    async def _run_analysis(self, sequence: int, text: str) -> None:
        logger.debug("Analysis request #%d started (%d chars)", sequence, len(text))
        try:
            result = await self._analyzer.analyze(text)
        except AnalysisError as e:
            logger.error("Analysis failed: %s", e)
            self._finish(sequence, error=str(e))
            return
        except Exception as e:
            logger.error("Analysis failed unexpectedly: %s", e)
            self._finish(sequence, error=f"Analysis failed: {e}")
            return
        self._finish(sequence, result=result)

    def _finish(
        self, sequence: int, result: AnalysisResult | None = None, error: str | None = None
    ) -> None:
        if sequence != self._sequence:
            logger.info("Discarding stale analysis response #%d", sequence)
            return
        if result is not None:
            logger.info("Analysis #%d scored %.0f", sequence, result.score)
            self._transition(
                status=AnalysisStatus.SUCCESS, result=result, error=None, sidebar_open=True
            )
        else:
            self._transition(
                status=AnalysisStatus.ERROR,
                result=None,
                error=error or "Analysis failed",
                sidebar_open=True,
            )

    async def _run_insertion(self, process_id: int, text: str) -> None:
        try:
            await self._inserter.insert(process_id, text)
        except InsertionError as e:
            logger.error("Insertion into PID %d failed: %s", process_id, e)
        except Exception as e:
            logger.error("Insertion into PID %d failed unexpectedly: %s", process_id, e)
