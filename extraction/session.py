"""
Extraction session: the user-facing side of the pipeline.

Owns the display slot, turns drop/paste events into pipeline runs, and
implements the copy action. Only the result of the current run is ever
shown; superseded runs are cancelled (or, with the queue policy, run to
completion strictly one after another).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol

from cancellation import CancellationToken
from clipboard import Clipboard
from config import (
    COPY_SUCCESS_MESSAGE,
    EMPTY_COPY_MESSAGE,
    INVALID_DROP_MESSAGE,
    PLACEHOLDER_TEXT,
    PROCESSING_TEXT,
)
from errors import ClipboardWriteFailure, EmptyCopySource, InvalidInput
from preprocessing import RawImage, is_image_type

from .orchestrator import PipelineOrchestrator, PipelineOutcome, new_run_id

logger = logging.getLogger(__name__)


class RunPolicy(str, Enum):
    """How a new image interacts with a run already in flight."""

    CANCEL_PREVIOUS = "cancel-previous"
    QUEUE = "queue"


class Notifier(Protocol):
    """Interface for user-visible alerts and transient notifications."""

    def alert(self, message: str) -> None:
        """Blocking, must-acknowledge message (invalid input, nothing to copy)."""

    def notify(self, message: str) -> None:
        """Transient banner (copy succeeded)."""


class LoggingNotifier:
    """Notifier for headless use: alerts and notifications go to the log."""

    def alert(self, message: str) -> None:
        logger.warning("%s", message)

    def notify(self, message: str) -> None:
        logger.info("%s", message)


@dataclass
class DisplaySurface:
    """The single text region shown to the user."""

    text: str = PLACEHOLDER_TEXT

    def show(self, text: str) -> None:
        self.text = text

    @property
    def is_copyable(self) -> bool:
        """False for the initial placeholder and whitespace-only content."""
        return self.text.strip() != "" and self.text != PLACEHOLDER_TEXT


class ExtractionSession:
    """Drop/paste/copy handling around a PipelineOrchestrator.

    Attributes:
        orchestrator: Runs the pipeline.
        display: The display slot; only the current run may write to it.
        policy: What happens to an in-flight run when a new image arrives.
        current_run_id: Id of the run whose outcome the display will accept.
    """

    def __init__(
        self,
        orchestrator: PipelineOrchestrator,
        clipboard: Clipboard | None = None,
        notifier: Notifier | None = None,
        policy: RunPolicy = RunPolicy.CANCEL_PREVIOUS,
    ):
        self.orchestrator = orchestrator
        self.clipboard = clipboard
        self.notifier = notifier or LoggingNotifier()
        self.policy = RunPolicy(policy)
        self.display = DisplaySurface()
        self.current_run_id: str | None = None
        self._current_token: CancellationToken | None = None
        self._previous_text = PLACEHOLDER_TEXT
        self._queue_lock = asyncio.Lock()
        self._active_runs = 0

    @property
    def is_idle(self) -> bool:
        """True when no run is in flight."""
        return self._active_runs == 0

    async def handle_drop(self, item: RawImage | None) -> PipelineOutcome:
        """Process a single dropped item.

        Raises:
            InvalidInput: If the item is missing or not an image. The user
                          is alerted before this is raised; no run starts.
        """
        if item is None or not is_image_type(item.mime_type):
            self.notifier.alert(INVALID_DROP_MESSAGE)
            mime_type = item.mime_type if item is not None else None
            raise InvalidInput(f"Dropped item is not an image: {mime_type!r}")
        return await self.submit(item)

    async def handle_paste(self, items: Iterable[RawImage]) -> list[PipelineOutcome]:
        """Process every image item of a paste event, in order.

        Non-image items are skipped without an alert.
        """
        outcomes = []
        for item in items:
            if not is_image_type(item.mime_type):
                logger.debug("Skipping pasted item of type %s", item.mime_type)
                continue
            outcomes.append(await self.submit(item))
        return outcomes

    async def submit(self, raw: RawImage) -> PipelineOutcome:
        """Start a run for ``raw`` according to the session's policy."""
        run_id = new_run_id()
        token = CancellationToken()
        self._active_runs += 1
        try:
            if self.policy is RunPolicy.QUEUE:
                async with self._queue_lock:
                    self._begin(run_id, token)
                    outcome = await self.orchestrator.run(raw, token, run_id)
            else:
                if self._current_token is not None:
                    self._current_token.cancel()
                self._begin(run_id, token)
                outcome = await self.orchestrator.run(raw, token, run_id)
        finally:
            self._active_runs -= 1

        self._apply(outcome)
        return outcome

    def cancel(self) -> None:
        """Cancel the current run, if any."""
        if self._current_token is not None:
            self._current_token.cancel("cancelled by user")

    def _begin(self, run_id: str, token: CancellationToken) -> None:
        if self.display.text != PROCESSING_TEXT:
            self._previous_text = self.display.text
        self.current_run_id = run_id
        self._current_token = token
        self.display.show(PROCESSING_TEXT)

    def _apply(self, outcome: PipelineOutcome) -> bool:
        if outcome.run_id != self.current_run_id:
            logger.info("Discarding outcome of superseded run %s", outcome.run_id)
            return False
        self._current_token = None
        if outcome.display_text is None:
            # Cancelled: put back whatever the run replaced.
            self.display.show(self._previous_text)
            return False
        self.display.show(outcome.display_text)
        return True

    async def copy_text(self) -> bool:
        """Copy the displayed text to the clipboard.

        Returns:
            True if the text was copied, False if the clipboard write failed
            (the failure is logged, not alerted).

        Raises:
            EmptyCopySource: If the display holds the placeholder or only
                             whitespace. The user is alerted first.
        """
        text = self.display.text
        if not self.display.is_copyable:
            self.notifier.alert(EMPTY_COPY_MESSAGE)
            raise EmptyCopySource(EMPTY_COPY_MESSAGE)

        if self.clipboard is None:
            logger.error("Failed to copy text: no clipboard configured")
            return False

        try:
            await self.clipboard.write_text(text)
        except ClipboardWriteFailure as e:
            logger.error("Failed to copy text: %s", e)
            return False

        self.notifier.notify(COPY_SUCCESS_MESSAGE)
        return True
