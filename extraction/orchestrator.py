"""
End-to-end orchestration of one extraction run.

Sequences decode → normalize → recognize → post-process for a single input
image and turns every stage failure into a terminal outcome instead of an
exception.

State machine:

    IDLE → DECODING → NORMALIZING → RECOGNIZING → POST_PROCESSING → DONE
                 ↘           ↘             ↘
                  FAILED      FAILED        FAILED

CANCELLED is reached from any stage when the run's token is cancelled
before the next transition.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from cancellation import CancellationToken
from config import EXTRACTION_ERROR_TEXT
from errors import RecognitionFailure, RunCancelled
from logging_utils import bind_run_id
from preprocessing import PreprocessConfig, RawImage, decode_image, normalize_image
from recognition import OCREngine, RecognitionConfig, get_engine, recognize, to_display_text

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """States of a single extraction run."""

    IDLE = "idle"
    DECODING = "decoding"
    NORMALIZING = "normalizing"
    RECOGNIZING = "recognizing"
    POST_PROCESSING = "post_processing"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({PipelineState.DONE, PipelineState.FAILED, PipelineState.CANCELLED})

StateCallback = Callable[[str, PipelineState], None]


def new_run_id() -> str:
    """Short random identifier for a run."""
    return uuid.uuid4().hex[:8]


@dataclass
class PipelineOutcome:
    """Terminal result of one extraction run.

    Attributes:
        run_id: Identifier of the run.
        state: Terminal state (DONE, FAILED or CANCELLED).
        display_text: Text to show: the extracted line, NO_TEXT_FOUND, or
                      EXTRACTION_ERROR_TEXT. None for cancelled runs.
        states: Every state the run passed through, in order.
        raw_text: Whitelist-filtered engine output (DONE runs only).
        engine: Name of the engine used (if recognition ran).
        failed_stage: Stage that failed (FAILED runs only).
        error: The exception that ended the run (FAILED/CANCELLED runs).
        elapsed: Wall-clock seconds for the whole run.
    """

    run_id: str
    state: PipelineState
    display_text: str | None
    states: list[PipelineState] = field(default_factory=list)
    raw_text: str | None = None
    engine: str | None = None
    failed_stage: PipelineState | None = None
    error: BaseException | None = field(default=None, repr=False)
    elapsed: float = 0.0

    def __post_init__(self) -> None:
        if self.state not in TERMINAL_STATES:
            raise ValueError(f"Outcome state must be terminal, got {self.state.value!r}")
        if self.display_text is None and self.state is not PipelineState.CANCELLED:
            raise ValueError(f"A {self.state.value!r} outcome needs display text")

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.DONE

    @property
    def failed(self) -> bool:
        return self.state is PipelineState.FAILED

    @property
    def cancelled(self) -> bool:
        return self.state is PipelineState.CANCELLED


class PipelineOrchestrator:
    """Runs the extraction pipeline for one image at a time per call.

    The orchestrator holds only configuration; every run owns its own
    buffers, so several runs may be in flight on one instance.

    Attributes:
        engine: OCR engine shared by all runs.
        preprocess_config: Configuration for the normalizer.
        recognition_config: Configuration for the recognizer.
        artifact_dir: If set, each run saves its preprocessing images under
                      ``artifact_dir/<run_id>``.
    """

    def __init__(
        self,
        engine: OCREngine | None = None,
        preprocess_config: PreprocessConfig | None = None,
        recognition_config: RecognitionConfig | None = None,
        artifact_dir: str | None = None,
    ):
        self.engine = engine if engine is not None else get_engine()
        self.preprocess_config = preprocess_config or PreprocessConfig()
        self.recognition_config = recognition_config or RecognitionConfig()
        self.artifact_dir = artifact_dir

        self.preprocess_config.validate()
        self.recognition_config.validate()

    async def run(
        self,
        raw: RawImage,
        cancel_token: CancellationToken | None = None,
        run_id: str | None = None,
        on_state: StateCallback | None = None,
    ) -> PipelineOutcome:
        """Extract text from one image.

        Never raises for stage failures: they end the run in FAILED with
        EXTRACTION_ERROR_TEXT as display text, and the error is logged.

        Args:
            raw: The dropped/pasted image.
            cancel_token: Consulted before every state transition.
            run_id: Identifier for logs and the outcome. Generated if None.
            on_state: Called with (run_id, state) on every transition.

        Returns:
            PipelineOutcome in a terminal state.
        """
        run_id = run_id or new_run_id()
        token = cancel_token or CancellationToken()
        states: list[PipelineState] = [PipelineState.IDLE]
        start = time.perf_counter()

        def advance(state: PipelineState) -> None:
            token.raise_if_cancelled()
            states.append(state)
            logger.debug("→ %s", state.value)
            if on_state is not None:
                on_state(run_id, state)

        def finish(state: PipelineState, **kwargs) -> PipelineOutcome:
            states.append(state)
            if on_state is not None:
                on_state(run_id, state)
            return PipelineOutcome(
                run_id=run_id,
                state=state,
                states=states,
                elapsed=time.perf_counter() - start,
                **kwargs,
            )

        with bind_run_id(run_id):
            logger.info("Starting extraction of %r", raw)
            engine_name = None
            try:
                advance(PipelineState.DECODING)
                buffer = await asyncio.to_thread(decode_image, raw)

                advance(PipelineState.NORMALIZING)
                artifact_dir = f"{self.artifact_dir}/{run_id}" if self.artifact_dir else None
                encoded = await asyncio.to_thread(
                    normalize_image, buffer, self.preprocess_config, artifact_dir
                )
                del buffer

                advance(PipelineState.RECOGNIZING)
                engine_name = self.engine.name
                result = await recognize(
                    encoded,
                    self.recognition_config,
                    engine=self.engine,
                    cancel_token=token,
                )

                advance(PipelineState.POST_PROCESSING)
                display_text = to_display_text(result.text)
            except RunCancelled as e:
                logger.info("Run cancelled during %s: %s", states[-1].value, e)
                return finish(PipelineState.CANCELLED, display_text=None, engine=engine_name, error=e)
            except Exception as e:
                failed_stage = states[-1]
                if isinstance(e, RecognitionFailure):
                    logger.error("Extraction failed during %s: %s", failed_stage.value, e)
                else:
                    logger.error("Extraction failed during %s: %s", failed_stage.value, e, exc_info=True)
                return finish(
                    PipelineState.FAILED,
                    display_text=EXTRACTION_ERROR_TEXT,
                    engine=engine_name,
                    failed_stage=failed_stage,
                    error=e,
                )

            outcome = finish(
                PipelineState.DONE,
                display_text=display_text,
                raw_text=result.text,
                engine=result.engine,
            )
            logger.info("Extraction done in %.2fs: %r", outcome.elapsed, display_text)
            return outcome
