"""
Type definitions for the recognition module.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from config import OCR_LANGUAGE, RECOGNITION_TIMEOUT

from .progress import ProgressCallback, ProgressEvent
from .whitelist import VIETNAMESE_WHITELIST, whitelist_string


@dataclass(frozen=True)
class RecognitionConfig:
    """Parameters for one recognition call.

    Attributes:
        language: Language code handed to the engine. Fixed to Vietnamese.
        whitelist: Characters the output may contain (besides whitespace).
        on_progress: Optional observer for engine progress events.
        timeout: Seconds to wait for the engine; None waits forever.
    """

    language: str = OCR_LANGUAGE
    whitelist: frozenset[str] = VIETNAMESE_WHITELIST
    on_progress: ProgressCallback | None = field(default=None, compare=False)
    timeout: float | None = RECOGNITION_TIMEOUT

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid.
        """
        if self.language != OCR_LANGUAGE:
            raise ValueError(
                f"Only {OCR_LANGUAGE!r} is supported, got language={self.language!r}"
            )
        if not self.whitelist:
            raise ValueError("whitelist must not be empty")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @property
    def whitelist_string(self) -> str:
        return whitelist_string(self.whitelist)


@dataclass
class RecognitionResult:
    """Raw engine output for one image.

    Attributes:
        text: Recognized text, filtered to the whitelist. May contain line breaks.
        engine: Name of the engine that produced it.
        elapsed: Wall-clock seconds spent waiting for the engine.
        progress: Progress events observed during the call.
    """

    text: str
    engine: str
    elapsed: float = 0.0
    progress: list[ProgressEvent] = field(default_factory=list, repr=False)
