"""
Configuration for the preprocessing pipeline.

All preprocessing steps are parameterized through PreprocessConfig so a run
can be reproduced exactly from its config.
"""

from dataclasses import dataclass, field
from typing import Any

from config import ENCODED_IMAGE_FORMAT, SUPPORTED_ENCODED_FORMATS

from .types import EncodedImage


@dataclass(frozen=True)
class PreprocessConfig:
    """Configuration for all preprocessing steps.

    Attributes:
        output_format: Container format of the encoded image handed to the
                       recognizer. Must be lossless.
        png_compression: zlib level (0-9) used when encoding PNG. Affects
                         size and speed only, never pixel values.
    """

    output_format: str = ENCODED_IMAGE_FORMAT
    png_compression: int = 3

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid.
        """
        if self.output_format.lower() not in SUPPORTED_ENCODED_FORMATS:
            raise ValueError(
                f"output_format must be one of {SUPPORTED_ENCODED_FORMATS}, "
                f"got {self.output_format!r}"
            )

        if not 0 <= self.png_compression <= 9:
            raise ValueError(
                f"png_compression must be within [0, 9], got {self.png_compression}"
            )


@dataclass
class PreprocessResult:
    """Result of the preprocessing pipeline.

    Attributes:
        encoded: Normalized image, encoded and ready for recognition.
        config: The configuration used for preprocessing.
        artifact_paths: Dict mapping step names to saved file paths (if artifact saving enabled).
        step_metadata: Per-step status and metrics.
    """

    encoded: EncodedImage
    config: PreprocessConfig
    artifact_paths: dict[str, str] = field(default_factory=dict)
    step_metadata: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def dimensions(self) -> tuple[int, int]:
        """Get (width, height) of the encoded image."""
        return self.encoded.width, self.encoded.height
