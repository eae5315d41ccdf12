"""
Preprocessing pipeline: decoded pixels in, encoded grayscale image out.

The pipeline is: AverageGrayscale → encode (PNG). It runs over the full
buffer exactly once and preserves the image dimensions.
"""

import logging

from .config import PreprocessConfig, PreprocessResult
from .encoding import encode_image
from .steps import AverageGrayscaleStep, Pipeline, PreprocessStep
from .types import EncodedImage, PixelBuffer

logger = logging.getLogger(__name__)


def build_pipeline(config: PreprocessConfig) -> Pipeline:
    """Build the standard preprocessing Pipeline for a config."""
    steps: list[PreprocessStep] = [AverageGrayscaleStep()]
    return Pipeline(steps=steps)


def run_pipeline(
    buffer: PixelBuffer,
    config: PreprocessConfig | None = None,
    artifact_dir: str | None = None,
) -> PreprocessResult:
    """Apply the preprocessing pipeline to a decoded image.

    The buffer is owned by the pipeline for the duration of the call and is
    mutated in place; callers must not reuse it afterwards.

    Args:
        buffer: Decoded RGBA pixels.
        config: Preprocessing configuration. If None, uses default settings.
        artifact_dir: Optional directory to save intermediate images.

    Returns:
        PreprocessResult holding the encoded image.

    Raises:
        ValueError: If the configuration is invalid.

    Examples:
        >>> buffer = PixelBuffer.from_flat(1, 1, [255, 0, 0, 255])
        >>> run_pipeline(buffer).dimensions
        (1, 1)
    """
    if config is None:
        config = PreprocessConfig()

    config.validate()

    pipeline = build_pipeline(config)
    pipeline_result = pipeline.run(buffer.data, artifact_dir=artifact_dir)
    buffer.data = pipeline_result.final

    encoded = encode_image(
        buffer,
        fmt=config.output_format,
        compression=config.png_compression,
    )
    logger.debug("Normalized %sx%s image to %r", buffer.width, buffer.height, encoded)

    return PreprocessResult(
        encoded=encoded,
        config=config,
        artifact_paths=pipeline_result.artifact_paths,
        step_metadata=pipeline_result.step_metadata,
    )


def normalize_image(
    buffer: PixelBuffer,
    config: PreprocessConfig | None = None,
    artifact_dir: str | None = None,
) -> EncodedImage:
    """Desaturate a decoded image and encode it for recognition."""
    return run_pipeline(buffer, config, artifact_dir=artifact_dir).encoded
