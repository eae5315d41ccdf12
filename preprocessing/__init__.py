"""
Image preprocessing module for Vietnamese text extraction.

Turns a dropped or pasted image into the form the OCR engine receives:
decode to RGBA pixels, desaturate with a uniform channel average, and
re-encode as a lossless PNG.

Key components:
- types: RawImage, PixelBuffer and EncodedImage hand-off objects
- decoding: decode_image() and the image MIME check
- normalization: the average-grayscale transform
- encoding: PNG encode/decode of pixel buffers
- steps: Class-based preprocessing steps with a common PreprocessStep interface
- pipeline: normalize_image() / run_pipeline() entry points
"""

from .config import PreprocessConfig, PreprocessResult
from .decoding import decode_image, is_image_type
from .encoding import encode_image, decode_to_rgba
from .normalization import (
    average_grayscale_,
    average_grayscale_inplace,
)
from .pipeline import build_pipeline, normalize_image, run_pipeline
from .steps import (
    AverageGrayscaleStep,
    Pipeline,
    PipelineStepResults,
    PreprocessStep,
    StepResult,
)
from .types import EncodedImage, PixelBuffer, RawImage

__all__ = [
    # Data model
    "RawImage",
    "PixelBuffer",
    "EncodedImage",
    # Config and results
    "PreprocessConfig",
    "PreprocessResult",
    # Function API
    "decode_image",
    "is_image_type",
    "encode_image",
    "decode_to_rgba",
    "average_grayscale_",
    "average_grayscale_inplace",
    "build_pipeline",
    "run_pipeline",
    "normalize_image",
    # Class-based API
    "PreprocessStep",
    "AverageGrayscaleStep",
    "Pipeline",
    "PipelineStepResults",
    "StepResult",
]
