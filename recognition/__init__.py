"""
Text recognition module.

Wraps the external OCR engine for Vietnamese text: fixed language, fixed
character whitelist, observable progress, optional timeout, and the
post-processing that turns engine output into one display line.

Key components:
- whitelist: The immutable Vietnamese character whitelist and output filter
- progress: ProgressEvent records and the ProgressStream observable
- engines: OCREngine interface, EasyOCR/Tesseract backends and registry
- invoker: async recognize() around a blocking engine call
- postprocess: to_display_text()
"""

from .engines import (
    EasyOCREngine,
    OCREngine,
    TesseractEngine,
    available_engines,
    get_engine,
    get_engine_by_name,
    get_engine_with_overrides,
)
from .invoker import recognize
from .postprocess import collapse_line_breaks, to_display_text
from .progress import ProgressCallback, ProgressEvent, ProgressStream
from .types import RecognitionConfig, RecognitionResult
from .whitelist import (
    VIETNAMESE_WHITELIST,
    WHITELIST_STRING,
    build_whitelist,
    filter_to_whitelist,
)

__all__ = [
    "OCREngine",
    "EasyOCREngine",
    "TesseractEngine",
    "available_engines",
    "get_engine",
    "get_engine_by_name",
    "get_engine_with_overrides",
    "recognize",
    "to_display_text",
    "collapse_line_breaks",
    "ProgressCallback",
    "ProgressEvent",
    "ProgressStream",
    "RecognitionConfig",
    "RecognitionResult",
    "VIETNAMESE_WHITELIST",
    "WHITELIST_STRING",
    "build_whitelist",
    "filter_to_whitelist",
]
