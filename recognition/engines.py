"""
OCR engine interface and backend implementations.

Engines are black-box recognizers: they take an encoded image, a language
code and a whitelist string, and return the recognized text with one line
per text line. They are blocking; the invoker runs them off the event loop.
"""

from __future__ import annotations

import dataclasses
import io
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Protocol

import pytesseract
from PIL import Image

import config
from preprocessing.types import EncodedImage
from warnings_utils import suppress_easyocr_warnings

from .progress import ProgressCallback, ProgressEvent

logger = logging.getLogger(__name__)


class OCREngine(Protocol):
    """Interface for OCR engine backends."""

    name: str

    def recognize(
        self,
        image: EncodedImage,
        language: str,
        whitelist: str,
        on_progress: ProgressCallback,
    ) -> str:
        """Recognize text in ``image``.

        Args:
            image: Encoded (PNG) image.
            language: Tesseract-style language code ("vie").
            whitelist: Characters the engine may emit.
            on_progress: Called zero or more times with progress events.

        Returns:
            Recognized text; lines separated by newlines.
        """


def _engine_language(language: str, mapping: dict[str, str]) -> str:
    code = mapping.get(language)
    if code is None:
        raise ValueError(f"Unsupported language {language!r}; expected one of {sorted(mapping)}")
    return code


@dataclass
class EasyOCREngine:
    """Local engine backed by EasyOCR.

    The EasyOCR reader loads its detection and recognition models on first
    use and is then reused for every call on this instance.

    Attributes:
        gpu: Whether EasyOCR may use CUDA. Defaults to config.EASYOCR_GPU.
        paragraph: Let EasyOCR merge boxes into paragraphs before returning.
    """

    gpu: bool | None = None
    paragraph: bool = False
    name: str = field(default="easyocr", init=False)
    _reader: Any = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.gpu is None:
            self.gpu = config.EASYOCR_GPU

    def _get_reader(self, lang: str, on_progress: ProgressCallback):
        with self._lock:
            if self._reader is None:
                on_progress(ProgressEvent("loading language model", 0.0, self.name))
                logger.info("Initializing EasyOCR (lang=%s, gpu=%s)...", lang, self.gpu)
                suppress_easyocr_warnings()
                import easyocr as _easyocr
                self._reader = _easyocr.Reader([lang], gpu=self.gpu, verbose=False)
                on_progress(ProgressEvent("loading language model", 1.0, self.name))
            return self._reader

    def recognize(
        self,
        image: EncodedImage,
        language: str,
        whitelist: str,
        on_progress: ProgressCallback,
    ) -> str:
        lang = _engine_language(language, {config.OCR_LANGUAGE: config.EASYOCR_LANGUAGE})
        reader = self._get_reader(lang, on_progress)

        on_progress(ProgressEvent("recognizing text", 0.0, self.name))
        # EasyOCR decodes encoded bytes itself
        lines = reader.readtext(
            image.data,
            detail=0,
            paragraph=self.paragraph,
            allowlist=whitelist,
        )
        on_progress(ProgressEvent("recognizing text", 1.0, self.name))
        return "\n".join(lines)


@dataclass
class TesseractEngine:
    """Local engine backed by the Tesseract CLI through pytesseract.

    The binary comes from config.TESSERACT_CMD (VTE_TESSERACT_CMD).

    Attributes:
        psm: Tesseract page segmentation mode. Defaults to config.TESSERACT_PSM.
    """

    psm: int | None = None
    name: str = field(default="tesseract", init=False)

    def __post_init__(self) -> None:
        if self.psm is None:
            self.psm = config.TESSERACT_PSM
        if config.TESSERACT_CMD:
            pytesseract.pytesseract.tesseract_cmd = config.TESSERACT_CMD

    def build_config(self, whitelist: str) -> str:
        """Command-line options passed to tesseract."""
        return f"--psm {self.psm} -c tessedit_char_whitelist={whitelist}"

    def recognize(
        self,
        image: EncodedImage,
        language: str,
        whitelist: str,
        on_progress: ProgressCallback,
    ) -> str:
        lang = _engine_language(language, {config.OCR_LANGUAGE: config.TESSERACT_LANGUAGE})

        on_progress(ProgressEvent("recognizing text", 0.0, self.name))
        with Image.open(io.BytesIO(image.data)) as img:
            text = pytesseract.image_to_string(img, lang=lang, config=self.build_config(whitelist))
        on_progress(ProgressEvent("recognizing text", 1.0, self.name))
        return text


_ENGINES: dict[str, type] = {
    "easyocr": EasyOCREngine,
    "tesseract": TesseractEngine,
}


def available_engines() -> list[str]:
    """Names of all registered engine backends."""
    return sorted(_ENGINES)


def get_engine() -> OCREngine:
    """Instantiate the configured OCR engine."""
    return get_engine_by_name(config.OCR_ENGINE)


def get_engine_by_name(engine_name: str) -> OCREngine:
    """Instantiate an OCR engine by name."""
    engine_cls = _ENGINES.get(engine_name)
    if engine_cls is None:
        raise ValueError(f"Unknown OCR engine: {engine_name}")
    return engine_cls()


def get_engine_with_overrides(
    engine_name: str | None = None,
    **kwargs,
) -> OCREngine:
    """Instantiate an OCR engine with parameter overrides.

    Args:
        engine_name: Engine name (e.g. ``"tesseract"``). Defaults to
            ``config.OCR_ENGINE`` if None.
        **kwargs: Constructor keyword arguments to override. Must be valid
            init fields of the selected engine class.

    Raises:
        ValueError: If ``engine_name`` is unknown or any kwarg is not a
            valid field for the selected engine.
    """
    name = engine_name if engine_name is not None else config.OCR_ENGINE
    engine_cls = _ENGINES.get(name)
    if engine_cls is None:
        raise ValueError(f"Unknown OCR engine: {name!r}")
    valid_fields = {f.name for f in dataclasses.fields(engine_cls) if f.init}
    unknown = set(kwargs) - valid_fields
    if unknown:
        raise ValueError(
            f"Unknown kwargs for engine {name!r}: {sorted(unknown)}"
        )
    return engine_cls(**kwargs)
