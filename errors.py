"""Exception types shared by the extraction pipeline and its surfaces."""

from __future__ import annotations


class TextExtractionError(Exception):
    """Base class for every error raised by this package."""


class InvalidInput(TextExtractionError):
    """The dropped or pasted item is not an image."""


class UnsupportedFormat(InvalidInput):
    """The declared MIME type is not an image type."""

    def __init__(self, mime_type: str | None):
        self.mime_type = mime_type
        super().__init__(f"Unsupported input type: {mime_type!r}")


class ImageDecodeError(TextExtractionError):
    """Image bytes could not be decoded into pixels."""


class RecognitionFailure(TextExtractionError):
    """The OCR engine failed for any reason."""


class RecognitionTimeout(RecognitionFailure):
    """The OCR engine did not answer within the configured timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Recognition did not finish within {timeout:g}s")


class RunCancelled(TextExtractionError):
    """A newer run superseded this one."""


class EmptyCopySource(TextExtractionError):
    """Copy was requested while the display holds nothing worth copying."""


class ClipboardWriteFailure(TextExtractionError):
    """Writing text to the clipboard failed."""


class ClipboardReadFailure(TextExtractionError):
    """The clipboard could not be read."""
