"""
Type definitions for the preprocessing module.

These are the hand-off objects between pipeline stages: the raw input as it
arrives from a drop or paste, the decoded pixel buffer the normalizer works
on, and the encoded image handed to the recognizer.
"""

from __future__ import annotations

import io
import mimetypes
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

# Number of interleaved channels per pixel (R, G, B, A)
CHANNELS = 4


@dataclass(frozen=True)
class RawImage:
    """Opaque image bytes with the MIME type declared by their source.

    Attributes:
        data: The file contents as delivered by the drop/paste/upload.
        mime_type: Declared MIME type (e.g. "image/png"). Not verified
                   against the bytes; decoding does that.
        name: Optional display name (file name) for logging.
    """

    data: bytes
    mime_type: str
    name: str | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> RawImage:
        """Read a file from disk, guessing its MIME type from the name."""
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            data=path.read_bytes(),
            mime_type=mime_type or "application/octet-stream",
            name=path.name,
        )

    @classmethod
    def from_pil(cls, image: Image.Image, name: str | None = None) -> RawImage:
        """Wrap an in-memory Pillow image (e.g. a clipboard grab) as PNG bytes."""
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return cls(data=buffer.getvalue(), mime_type="image/png", name=name)

    def __repr__(self) -> str:
        return f"RawImage(name={self.name!r}, mime_type={self.mime_type!r}, size={len(self.data)})"


@dataclass
class PixelBuffer:
    """Decoded RGBA pixels in row-major order.

    The array has shape (height, width, 4) and dtype uint8, so its flat view
    is the interleaved R, G, B, A sequence of length width * height * 4.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        data: RGBA array; the normalizer mutates it in place.
    """

    width: int
    height: int
    data: np.ndarray

    def __post_init__(self) -> None:
        if not isinstance(self.data, np.ndarray):
            raise TypeError(f"Expected numpy.ndarray, got {type(self.data).__name__}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.data.dtype != np.uint8:
            raise ValueError(f"Pixel data must be uint8, got {self.data.dtype}")
        expected = self.width * self.height * CHANNELS
        if self.data.size % CHANNELS != 0 or self.data.size != expected:
            raise ValueError(
                f"Pixel data has {self.data.size} values, expected "
                f"{self.width}x{self.height}x{CHANNELS} = {expected}"
            )
        if self.data.shape != (self.height, self.width, CHANNELS):
            self.data = self.data.reshape(self.height, self.width, CHANNELS)

    @classmethod
    def from_flat(cls, width: int, height: int, values) -> PixelBuffer:
        """Build a buffer from a flat R, G, B, A sequence."""
        return cls(width=width, height=height, data=np.asarray(values, dtype=np.uint8).copy())

    @property
    def flat(self) -> np.ndarray:
        """Flat interleaved view of the pixel data (shares memory)."""
        return self.data.reshape(-1)

    @property
    def dimensions(self) -> tuple[int, int]:
        """(width, height) of the buffer."""
        return self.width, self.height


@dataclass(frozen=True)
class EncodedImage:
    """A self-contained, re-decodable image ready for the OCR engine.

    Attributes:
        data: Encoded file bytes (PNG).
        mime_type: MIME type of ``data``.
        width: Width in pixels.
        height: Height in pixels.
    """

    data: bytes
    mime_type: str
    width: int
    height: int

    def __repr__(self) -> str:
        return (
            f"EncodedImage(mime_type={self.mime_type!r}, "
            f"size={self.width}x{self.height}, bytes={len(self.data)})"
        )
