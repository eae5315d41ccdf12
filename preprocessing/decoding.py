"""
Image decoding: raw dropped/pasted bytes to an RGBA pixel buffer.
"""

import io
import logging

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from config import IMAGE_MIME_PREFIX
from errors import ImageDecodeError, UnsupportedFormat

from .types import PixelBuffer, RawImage

logger = logging.getLogger(__name__)


def is_image_type(mime_type: str | None) -> bool:
    """Check if a declared MIME type names an image."""
    return bool(mime_type) and mime_type.lower().startswith(IMAGE_MIME_PREFIX)


def decode_image(raw: RawImage) -> PixelBuffer:
    """Decode a RawImage into an RGBA PixelBuffer.

    EXIF orientation is applied so the pixels match what a browser would
    draw for the same file.

    Args:
        raw: The dropped/pasted image.

    Returns:
        PixelBuffer with the decoded pixels. Any Pillow mode (palette,
        grayscale, CMYK, ...) is converted to RGBA.

    Raises:
        UnsupportedFormat: If the declared MIME type is not an image type.
        ImageDecodeError: If the bytes cannot be decoded as an image.
    """
    if not is_image_type(raw.mime_type):
        raise UnsupportedFormat(raw.mime_type)

    try:
        with Image.open(io.BytesIO(raw.data)) as image:
            image.load()
            image = ImageOps.exif_transpose(image)
            if image.mode != "RGBA":
                image = image.convert("RGBA")
            pixels = np.array(image, dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError,
            EOFError, SyntaxError) as e:
        raise ImageDecodeError(f"Could not decode {raw.name or 'image'}: {e}") from e

    height, width = pixels.shape[:2]
    logger.debug("Decoded %r to %sx%s RGBA", raw, width, height)
    return PixelBuffer(width=width, height=height, data=pixels)
