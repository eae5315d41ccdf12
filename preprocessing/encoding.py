"""
Encoding of normalized pixels into a self-contained image container.

The recognizer never sees raw pixel buffers: the normalizer hands it a
lossless PNG, and engines decode that themselves.
"""

import cv2
import numpy as np

from errors import ImageDecodeError

from .types import EncodedImage, PixelBuffer

_MIME_TYPES = {
    "png": "image/png",
}


def encode_image(
    buffer: PixelBuffer,
    fmt: str = "png",
    compression: int = 3,
) -> EncodedImage:
    """Encode an RGBA PixelBuffer.

    Args:
        buffer: Pixels to encode. Not modified.
        fmt: Container format. Only lossless "png" is supported.
        compression: zlib compression level 0-9.

    Returns:
        EncodedImage holding the file bytes and dimensions.

    Raises:
        ValueError: If the format is unsupported.
        RuntimeError: If OpenCV fails to encode the pixels.
    """
    mime_type = _MIME_TYPES.get(fmt.lower())
    if mime_type is None:
        raise ValueError(f"Unsupported output format: {fmt!r}")

    # OpenCV stores color channels as BGR(A)
    bgra = cv2.cvtColor(buffer.data, cv2.COLOR_RGBA2BGRA)
    ok, encoded = cv2.imencode(f".{fmt.lower()}", bgra, [cv2.IMWRITE_PNG_COMPRESSION, compression])
    if not ok:
        raise RuntimeError(f"{fmt} encode failed for {buffer.width}x{buffer.height} image")

    return EncodedImage(
        data=encoded.tobytes(),
        mime_type=mime_type,
        width=buffer.width,
        height=buffer.height,
    )


def decode_to_rgba(image: EncodedImage) -> np.ndarray:
    """Decode an EncodedImage back to an RGBA uint8 array.

    Raises:
        ImageDecodeError: If the bytes are not a decodable image.
    """
    array = np.frombuffer(image.data, dtype=np.uint8)
    decoded = cv2.imdecode(array, cv2.IMREAD_UNCHANGED)
    if decoded is None:
        raise ImageDecodeError(f"Could not decode {image!r}")

    if decoded.ndim == 2:
        return cv2.cvtColor(decoded, cv2.COLOR_GRAY2RGBA)
    if decoded.shape[2] == 3:
        return cv2.cvtColor(decoded, cv2.COLOR_BGR2RGBA)
    return cv2.cvtColor(decoded, cv2.COLOR_BGRA2RGBA)
