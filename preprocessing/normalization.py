"""
Grayscale normalization for OCR.

The desaturation is a plain arithmetic mean of the red, green and blue
channels, not a luminance-weighted conversion.
"""

import numpy as np

from .types import CHANNELS, PixelBuffer


def _validate_rgba(img: np.ndarray) -> None:
    if not isinstance(img, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(img).__name__}")

    if img.ndim != 3:
        raise ValueError(
            f"Image must be a 3D (height, width, channels) array, "
            f"got {img.ndim}D array with shape {img.shape}"
        )

    if img.size == 0:
        raise ValueError("Image array is empty")

    if img.shape[2] != CHANNELS:
        raise ValueError(
            f"Unsupported number of channels: {img.shape[2]}. Expected 4 (RGBA)."
        )

    if img.dtype != np.uint8:
        raise ValueError(f"Expected uint8 pixels, got {img.dtype}")


def average_grayscale_inplace(img: np.ndarray) -> np.ndarray:
    """Desaturate an RGBA array in place.

    Each pixel's R, G and B are replaced by round((R + G + B) / 3); alpha is
    left untouched. A sum of three integers divided by 3 never ends in .5,
    so the rounding has no ties to break.

    Args:
        img: RGBA uint8 array of shape (height, width, 4). Mutated.

    Returns:
        The same array, for chaining.

    Raises:
        TypeError: If img is not a numpy array.
        ValueError: If img is not a non-empty uint8 RGBA array.

    Examples:
        >>> px = np.array([[[10, 20, 40, 7]]], dtype=np.uint8)
        >>> average_grayscale_inplace(px)[0, 0].tolist()
        [23, 23, 23, 7]
    """
    _validate_rgba(img)
    totals = img[..., :3].sum(axis=2, dtype=np.uint16)
    avg = np.rint(totals / 3.0).astype(np.uint8)
    img[..., :3] = avg[..., np.newaxis]
    return img


def average_grayscale_(buffer: PixelBuffer) -> PixelBuffer:
    """Desaturate a PixelBuffer in place and return it."""
    average_grayscale_inplace(buffer.data)
    return buffer
