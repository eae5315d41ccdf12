"""Central configuration for Vietnamese text extraction.

All tunable parameters are defined here with descriptive names.
A few of them can be overridden through environment variables so the web
server and CLI can be reconfigured without code changes.
"""

import os


def _get_env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _get_optional_float(key: str, default: float | None) -> float | None:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


# =============================================================================
# LANGUAGE
# =============================================================================

# Tesseract-style language code. Recognition is always pinned to Vietnamese;
# engines are never asked to auto-detect the language.
OCR_LANGUAGE = "vie"

# Engine-specific spellings of OCR_LANGUAGE
EASYOCR_LANGUAGE = "vi"
TESSERACT_LANGUAGE = "vie"

# =============================================================================
# CHARACTER WHITELIST
# =============================================================================

# Plain Latin letters
WHITELIST_LATIN_LOWER = "abcdefghijklmnopqrstuvwxyz"

# Vietnamese vowels carrying a tone mark and/or vowel diacritic, plus đ.
# Uppercase forms are derived from these when the whitelist is built.
WHITELIST_VIETNAMESE_LOWER = (
    "áàảãạ"
    "âấầẩẫậ"
    "ăắằẳẵặ"
    "éèẻẽẹ"
    "êếềểễệ"
    "óòỏõọ"
    "ôốồổỗộ"
    "ơớờởỡợ"
    "úùủũụ"
    "ưứừửữự"
    "íìỉĩị"
    "ýỳỷỹỵ"
    "đ"
)

# =============================================================================
# OCR ENGINE
# =============================================================================

# Engine backend selection (see recognition.engines for the registry)
OCR_ENGINE = _get_env("VTE_ENGINE", "easyocr")

# Whether EasyOCR may use a CUDA device
EASYOCR_GPU = False

# Tesseract page segmentation mode (6 = assume a single uniform block of text)
TESSERACT_PSM = 6

# Path to the tesseract binary (empty: search PATH). pytesseract holds this
# process-wide, so it is not a per-engine option.
TESSERACT_CMD = _get_env("VTE_TESSERACT_CMD", "")

# Seconds to wait for the engine before giving up. None waits forever.
RECOGNITION_TIMEOUT = _get_optional_float("VTE_TIMEOUT", None)

# =============================================================================
# IMAGE PREPROCESSING
# =============================================================================

# Container format for the normalized image handed to the engine.
# Must be lossless.
ENCODED_IMAGE_FORMAT = "png"
SUPPORTED_ENCODED_FORMATS = ("png",)

# MIME prefix an input must carry to be accepted at all
IMAGE_MIME_PREFIX = "image/"

# =============================================================================
# DISPLAY TEXT
# =============================================================================

PLACEHOLDER_TEXT = "Your text will appear here..."
PROCESSING_TEXT = "Processing..."
NO_TEXT_FOUND = "No text found in the image."
EXTRACTION_ERROR_TEXT = "Error extracting text. Please try again."

# Alerts and notifications
INVALID_DROP_MESSAGE = "Please drop a valid image file."
EMPTY_COPY_MESSAGE = "There is no text to copy!"
COPY_SUCCESS_MESSAGE = "Text copied to clipboard!"

# How long the browser notification banner stays up
NOTIFICATION_DURATION_MS = 2000

# =============================================================================
# WEB SERVER
# =============================================================================

WEB_HOST = _get_env("VTE_HOST", "127.0.0.1")
WEB_PORT = _get_int("VTE_PORT", 30003)

# Per-browser extraction sessions kept by the server (least recently used
# sessions are dropped beyond this)
MAX_CLIENT_SESSIONS = 256
