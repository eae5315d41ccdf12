"""
Post-processing of raw engine text into a single display line.
"""

import re

from config import NO_TEXT_FOUND

# Every character str.splitlines() treats as a line boundary
LINE_BREAK_RUN_RE = re.compile("[\r\n\v\f\x1c\x1d\x1e\x85\u2028\u2029]+")


def collapse_line_breaks(text: str) -> str:
    """Replace each run of line-break characters with a single space."""
    return LINE_BREAK_RUN_RE.sub(" ", text)


def to_display_text(raw: str | None) -> str:
    """Collapse raw OCR output into one trimmed line.

    Returns NO_TEXT_FOUND instead of an empty string. Applying the function
    to its own output returns the output unchanged.

    Examples:
        >>> to_display_text("xin  chào\\n\\nthế giới\\n")
        'xin  chào thế giới'
        >>> to_display_text("   ")
        'No text found in the image.'
    """
    line = collapse_line_breaks(raw or "").strip()
    return line or NO_TEXT_FOUND
