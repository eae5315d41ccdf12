"""
The Vietnamese character whitelist.

Built once at import time as an immutable set of code points. Engines get
the string form; the invoker filters engine output against the set.
"""

import unicodedata

from config import WHITELIST_LATIN_LOWER, WHITELIST_VIETNAMESE_LOWER


def _with_uppercase(lower: str) -> str:
    upper = lower.upper()
    if len(upper) != len(lower):
        raise ValueError("Whitelist letters must have single code point uppercase forms")
    return lower + upper


def build_whitelist(*lower_groups: str) -> tuple[str, ...]:
    """Expand lowercase letter groups into an ordered, de-duplicated tuple.

    Each group contributes its lowercase letters followed by their
    uppercase forms. Letters are stored NFC-composed.
    """
    ordered: dict[str, None] = {}
    for group in lower_groups:
        for ch in _with_uppercase(unicodedata.normalize("NFC", group)):
            ordered[ch] = None
    return tuple(ordered)


_ORDERED = build_whitelist(WHITELIST_LATIN_LOWER, WHITELIST_VIETNAMESE_LOWER)

# Process-wide constants, never rebuilt per call
VIETNAMESE_WHITELIST: frozenset[str] = frozenset(_ORDERED)
WHITELIST_STRING: str = "".join(_ORDERED)


def whitelist_string(whitelist: frozenset[str]) -> str:
    """String form of a whitelist, as engines expect it."""
    if whitelist is VIETNAMESE_WHITELIST:
        return WHITELIST_STRING
    return "".join(sorted(whitelist))


def filter_to_whitelist(text: str, whitelist: frozenset[str] = VIETNAMESE_WHITELIST) -> str:
    """Drop every non-whitespace character that is not whitelisted.

    Text is NFC-normalized first so that a base letter followed by
    combining tone marks matches its precomposed whitelist entry instead of
    losing the marks.

    Examples:
        >>> filter_to_whitelist("Xin chào, 2024!")
        'Xin chào '
    """
    composed = unicodedata.normalize("NFC", text)
    return "".join(ch for ch in composed if ch in whitelist or ch.isspace())
