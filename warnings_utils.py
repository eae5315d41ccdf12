"""Warnings helpers to keep runtime output clean."""

from __future__ import annotations

import warnings


def suppress_easyocr_warnings() -> None:
    """Silence torch DataLoader pin_memory warnings raised inside EasyOCR.

    EasyOCR always asks for pinned memory; on CPU-only and MPS machines torch
    warns about it once per recognition.
    """
    for pattern in (r".*pin_memory.*MPS.*", r".*pin_memory.*no accelerator.*"):
        warnings.filterwarnings(
            "ignore",
            message=pattern,
            category=UserWarning,
            module=r"torch\.utils\.data\.dataloader",
        )
