"""System clipboard access: text copy and image paste."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol

import pyperclip
from PIL import Image, ImageGrab

from errors import ClipboardReadFailure, ClipboardWriteFailure
from preprocessing.types import RawImage

logger = logging.getLogger(__name__)


class Clipboard(Protocol):
    """Interface for clipboard backends."""

    async def write_text(self, text: str) -> None:
        """Replace the clipboard contents with ``text``.

        Raises:
            ClipboardWriteFailure: If the write fails.
        """


class SystemClipboard:
    """Desktop clipboard through pyperclip (text) and Pillow (images)."""

    async def write_text(self, text: str) -> None:
        try:
            await asyncio.to_thread(pyperclip.copy, text)
        except pyperclip.PyperclipException as e:
            raise ClipboardWriteFailure(str(e)) from e

    def read_items(self) -> list[RawImage]:
        """Read the clipboard as a list of paste items.

        An image on the clipboard becomes one PNG item. Copied files become
        one item each, typed by file name; the caller type-checks them.

        Raises:
            ClipboardReadFailure: If no clipboard backend is available.
        """
        try:
            grabbed = ImageGrab.grabclipboard()
        except (OSError, NotImplementedError) as e:
            raise ClipboardReadFailure(f"Could not read clipboard: {e}") from e

        if grabbed is None:
            return []
        if isinstance(grabbed, Image.Image):
            return [RawImage.from_pil(grabbed, name="clipboard.png")]

        items = []
        for filename in grabbed:
            path = Path(filename)
            if not path.is_file():
                logger.debug("Skipping clipboard entry that is not a file: %s", filename)
                continue
            items.append(RawImage.from_path(path))
        return items
