"""Pytest configuration: fast by default.

Slow tests (real OCR engines / model loading) are skipped unless --slow is passed.
Run the full suite:   pytest --slow
Run fast tests only:  pytest          (default)
"""
import io
import threading
from dataclasses import dataclass, field

import pytest
from PIL import Image



def pytest_addoption(parser):
    parser.addoption(
        "--slow",
        action="store_true",
        default=False,
        help="Run slow tests that load OCR models (EasyOCR, Tesseract)",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--slow"):
        return  # run everything
    skip_slow = pytest.mark.skip(reason="slow test skipped, pass --slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@dataclass
class FakeEngine:
    """Scriptable stand-in for an OCR engine.

    Returns ``text`` (or raises ``error``), optionally blocking on ``gate``
    until the test releases it. Every call is recorded.
    """

    text: str = ""
    error: Exception | None = None
    gate: threading.Event | None = None
    events: tuple = ()
    name: str = "fake"
    calls: list = field(default_factory=list)

    def recognize(self, image, language, whitelist, on_progress):
        self.calls.append((image, language, whitelist))
        for event in self.events:
            on_progress(event)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_engine():
    """Factory for FakeEngine instances."""
    return FakeEngine


@pytest.fixture
def png_bytes():
    """Factory producing PNG-encoded bytes of a solid-color RGBA image."""
    def _make(color=(255, 255, 255, 255), size=(4, 3), mode="RGBA"):
        img = Image.new(mode, size, color)
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()
    return _make
