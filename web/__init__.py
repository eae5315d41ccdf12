"""
Web interface module for the text extractor.

Provides a FastAPI page where an image can be dropped or pasted, plus the
JSON API the page talks to.
"""

from .app import create_app, main

__all__ = ["create_app", "main"]
