#!/usr/bin/env python3
"""
Unified CLI for the Vietnamese Text Extractor.

Usage:
    vte extract <path>...        # Extract text from image files
    vte extract img.png --copy   # ...and copy the result to the clipboard
    vte paste                    # Extract text from the clipboard image(s)
    vte serve                    # Launch the drag-and-drop web page (port 30003)
    vte engines                  # List available OCR engines
"""

import argparse
import logging
import sys

from logging_utils import configure_logging, add_logging_args
from cli.engines import add_engines_subparser
from cli.extract import add_extract_subparser
from cli.paste import add_paste_subparser
from cli.serve import add_serve_subparser

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vte",
        description="Vietnamese Text Extractor - read Vietnamese text from images",
    )
    add_logging_args(parser)
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    add_extract_subparser(subparsers)
    add_paste_subparser(subparsers)
    add_serve_subparser(subparsers)
    add_engines_subparser(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.verbose, args.quiet)

    cmd = getattr(args, "_cmd", None)
    if cmd is None:
        parser.print_help()
        return 1
    return cmd(args)


if __name__ == "__main__":
    sys.exit(main())
