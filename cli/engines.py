"""Engines command: list the available OCR backends."""

from __future__ import annotations

import argparse

import config
from recognition import available_engines


def add_engines_subparser(subparsers: argparse._SubParsersAction) -> None:
    engines_parser = subparsers.add_parser(
        "engines",
        help="List available OCR engines",
    )
    engines_parser.set_defaults(_cmd=cmd_engines)


def cmd_engines(args: argparse.Namespace) -> int:
    for name in available_engines():
        marker = " (default)" if name == config.OCR_ENGINE else ""
        print(f"{name}{marker}")
    return 0
