"""Paste command: run the pipeline on images from the clipboard."""

from __future__ import annotations

import argparse
import asyncio
import logging

from clipboard import SystemClipboard
from errors import ClipboardReadFailure
from extraction import ExtractionSession, RunPolicy

from cli.common import add_engine_args, build_orchestrator, copy_display, print_outcome

logger = logging.getLogger(__name__)


def add_paste_subparser(subparsers: argparse._SubParsersAction) -> None:
    paste_parser = subparsers.add_parser(
        "paste",
        help="Extract Vietnamese text from the image(s) on the clipboard",
    )
    add_engine_args(paste_parser)
    paste_parser.set_defaults(_cmd=cmd_paste)


def cmd_paste(args: argparse.Namespace) -> int:
    clipboard = SystemClipboard()
    try:
        items = clipboard.read_items()
    except ClipboardReadFailure as exc:
        logger.error("%s", exc)
        return 1

    try:
        orchestrator = build_orchestrator(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    return asyncio.run(run_paste(orchestrator, items, clipboard if args.copy else None))


async def run_paste(orchestrator, items, clipboard=None) -> int:
    """Extract every image item, in clipboard order."""
    session = ExtractionSession(orchestrator, clipboard=clipboard, policy=RunPolicy.QUEUE)
    outcomes = await session.handle_paste(items)
    if not outcomes:
        logger.error("No image found on the clipboard")
        return 1

    for outcome in outcomes:
        print_outcome(outcome)

    status = 0 if all(o.succeeded for o in outcomes) else 1
    if clipboard is not None and await copy_display(session) != 0:
        status = 1
    return status
