"""Extract command: run the pipeline on image files."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from clipboard import SystemClipboard
from errors import InvalidInput
from extraction import ExtractionSession, RunPolicy
from preprocessing import RawImage

from cli.common import add_engine_args, build_orchestrator, copy_display, print_outcome

logger = logging.getLogger(__name__)


def add_extract_subparser(subparsers: argparse._SubParsersAction) -> None:
    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract Vietnamese text from image files",
    )
    extract_parser.add_argument(
        "paths",
        nargs="+",
        metavar="PATH",
        help="Image file(s) to read",
    )
    add_engine_args(extract_parser)
    extract_parser.add_argument(
        "--artifacts",
        metavar="DIR",
        default=None,
        help="Save preprocessing images for each run under DIR",
    )
    extract_parser.set_defaults(_cmd=cmd_extract)


def cmd_extract(args: argparse.Namespace) -> int:
    try:
        orchestrator = build_orchestrator(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    return asyncio.run(run_extract(orchestrator, args.paths, copy=args.copy))


async def run_extract(orchestrator, paths: list[str], copy: bool = False) -> int:
    """Extract each file in order, printing one line per file.

    Returns:
        0 if every file was extracted (and copied, when asked), else 1.
    """
    session = ExtractionSession(
        orchestrator,
        clipboard=SystemClipboard() if copy else None,
        policy=RunPolicy.QUEUE,
    )
    status = 0
    label_lines = len(paths) > 1

    for path in paths:
        try:
            item = RawImage.from_path(path)
        except OSError as exc:
            logger.error("Cannot read %s: %s", path, exc)
            status = 1
            continue

        try:
            outcome = await session.handle_drop(item)
        except InvalidInput as exc:
            logger.error("%s: %s", path, exc)
            status = 1
            continue

        print_outcome(outcome, Path(path).name if label_lines else None)
        if not outcome.succeeded:
            status = 1

    if copy and await copy_display(session) != 0:
        status = 1
    return status
