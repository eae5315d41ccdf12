"""Options and helpers shared by the extraction commands."""

from __future__ import annotations

import argparse
import logging
import sys

from errors import EmptyCopySource
from extraction import ExtractionSession, PipelineOrchestrator, PipelineOutcome
from recognition import RecognitionConfig, available_engines, get_engine_with_overrides

logger = logging.getLogger(__name__)


def add_engine_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--engine",
        choices=available_engines(),
        default=None,
        help="OCR engine (default: VTE_ENGINE or easyocr)",
    )
    parser.add_argument(
        "--psm",
        type=int,
        default=None,
        help="Tesseract page segmentation mode (tesseract only)",
    )
    parser.add_argument(
        "--gpu",
        action="store_true",
        help="Let EasyOCR use a CUDA device (easyocr only)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Give up on recognition after this many seconds (default: wait)",
    )
    parser.add_argument(
        "--copy",
        action="store_true",
        help="Copy the extracted text to the clipboard",
    )


def build_orchestrator(args: argparse.Namespace) -> PipelineOrchestrator:
    """Build a PipelineOrchestrator from command-line options.

    Engine options are passed only when given, so an option that does not
    apply to the selected engine is an error rather than silently ignored.

    Raises:
        ValueError: If an option value is invalid.
    """
    overrides = {}
    if getattr(args, "psm", None) is not None:
        overrides["psm"] = args.psm
    if getattr(args, "gpu", False):
        overrides["gpu"] = True
    engine = get_engine_with_overrides(args.engine, **overrides)
    recognition_config = RecognitionConfig()
    if args.timeout is not None:
        recognition_config = RecognitionConfig(timeout=args.timeout)
    return PipelineOrchestrator(
        engine=engine,
        recognition_config=recognition_config,
        artifact_dir=getattr(args, "artifacts", None),
    )


def print_outcome(outcome: PipelineOutcome, label: str | None = None) -> None:
    """Write a run's display text to stdout."""
    if outcome.display_text is None:
        return
    if label:
        print(f"{label}: {outcome.display_text}", file=sys.stdout)
    else:
        print(outcome.display_text, file=sys.stdout)


async def copy_display(session: ExtractionSession) -> int:
    """Copy the session's displayed text and map the result to an exit code."""
    try:
        copied = await session.copy_text()
    except EmptyCopySource:
        return 1
    return 0 if copied else 1
