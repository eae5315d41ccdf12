"""Serve command: launch the drag-and-drop web page."""

from __future__ import annotations

import argparse
import logging

from config import WEB_PORT

logger = logging.getLogger(__name__)


def add_serve_subparser(subparsers: argparse._SubParsersAction) -> None:
    from web.app import add_serve_args

    serve_parser = subparsers.add_parser(
        "serve",
        help=f"Launch the web page (port {WEB_PORT})",
    )
    add_serve_args(serve_parser)
    serve_parser.set_defaults(_cmd=cmd_serve)


def cmd_serve(args: argparse.Namespace) -> int:
    from web.app import serve

    try:
        return serve(args.host, args.port, args.engine)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
