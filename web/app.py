"""
FastAPI application for the drag-and-drop text extraction page.
"""

import argparse
import logging
from collections import OrderedDict
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.responses import JSONResponse

from config import (
    COPY_SUCCESS_MESSAGE,
    EMPTY_COPY_MESSAGE,
    EXTRACTION_ERROR_TEXT,
    INVALID_DROP_MESSAGE,
    NOTIFICATION_DURATION_MS,
    PLACEHOLDER_TEXT,
    PROCESSING_TEXT,
    WEB_HOST,
    WEB_PORT,
)
from extraction import PipelineOrchestrator
from logging_utils import add_logging_args, configure_logging
from recognition import OCREngine, available_engines, get_engine_by_name
from web.api import api_router
from web.templates_env import TEMPLATES

logger = logging.getLogger(__name__)

_STATIC_DIR = Path(__file__).parent / "static"


def create_app(
    engine: OCREngine | None = None,
    orchestrator: PipelineOrchestrator | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        engine: OCR engine for the default orchestrator. Ignored when an
                orchestrator is given.
        orchestrator: Pipeline to serve. Built from ``engine`` if None.
    """
    app = FastAPI(title="Vietnamese Text Extractor", version="0.1.0", docs_url="/docs", redoc_url="/redoc")
    app.state.orchestrator = orchestrator or PipelineOrchestrator(engine=engine)
    app.state.sessions = OrderedDict()

    app.mount("/static", StaticFiles(directory=str(_STATIC_DIR)), name="static")
    app.include_router(api_router)

    # Return 400 for request validation errors (e.g. missing upload)
    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.get("/", include_in_schema=False)
    async def index(request: Request):
        """Drop zone, text area and copy button."""
        return TEMPLATES.TemplateResponse(request, 'index.html', {
            'placeholder': PLACEHOLDER_TEXT,
            'messages': {
                'processing': PROCESSING_TEXT,
                'error': EXTRACTION_ERROR_TEXT,
                'invalidDrop': INVALID_DROP_MESSAGE,
                'emptyCopy': EMPTY_COPY_MESSAGE,
                'copied': COPY_SUCCESS_MESSAGE,
                'placeholder': PLACEHOLDER_TEXT,
                'notificationMs': NOTIFICATION_DURATION_MS,
            },
        })

    return app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"Launch the text extraction web page (port {WEB_PORT})."
    )
    add_serve_args(parser)
    add_logging_args(parser)
    return parser


def add_serve_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--host", default=WEB_HOST, help=f"Bind address (default: {WEB_HOST})")
    parser.add_argument("--port", type=int, default=WEB_PORT, help=f"Port (default: {WEB_PORT})")
    parser.add_argument(
        "--engine",
        choices=available_engines(),
        default=None,
        help="OCR engine (default: VTE_ENGINE or easyocr)",
    )


def serve(host: str, port: int, engine_name: str | None = None) -> int:
    engine = get_engine_by_name(engine_name) if engine_name else None
    app = create_app(engine=engine)

    logger.info("Starting Vietnamese Text Extractor...")
    logger.info("OCR engine: %s", app.state.orchestrator.engine.name)
    logger.info("Open http://%s:%s in your browser", host, port)
    logger.info("Press Ctrl+C to stop")
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the web server."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.verbose, args.quiet)
    return serve(args.host, args.port, args.engine)


if __name__ == '__main__':
    main()
