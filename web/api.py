"""JSON API endpoints: extraction, engines and health."""

import logging

from fastapi import APIRouter, File, Form, Request, UploadFile
from starlette.responses import JSONResponse

from config import INVALID_DROP_MESSAGE, MAX_CLIENT_SESSIONS
from extraction import ExtractionSession, RunPolicy
from preprocessing import RawImage, is_image_type
from recognition import available_engines
from web.schemas import EnginesResponse, ExtractResponse, HealthResponse

logger = logging.getLogger(__name__)

api_router = APIRouter()


def get_session(app, client_id: str) -> ExtractionSession:
    """Return the extraction session for a browser page, creating it if needed.

    Sessions are kept in least-recently-used order and capped at
    MAX_CLIENT_SESSIONS. A dropped session's in-flight run still completes.
    """
    sessions = app.state.sessions
    session = sessions.get(client_id)
    if session is not None:
        sessions.move_to_end(client_id)
        return session

    session = ExtractionSession(app.state.orchestrator, policy=RunPolicy.CANCEL_PREVIOUS)
    sessions[client_id] = session
    while len(sessions) > MAX_CLIENT_SESSIONS:
        evicted, _ = sessions.popitem(last=False)
        logger.debug("Dropped extraction session for client %s", evicted)
    return session


@api_router.get('/health', response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    return HealthResponse(engine=request.app.state.orchestrator.engine.name)


@api_router.get('/api/engines', response_model=EnginesResponse)
async def list_engines(request: Request) -> EnginesResponse:
    """Names accepted by --engine / VTE_ENGINE, and the engine serving requests."""
    return EnginesResponse(
        engines=available_engines(),
        active=request.app.state.orchestrator.engine.name,
    )


@api_router.post('/api/extract', response_model=ExtractResponse)
async def extract(
    request: Request,
    file: UploadFile = File(...),
    client_id: str | None = Form(None),
):
    """Run the extraction pipeline on one uploaded image.

    A non-image upload is rejected with 400 before any run starts. Pipeline
    failures are not HTTP errors: the run ends in state "failed" with the
    error text as its display text.

    Uploads carrying the same ``client_id`` share a session: a new upload
    cancels that client's run in flight, which then ends "cancelled" with
    no text. Without a ``client_id`` every upload runs independently.
    """
    mime_type = file.content_type
    if not is_image_type(mime_type):
        logger.warning("Rejected upload %r of type %s", file.filename, mime_type)
        return JSONResponse(status_code=400, content={'error': INVALID_DROP_MESSAGE})

    raw = RawImage(data=await file.read(), mime_type=mime_type, name=file.filename)
    if client_id:
        outcome = await get_session(request.app, client_id).submit(raw)
    else:
        outcome = await request.app.state.orchestrator.run(raw)

    return ExtractResponse(
        run_id=outcome.run_id,
        state=outcome.state.value,
        text=outcome.display_text,
        engine=outcome.engine,
        failed_stage=outcome.failed_stage.value if outcome.failed_stage else None,
        states=[s.value for s in outcome.states],
        elapsed=outcome.elapsed,
    )
