"""Pydantic schemas for the HTTP API responses."""

from pydantic import BaseModel, Field


class ExtractResponse(BaseModel):
    """Body returned by POST /api/extract."""
    run_id: str
    state: str
    text: str | None = None
    engine: str | None = None
    failed_stage: str | None = None
    states: list[str] = Field(default_factory=list)
    elapsed: float = 0.0


class EnginesResponse(BaseModel):
    """Body returned by GET /api/engines."""
    engines: list[str]
    active: str


class HealthResponse(BaseModel):
    status: str = "ok"
    engine: str
