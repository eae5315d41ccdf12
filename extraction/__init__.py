"""
Extraction module: the end-to-end pipeline and the session around it.

Key components:
- orchestrator: PipelineOrchestrator state machine and PipelineOutcome
- session: ExtractionSession (display slot, run policy, drop/paste/copy)
"""

from .orchestrator import (
    PipelineOrchestrator,
    PipelineOutcome,
    PipelineState,
    TERMINAL_STATES,
    new_run_id,
)
from .session import (
    DisplaySurface,
    ExtractionSession,
    LoggingNotifier,
    Notifier,
    RunPolicy,
)

__all__ = [
    "PipelineOrchestrator",
    "PipelineOutcome",
    "PipelineState",
    "TERMINAL_STATES",
    "new_run_id",
    "DisplaySurface",
    "ExtractionSession",
    "LoggingNotifier",
    "Notifier",
    "RunPolicy",
]
