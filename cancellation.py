"""Cooperative cancellation tokens for pipeline runs."""

from __future__ import annotations

from errors import RunCancelled


class CancellationToken:
    """Flag consulted by a run before each stage transition.

    Cancelling does not interrupt work already handed to the OCR engine;
    the run stops at the next check and its result is discarded.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "superseded by a newer image") -> None:
        if not self._cancelled:
            self._cancelled = True
            self.reason = reason

    def raise_if_cancelled(self) -> None:
        """Raise RunCancelled if cancel() was called."""
        if self._cancelled:
            raise RunCancelled(self.reason)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"
