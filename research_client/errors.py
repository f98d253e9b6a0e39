"""Exception types raised by the research client."""

from __future__ import annotations

from typing import Optional


class ResearchClientError(Exception):
    """Base class for all research client errors."""


class SessionError(ResearchClientError):
    """A streaming session was used outside its lifecycle (e.g. started twice)."""


class AnalysisError(ResearchClientError):
    """The non-streaming analysis endpoint reported a failure."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
