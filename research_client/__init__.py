"""Client for the AI research analyst API with SSE progress streaming."""

from .client import ResearchClient
from .config.settings import Settings
from .errors import AnalysisError, ResearchClientError, SessionError
from .models import AnalysisRequest, AnalysisResponse, Horizon, RiskProfile
from .streaming import (
    AnalysisSession,
    CompletionEvent,
    ErrorEvent,
    ProgressEvent,
    SessionStatus,
    StreamEvent,
)

__all__ = [
    "AnalysisError",
    "AnalysisRequest",
    "AnalysisResponse",
    "AnalysisSession",
    "CompletionEvent",
    "ErrorEvent",
    "Horizon",
    "ProgressEvent",
    "ResearchClient",
    "ResearchClientError",
    "RiskProfile",
    "SessionError",
    "SessionStatus",
    "Settings",
    "StreamEvent",
]
