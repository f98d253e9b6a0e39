"""Application events decoded from the analysis SSE stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from research_client.models.enums import EventKind

# Opaque result payload (market data, recommendation, scenarios, memo, ...)
AnalysisResult = dict[str, Any]

TIMEOUT_MESSAGE = "Connection timeout: No data received for 10 minutes"
DEFAULT_ERROR_MESSAGE = "Analysis failed"


@dataclass(frozen=True)
class ProgressEvent:
    """Intermediate status update. Many may arrive before the terminal event."""

    step: str = ""
    message: str = ""
    timestamp: int = 0
    kind: EventKind = field(default=EventKind.PROGRESS, init=False)


@dataclass(frozen=True)
class CompletionEvent:
    """Terminal success event carrying the analysis result untouched."""

    data: Optional[AnalysisResult] = None
    status: str = "success"
    timing: Optional[dict[str, float]] = None
    kind: EventKind = field(default=EventKind.COMPLETE, init=False)


@dataclass(frozen=True)
class ErrorEvent:
    """Terminal failure event."""

    message: str
    kind: EventKind = field(default=EventKind.ERROR, init=False)


StreamEvent = Union[ProgressEvent, CompletionEvent, ErrorEvent]


def is_terminal(event: StreamEvent) -> bool:
    return event.kind is not EventKind.PROGRESS
