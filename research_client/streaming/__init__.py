from .events import (
    AnalysisResult,
    CompletionEvent,
    ErrorEvent,
    ProgressEvent,
    StreamEvent,
    TIMEOUT_MESSAGE,
    is_terminal,
)
from .framer import LineFramer
from .frames import Blank, Comment, Data, EventType, Unrecognized, classify_line
from .liveness import LivenessMonitor
from .payloads import classify_payload
from .session import AnalysisSession, SessionState, SessionStatus

__all__ = [
    "AnalysisResult",
    "AnalysisSession",
    "Blank",
    "Comment",
    "CompletionEvent",
    "Data",
    "ErrorEvent",
    "EventType",
    "LineFramer",
    "LivenessMonitor",
    "ProgressEvent",
    "SessionState",
    "SessionStatus",
    "StreamEvent",
    "TIMEOUT_MESSAGE",
    "Unrecognized",
    "classify_line",
    "classify_payload",
    "is_terminal",
]
