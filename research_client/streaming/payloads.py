"""Classification of ``data:`` payloads into application events.

The server may tag a frame explicitly (``event: progress``) or leave the tag
out and rely on the payload shape, and producers are not consistent about
it. Each candidate shape is therefore tried in priority order; the first one
that accepts the payload wins and anything left over is dropped.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

from .events import (
    DEFAULT_ERROR_MESSAGE,
    CompletionEvent,
    ErrorEvent,
    ProgressEvent,
    StreamEvent,
)

logger = logging.getLogger(__name__)


def _as_error(obj: dict[str, Any], event_type: Optional[str]) -> Optional[StreamEvent]:
    if event_type == "error" or obj.get("status") == "error":
        return ErrorEvent(message=_text(obj.get("message")) or DEFAULT_ERROR_MESSAGE)
    return None


def _as_completion(obj: dict[str, Any], event_type: Optional[str]) -> Optional[StreamEvent]:
    if event_type == "complete" or (obj.get("status") == "success" and obj.get("data")):
        timing = obj.get("timing")
        return CompletionEvent(
            data=obj.get("data"),
            status=obj.get("status") or "success",
            timing=timing if isinstance(timing, dict) else None,
        )
    return None


def _as_progress(obj: dict[str, Any], event_type: Optional[str]) -> Optional[StreamEvent]:
    if event_type == "progress" or obj.get("step") or obj.get("message"):
        return _progress(obj)
    return None


# Highest priority first
_CANDIDATES: list[Callable[[dict[str, Any], Optional[str]], Optional[StreamEvent]]] = [
    _as_error,
    _as_completion,
    _as_progress,
]


def classify_payload(payload_text: str, event_type: Optional[str] = None) -> Optional[StreamEvent]:
    """Decide what a single ``data:`` payload means.

    Returns ``None`` when the payload is dropped. Malformed JSON never raises:
    it is either salvaged as an error (when it mentions one) or dropped.
    """
    if not payload_text or not payload_text.strip():
        logger.debug("Empty data payload, skipping")
        return None

    try:
        obj = json.loads(payload_text)
    except ValueError as e:
        logger.warning("Failed to parse SSE payload as JSON: %s (data: %s)", e, payload_text[:200])
        if "error" in payload_text or "Error" in payload_text:
            return ErrorEvent(message=payload_text)
        return None

    if not isinstance(obj, dict):
        logger.warning("Dropping non-object SSE payload: %s", payload_text[:200])
        return None

    for candidate in _CANDIDATES:
        event = candidate(obj, event_type)
        if event is not None:
            return event

    logger.warning(
        "Unrecognized SSE payload (event type %r, keys %s)", event_type, sorted(obj.keys())
    )
    if obj.get("message"):
        return _progress(obj)
    return None


def _progress(obj: dict[str, Any]) -> ProgressEvent:
    return ProgressEvent(
        step=_text(obj.get("step")),
        message=_text(obj.get("message")),
        timestamp=_int(obj.get("timestamp")),
    )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    return 0
