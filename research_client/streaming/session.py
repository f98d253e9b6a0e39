"""AnalysisSession — drives one streaming analysis call end to end."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

import httpx

from research_client.config.settings import Settings
from research_client.errors import SessionError
from research_client.models.requests import AnalysisRequest

from .events import TIMEOUT_MESSAGE, CompletionEvent, ErrorEvent, ProgressEvent, StreamEvent
from .frames import Comment, Data, EventType, classify_line
from .framer import LineFramer
from .liveness import LivenessMonitor
from .payloads import classify_payload

logger = logging.getLogger(__name__)

STREAM_PATH = "/analyze/stream"
STREAM_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "text/event-stream",
}

ProgressCallback = Callable[[ProgressEvent], Any]
CompleteCallback = Callable[[CompletionEvent], Any]
ErrorCallback = Callable[[ErrorEvent], Any]


class SessionStatus(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    # Stream closed without a completion or error frame; no callback fired
    ENDED = "ended"


TERMINAL_STATUSES = frozenset(
    {SessionStatus.COMPLETED, SessionStatus.FAILED, SessionStatus.CANCELLED, SessionStatus.ENDED}
)


@dataclass
class SessionState:
    """Mutable per-session state shared by the reader and the liveness monitor."""

    framer: LineFramer = field(default_factory=LineFramer)
    pending_event_type: Optional[str] = None
    last_byte_time: float = 0.0
    last_keep_alive_time: float = 0.0
    cancelled: bool = False

    @property
    def buffer(self) -> str:
        return self.framer.buffer

    def mark_activity(self, now: float) -> None:
        self.last_byte_time = now

    def mark_keep_alive(self, now: float) -> None:
        # A keep-alive is activity too
        self.last_keep_alive_time = now
        self.last_byte_time = now


class AnalysisSession:
    """Consumes the ``/analyze/stream`` SSE response of a single analysis.

    Progress, completion and error events are delivered to the callbacks in
    the order their frames arrived. At most one terminal callback fires;
    ``cancel()`` ends the session silently. A session is single-use: start a
    new one for every analysis.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http_client
        self._on_progress = on_progress
        self._on_complete = on_complete
        self._on_error = on_error
        self._settings = settings or Settings()
        self._clock = clock

        self.state = SessionState()
        self.status = SessionStatus.IDLE
        self._task: Optional[asyncio.Task[None]] = None
        self._monitor: Optional[LivenessMonitor] = None
        self._timed_out = False

    @property
    def finished(self) -> bool:
        return self.state.cancelled or self.status in TERMINAL_STATUSES

    # ── Lifecycle ────────────────────────────────────────────────

    def start(self, request: AnalysisRequest) -> asyncio.Task[None]:
        """Begin streaming in a background task and return that task."""
        self._claim()
        self._task = asyncio.get_running_loop().create_task(self._run(request))
        return self._task

    async def run(self, request: AnalysisRequest) -> SessionStatus:
        """Start the session and wait until it reaches a terminal state."""
        self.start(request)
        try:
            return await self.wait()
        except asyncio.CancelledError:
            # Caller went away (e.g. Ctrl-C): stop the read the same way cancel() does
            self.cancel()
            raise

    async def wait(self) -> SessionStatus:
        if self._task is not None:
            await asyncio.wait({self._task})
            if not self._task.cancelled():
                self._task.result()
        return self.status

    def cancel(self) -> None:
        """Stop the session without reporting anything to the callbacks."""
        if self.finished:
            return
        self.state.cancelled = True
        self.status = SessionStatus.CANCELLED
        self._stop_monitor()
        self._cancel_read()
        logger.info("Analysis stream cancelled by caller")

    def _claim(self) -> None:
        if self.status is not SessionStatus.IDLE:
            raise SessionError(
                f"Session already {self.status.value}; create a new session for each analysis"
            )
        self.status = SessionStatus.CONNECTING

    # ── Transport ────────────────────────────────────────────────

    async def _run(self, request: AnalysisRequest) -> None:
        logger.info(
            "Starting analysis stream for %s (%s, %s)",
            request.ticker,
            request.horizon.value,
            request.risk_profile.value,
        )
        try:
            async with self._http.stream(
                "POST", STREAM_PATH, json=request.to_payload(), headers=STREAM_HEADERS
            ) as response:
                logger.info("Stream response status: %s", response.status_code)
                if not response.is_success:
                    self._fail(await _error_message(response))
                    return
                if response.is_closed or response.is_stream_consumed:
                    self._fail("Response body is not readable")
                    return
                await self._consume(response)
        except asyncio.CancelledError:
            if self.state.cancelled or self._timed_out:
                logger.info("Stream read stopped (%s)", self.status.value)
                return
            raise
        except httpx.HTTPError as e:
            self._report_failure(e)
        except Exception as e:
            logger.exception("Unexpected failure in analysis stream")
            self._report_failure(e)
        finally:
            self._stop_monitor()

    async def _consume(self, response: httpx.Response) -> None:
        self.status = SessionStatus.STREAMING
        self.state.mark_keep_alive(self._clock())
        self._monitor = LivenessMonitor(
            self.state,
            self._on_timeout,
            timeout=self._settings.liveness_timeout,
            check_interval=self._settings.liveness_check_interval,
            soft_threshold=self._settings.liveness_soft_threshold,
            clock=self._clock,
        )
        self._monitor.start()

        async for chunk in response.aiter_bytes():
            if self.finished:
                return
            self.state.mark_activity(self._clock())
            for line in self.state.framer.feed_bytes(chunk):
                self._handle_line(line)
                if self.finished:
                    return

        logger.info("Stream ended")
        residual = self.state.framer.flush()
        if residual is not None:
            self._handle_line(residual)
        if not self.finished:
            # TODO: decide with the API owners whether this should surface as an error
            logger.warning("Stream ended without a completion or error event")
            self.status = SessionStatus.ENDED

    # ── Framing ──────────────────────────────────────────────────

    def _handle_line(self, line: str) -> None:
        frame = classify_line(line)
        if isinstance(frame, Comment):
            self.state.mark_keep_alive(self._clock())
            logger.debug("SSE keep-alive received")
        elif isinstance(frame, EventType):
            self.state.pending_event_type = frame.label
            logger.debug("SSE event type: %s", frame.label)
        elif isinstance(frame, Data):
            # The label applies to this data line only, used or not
            event_type, self.state.pending_event_type = self.state.pending_event_type, None
            event = classify_payload(frame.payload, event_type)
            if event is not None:
                self._deliver(event)

    # ── Delivery ─────────────────────────────────────────────────

    def _deliver(self, event: StreamEvent) -> None:
        if self.finished:
            return
        if isinstance(event, ProgressEvent):
            _invoke(self._on_progress, event)
            return

        if isinstance(event, CompletionEvent):
            self.status = SessionStatus.COMPLETED
            callback: Optional[Callable[[Any], Any]] = self._on_complete
            logger.info("Analysis complete")
        else:
            self.status = SessionStatus.FAILED
            callback = self._on_error
            logger.error("Analysis error: %s", event.message)
        self._stop_monitor()
        _invoke(callback, event)

    def _fail(self, message: str) -> None:
        self._deliver(ErrorEvent(message=message))

    def _report_failure(self, e: Exception) -> None:
        if self.status is SessionStatus.STREAMING:
            logger.error(f"Stream reading error: {e}")
            self._fail(f"Stream error: {str(e) or 'Unknown error'}")
        else:
            logger.error(f"Analysis request failed: {e}")
            self._fail(str(e) or type(e).__name__)

    def _on_timeout(self) -> None:
        if self.finished:
            return
        self._timed_out = True
        self._cancel_read()
        self._fail(TIMEOUT_MESSAGE)

    def _stop_monitor(self) -> None:
        if self._monitor is not None:
            self._monitor.stop()

    def _cancel_read(self) -> None:
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # From inside the reader the loop exits on its own via ``finished``
        if task is not current:
            task.cancel()


def _invoke(callback: Optional[Callable[[Any], Any]], event: StreamEvent) -> None:
    if callback is None:
        return
    try:
        callback(event)
    except Exception:
        logger.exception("%s callback raised", event.kind.value)


async def _error_message(response: httpx.Response) -> str:
    """Best available message from a rejected stream request."""
    await response.aread()
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    if response.text:
        return response.text
    return f"HTTP error! status: {response.status_code}"
