"""ResearchClient — async client for the research analyst API."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncGenerator, Optional

import httpx
from pydantic import ValidationError

from research_client.config.settings import Settings
from research_client.errors import AnalysisError
from research_client.models.requests import AnalysisRequest, AnalysisResponse
from research_client.streaming.events import AnalysisResult, StreamEvent, is_terminal
from research_client.streaming.session import (
    AnalysisSession,
    CompleteCallback,
    ErrorCallback,
    ProgressCallback,
)

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/analyze"


class ResearchClient:
    """Entry point for running analyses, streamed or not.

    Owns one ``httpx.AsyncClient`` shared by every session it creates.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self._settings.research_api_url,
            timeout=httpx.Timeout(self._settings.request_timeout, read=None),
        )

    async def __aenter__(self) -> ResearchClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http and not self._http.is_closed:
            await self._http.aclose()

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run an analysis through the blocking endpoint and return its result."""
        resp = await self._http.post(ANALYZE_PATH, json=request.to_payload())

        try:
            payload = resp.json()
        except ValueError:
            payload = None
        message = payload.get("message") if isinstance(payload, dict) else None

        if not resp.is_success:
            raise AnalysisError(message or "Analysis failed", status_code=resp.status_code)
        try:
            body = AnalysisResponse.model_validate(payload)
        except ValidationError:
            logger.error("Unexpected /analyze response: %s", resp.text[:200])
            raise AnalysisError(message or "Analysis failed", status_code=resp.status_code)

        if body.status == "error" or not body.data:
            raise AnalysisError(body.message or "Analysis failed", status_code=resp.status_code)
        return body.data

    def session(
        self,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> AnalysisSession:
        """Create a single-use streaming session bound to this client."""
        return AnalysisSession(
            self._http,
            on_progress=on_progress,
            on_complete=on_complete,
            on_error=on_error,
            settings=self._settings,
        )

    async def stream(self, request: AnalysisRequest) -> AsyncGenerator[StreamEvent, None]:
        """Yield progress events followed by at most one terminal event.

        The callbacks feed a single queue, so consumers see events in wire
        order. Closing the generator early cancels the session.
        """
        queue: asyncio.Queue[Optional[StreamEvent]] = asyncio.Queue()
        session = self.session(
            on_progress=queue.put_nowait,
            on_complete=queue.put_nowait,
            on_error=queue.put_nowait,
        )
        task = session.start(request)
        task.add_done_callback(lambda _: queue.put_nowait(None))
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
                if is_terminal(event):
                    break
            await session.wait()
        finally:
            session.cancel()
