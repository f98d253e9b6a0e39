"""Shared fixtures and wire helpers for the research client test suite."""

import asyncio
import json
from typing import Any, Callable, Iterable, Optional

import httpx
import pytest

from research_client.config.settings import Settings
from research_client.streaming.session import AnalysisSession

BASE_URL = "http://test/api"


def sse(data: Any, event: Optional[str] = None) -> str:
    """Encode one frame the way the analysis server writes it."""
    frame = f"event: {event}\n" if event else ""
    payload = data if isinstance(data, str) else json.dumps(data, ensure_ascii=False)
    return frame + f"data: {payload}\n\n"


def stream_response(
    chunks: Iterable[bytes],
    status_code: int = 200,
    hang: Optional[asyncio.Event] = None,
) -> httpx.Response:
    """A streaming response that yields ``chunks`` one read at a time.

    When ``hang`` is given the body blocks on it after the last chunk,
    simulating a connection that stays open but goes quiet.
    """
    chunks = list(chunks)

    async def body():
        for chunk in chunks:
            yield chunk
            await asyncio.sleep(0)
        if hang is not None:
            await hang.wait()

    return httpx.Response(
        status_code, content=body(), headers={"content-type": "text/event-stream"}
    )


def make_http(handler: Callable[[httpx.Request], Any]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)


class Recorder:
    """Collects every callback invocation of a session, in order."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def __call__(self, event: Any) -> None:
        self.events.append(event)

    def session(self, http: httpx.AsyncClient, settings: Optional[Settings] = None) -> AnalysisSession:
        return AnalysisSession(
            http, on_progress=self, on_complete=self, on_error=self, settings=settings
        )


@pytest.fixture
def fast_settings() -> Settings:
    """Liveness thresholds shrunk so timeouts happen within a test run."""
    return Settings(
        research_api_url=BASE_URL,
        liveness_timeout=0.05,
        liveness_check_interval=0.01,
        liveness_soft_threshold=0.03,
    )


@pytest.fixture
def result_payload() -> dict:
    return {
        "recommendation": "BUY",
        "confidence_score": 0.72,
        "scenarios": {
            "bull": {"return": 0.25, "prob": 0.3},
            "base": {"return": 0.08, "prob": 0.5},
            "bear": {"return": -0.15, "prob": 0.2},
        },
        "memo": "## Investment memo\nSolid fundamentals.",
        "timing": {"total": 41.2},
    }
