"""Stall detection for long-lived analysis streams."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from .session import SessionState

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600.0  # seconds
DEFAULT_CHECK_INTERVAL = 30.0
DEFAULT_SOFT_THRESHOLD = 300.0


class LivenessMonitor:
    """Periodic watchdog over a session's activity timestamps.

    The session refreshes ``last_byte_time`` on every chunk and
    ``last_keep_alive_time`` on every comment line. Every ``check_interval``
    seconds the monitor compares both with ``timeout``; once both are stale it
    calls ``on_timeout`` exactly once and stops. LLM warm-up on the server can
    legitimately take minutes, which is why the threshold is generous and
    keep-alives count as activity.
    """

    def __init__(
        self,
        state: SessionState,
        on_timeout: Callable[[], None],
        timeout: float = DEFAULT_TIMEOUT,
        check_interval: float = DEFAULT_CHECK_INTERVAL,
        soft_threshold: float = DEFAULT_SOFT_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._state = state
        self._on_timeout = on_timeout
        self.timeout = timeout
        self.check_interval = check_interval
        self.soft_threshold = soft_threshold
        self._clock = clock
        self._task: Optional[asyncio.Task[None]] = None
        self.fired = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())

    def stop(self) -> None:
        """Stop ticking. Safe to call repeatedly, including from ``on_timeout``."""
        task = self._task
        if task is None or task.done():
            return
        if task is not asyncio.current_task():
            task.cancel()

    def check(self, now: Optional[float] = None) -> bool:
        """Evaluate the stall condition once. Returns True if the session timed out."""
        if now is None:
            now = self._clock()
        since_byte = now - self._state.last_byte_time
        since_keep_alive = now - self._state.last_keep_alive_time

        if since_byte > self.timeout and since_keep_alive > self.timeout:
            logger.error(
                "Connection timeout: no data for %.0fs (keep-alive %.0fs ago)",
                since_byte,
                since_keep_alive,
            )
            return True
        if since_byte > self.soft_threshold:
            logger.info("Waiting for data (last activity %.0fs ago)", since_byte)
        return False

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.check_interval)
            if self.check():
                self.fired = True
                self._on_timeout()
                return
