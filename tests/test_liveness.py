"""Tests for LivenessMonitor — stall detection and timer lifecycle."""

import asyncio
import logging

import pytest

from research_client.streaming.liveness import LivenessMonitor
from research_client.streaming.session import SessionState


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _monitor(clock: FakeClock, on_timeout=None) -> tuple[LivenessMonitor, SessionState]:
    state = SessionState()
    state.mark_keep_alive(clock())
    monitor = LivenessMonitor(state, on_timeout or (lambda: None), clock=clock)
    return monitor, state


class TestLivenessCheck:
    def test_recent_activity_is_alive(self):
        clock = FakeClock()
        monitor, _ = _monitor(clock)
        clock.advance(30)
        assert monitor.check() is False

    def test_silence_past_ten_minutes_times_out(self):
        clock = FakeClock()
        monitor, _ = _monitor(clock)
        clock.advance(601)
        assert monitor.check() is True

    def test_exactly_at_threshold_is_not_a_timeout(self):
        clock = FakeClock()
        monitor, _ = _monitor(clock)
        clock.advance(600)
        assert monitor.check() is False

    def test_recent_keep_alive_alone_keeps_session_alive(self):
        clock = FakeClock()
        monitor, state = _monitor(clock)
        state.last_byte_time = clock() - 900
        assert monitor.check() is False

    def test_keep_alives_for_eleven_minutes_never_time_out(self):
        """Only ': ping' lines every 5s: every 30s tick finds the session alive."""
        clock = FakeClock()
        monitor, state = _monitor(clock)
        for second in range(1, 11 * 60 + 1):
            clock.advance(1)
            if second % 5 == 0:
                state.mark_keep_alive(clock())
            if second % 30 == 0:
                assert monitor.check() is False

    def test_soft_threshold_only_logs(self, caplog):
        clock = FakeClock()
        monitor, _ = _monitor(clock)
        clock.advance(350)
        with caplog.at_level(logging.INFO, logger="research_client.streaming.liveness"):
            assert monitor.check() is False
        assert "Waiting for data" in caplog.text


class TestLivenessTimer:
    @pytest.mark.asyncio
    async def test_fires_once_and_stops(self):
        fired = []
        state = SessionState()
        state.mark_keep_alive(0.0)
        monitor = LivenessMonitor(
            state, lambda: fired.append(True), timeout=0.02, check_interval=0.01
        )
        monitor.start()
        await asyncio.sleep(0.2)
        assert fired == [True]
        assert monitor.fired
        assert not monitor.running

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_tick(self):
        fired = []
        state = SessionState()
        state.mark_keep_alive(0.0)
        monitor = LivenessMonitor(
            state, lambda: fired.append(True), timeout=0.01, check_interval=0.05
        )
        monitor.start()
        assert monitor.running
        monitor.stop()
        monitor.stop()
        await asyncio.sleep(0.1)
        assert fired == []
        assert not monitor.running
