"""Tests for the command-line entry point."""

import httpx
import pytest

from research_client.client import ResearchClient
from research_client.main import EXIT_ERROR, EXIT_OK, build_parser, format_result, run_blocking, run_streaming
from research_client.models.requests import AnalysisRequest
from tests.conftest import make_http, sse, stream_response

REQUEST = AnalysisRequest(ticker="AAPL")


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["aapl"])
        assert args.ticker == "aapl"
        assert args.horizon == "medium"
        assert args.risk_profile == "moderate"
        assert not args.no_stream

    def test_rejects_unknown_risk_profile(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["aapl", "--risk-profile", "yolo"])


class TestFormatResult:
    def test_renders_recommendation_scenarios_and_memo(self, result_payload):
        text = format_result(result_payload)
        assert "Recommendation: BUY (confidence 0.72)" in text
        assert "bull: return 0.25, probability 0.3" in text
        assert text.endswith("Solid fundamentals.")

    def test_empty_result(self):
        assert format_result({}) == ""


class TestRunStreaming:
    @pytest.mark.asyncio
    async def test_prints_progress_and_result(self, capsys, result_payload):
        wire = sse({"step": "market", "message": "Fetching market data"}) + sse(
            {"status": "success", "data": result_payload}
        )
        async with make_http(lambda request: stream_response([wire.encode()])) as http:
            code = await run_streaming(ResearchClient(http_client=http), REQUEST)

        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "[market] Fetching market data" in out
        assert "Recommendation: BUY" in out

    @pytest.mark.asyncio
    async def test_error_exit_code(self, capsys):
        wire = sse({"message": "Ticker not found"}, "error")
        async with make_http(lambda request: stream_response([wire.encode()])) as http:
            code = await run_streaming(ResearchClient(http_client=http), REQUEST)

        assert code == EXIT_ERROR
        assert "Error: Ticker not found" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_blocking_mode(self, capsys, result_payload):
        handler = lambda request: httpx.Response(200, json={"status": "success", "data": result_payload})
        async with make_http(handler) as http:
            code = await run_blocking(ResearchClient(http_client=http), REQUEST)

        assert code == EXIT_OK
        assert "Recommendation: BUY" in capsys.readouterr().out
