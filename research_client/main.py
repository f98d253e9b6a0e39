"""Command-line entry point — run one analysis and print its progress."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Optional

from pydantic import ValidationError

from research_client.client import ResearchClient
from research_client.config.settings import Settings
from research_client.errors import AnalysisError
from research_client.models.enums import Horizon, RiskProfile
from research_client.models.requests import AnalysisRequest
from research_client.streaming.events import CompletionEvent, ErrorEvent, ProgressEvent

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run an AI research analysis for a stock ticker")
    parser.add_argument("ticker", help="Stock ticker e.g. AAPL")
    parser.add_argument("--horizon", default=Horizon.MEDIUM.value,
                        choices=[h.value for h in Horizon], help="Investment horizon")
    parser.add_argument("--risk-profile", default=RiskProfile.MODERATE.value,
                        choices=[r.value for r in RiskProfile], help="Investor risk profile")
    parser.add_argument("--no-stream", action="store_true",
                        help="Use the blocking /analyze endpoint instead of the progress stream")
    parser.add_argument("--api-url", default=None, help="Override RESEARCH_API_URL")
    return parser


def format_result(result: dict[str, Any]) -> str:
    """Render the parts of an analysis result a terminal user cares about."""
    lines = []
    if result.get("recommendation"):
        confidence = result.get("confidence_score")
        suffix = f" (confidence {confidence})" if confidence is not None else ""
        lines.append(f"Recommendation: {result['recommendation']}{suffix}")
    for name, scenario in (result.get("scenarios") or {}).items():
        if isinstance(scenario, dict):
            lines.append(f"  {name}: return {scenario.get('return')}, probability {scenario.get('prob')}")
    if result.get("memo"):
        lines.append("")
        lines.append(str(result["memo"]))
    return "\n".join(lines)


async def run_streaming(client: ResearchClient, request: AnalysisRequest) -> int:
    outcome: dict[str, Any] = {"code": EXIT_OK}

    def on_progress(event: ProgressEvent) -> None:
        print(f"[{event.step or '...'}] {event.message}", flush=True)

    def on_complete(event: CompletionEvent) -> None:
        print(format_result(event.data or {}))

    def on_error(event: ErrorEvent) -> None:
        print(f"Error: {event.message}", file=sys.stderr)
        outcome["code"] = EXIT_ERROR

    session = client.session(on_progress=on_progress, on_complete=on_complete, on_error=on_error)
    await session.run(request)
    return outcome["code"]


async def run_blocking(client: ResearchClient, request: AnalysisRequest) -> int:
    try:
        result = await client.analyze(request)
    except AnalysisError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR
    print(format_result(result))
    return EXIT_OK


async def _main(args: argparse.Namespace) -> int:
    settings = Settings(research_api_url=args.api_url) if args.api_url else Settings()

    request = AnalysisRequest(
        ticker=args.ticker,
        horizon=args.horizon,
        risk_profile=args.risk_profile,
    )
    async with ResearchClient(settings=settings) as client:
        if args.no_stream:
            return await run_blocking(client, request)
        return await run_streaming(client, request)


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(_main(args))
    except ValidationError as e:
        print(f"Invalid request: {e.errors()[0]['msg']}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        # asyncio.run cancels the running session, which closes the stream
        logger.info("Analysis cancelled by user")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
