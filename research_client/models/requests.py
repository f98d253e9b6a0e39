"""Request and response bodies of the analysis API."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .enums import Horizon, RiskProfile


class AnalysisRequest(BaseModel):
    """Body posted to both /analyze and /analyze/stream."""

    ticker: str = Field(..., description="Stock ticker, e.g. 'AAPL'.")
    horizon: Horizon = Horizon.MEDIUM
    risk_profile: RiskProfile = RiskProfile.MODERATE

    @field_validator("ticker")
    @classmethod
    def _normalize_ticker(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter a stock ticker")
        return value.upper()

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(mode="json")


class AnalysisResponse(BaseModel):
    """Synchronous response of the non-streaming /analyze endpoint."""

    status: Literal["success", "error"]
    data: Optional[dict[str, Any]] = None
    message: Optional[str] = None
    timing: Optional[dict[str, float]] = None
