from .enums import EventKind, Horizon, RiskProfile
from .requests import AnalysisRequest, AnalysisResponse

__all__ = [
    "AnalysisRequest",
    "AnalysisResponse",
    "EventKind",
    "Horizon",
    "RiskProfile",
]
