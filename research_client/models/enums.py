from enum import Enum


class Horizon(str, Enum):
    """Investment horizon the analysis is run for."""

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class RiskProfile(str, Enum):
    """Investor risk appetite used to weight scenarios."""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class EventKind(str, Enum):
    """Tag of an application event decoded from the analysis stream."""

    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"
