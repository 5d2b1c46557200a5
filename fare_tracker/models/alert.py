# fare_tracker/models/alert.py

"""Deal thresholds and the decisions evaluated against them."""

from dataclasses import dataclass
from enum import Enum


class AlertReason(Enum):
    """Which threshold, if any, made an alert fire."""

    INDIVIDUAL = "individual"
    TOTAL = "total"
    NONE = "none"


@dataclass(frozen=True)
class AlertThresholds:
    """Deal price ceilings supplied once at startup; ``None`` disables one."""

    individual: int | None = None
    total: int | None = None

    @property
    def enabled(self) -> bool:
        """True when at least one threshold is configured."""
        return self.individual is not None or self.total is not None


@dataclass(frozen=True)
class AlertDecision:
    """Outcome of evaluating the current lowest fares against thresholds."""

    fired: bool
    reason: AlertReason
    total: int = 0
    per_passenger: float = 0.0
