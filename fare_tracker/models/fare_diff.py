# fare_tracker/models/fare_diff.py

"""Per-direction comparison of a new fare against the lowest seen so far."""

from dataclasses import dataclass
from enum import Enum

from fare_tracker.models.fare_snapshot import ParsedFare


class DiffDirection(Enum):
    """How a freshly parsed fare relates to the previous lowest fare."""

    DOWN = "down"
    UP = "up"
    NONE = "none"
    NO_BASELINE = "no-baseline"
    INVALID = "invalid"


@dataclass(frozen=True)
class FareDiff:
    """Direction and absolute size of the change for one leg."""

    direction: DiffDirection
    magnitude: int = 0


@dataclass(frozen=True)
class CycleDiff:
    """Both legs' diffs for one cycle, with the prices they came from."""

    parsed: ParsedFare
    outbound: FareDiff
    inbound: FareDiff

    @property
    def is_valid(self) -> bool:
        """A cycle counts only when both legs parsed to a price."""
        return self.parsed.is_valid
