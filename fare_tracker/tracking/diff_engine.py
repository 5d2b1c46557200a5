# fare_tracker/tracking/diff_engine.py

"""Fare parsing and the lowest-fare diff/state engine."""

import logging
import re

from fare_tracker.models.fare_diff import CycleDiff, DiffDirection, FareDiff
from fare_tracker.models.fare_snapshot import FareSnapshot, ParsedFare
from fare_tracker.models.fare_state import FareState

logger = logging.getLogger("fare_tracker.diff")

_NON_DIGITS = re.compile(r"\D")


def parse_fare(text: str | None) -> int | None:
    """Parse price text like ``'$1,234'`` by dropping every non-digit.

    Returns ``None`` when nothing numeric is left (``''``, ``'N/A'``).
    """
    if not text:
        return None
    digits = _NON_DIGITS.sub("", text)
    if not digits:
        return None
    return int(digits)


def parse_snapshot(snapshot: FareSnapshot) -> ParsedFare:
    """Parse both legs of a snapshot."""
    return ParsedFare(
        outbound=parse_fare(snapshot.outbound_raw),
        inbound=parse_fare(snapshot.inbound_raw),
    )


def compare_fare(previous: int | None, current: int | None) -> FareDiff:
    """Classify *current* against the previous lowest fare of one leg."""
    if current is None:
        return FareDiff(DiffDirection.INVALID)
    if previous is None:
        return FareDiff(DiffDirection.NO_BASELINE)
    if current < previous:
        return FareDiff(DiffDirection.DOWN, previous - current)
    if current > previous:
        return FareDiff(DiffDirection.UP, current - previous)
    return FareDiff(DiffDirection.NONE)


def _next_lowest(previous: int | None, current: int | None) -> int | None:
    """Lowest fare after observing *current*; invalid samples change nothing."""
    if current is None:
        return previous
    if previous is None or current < previous:
        return current
    return previous


class DiffEngine:
    """Compares snapshots against a :class:`FareState` and updates it.

    The state holds the best price ever observed per leg, not the latest
    one: a rise after a dip leaves the dip in place.
    """

    def __init__(self, state: FareState | None = None) -> None:
        self.state = state if state is not None else FareState()

    def apply(self, snapshot: FareSnapshot) -> CycleDiff:
        """Diff *snapshot* against the state, then fold it into the state.

        Each leg is handled independently: an unparseable leg yields an
        ``invalid`` diff and keeps its lowest fare, while the other leg is
        still compared and updated.
        """
        parsed = parse_snapshot(snapshot)
        outbound = compare_fare(self.state.lowest_outbound, parsed.outbound)
        inbound = compare_fare(self.state.lowest_inbound, parsed.inbound)

        self.state.lowest_outbound = _next_lowest(
            self.state.lowest_outbound, parsed.outbound
        )
        self.state.lowest_inbound = _next_lowest(
            self.state.lowest_inbound, parsed.inbound
        )

        result = CycleDiff(parsed=parsed, outbound=outbound, inbound=inbound)
        if not result.is_valid:
            logger.warning(
                "Unparseable fares: outbound=%r inbound=%r",
                snapshot.outbound_raw,
                snapshot.inbound_raw,
            )
        else:
            logger.debug(
                "Diff outbound=%s(%d) inbound=%s(%d), lowest now %s/%s",
                outbound.direction.value,
                outbound.magnitude,
                inbound.direction.value,
                inbound.magnitude,
                self.state.lowest_outbound,
                self.state.lowest_inbound,
            )
        return result
