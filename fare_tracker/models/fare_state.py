# fare_tracker/models/fare_state.py

"""Best-known fares for the running monitoring session."""

from dataclasses import dataclass


@dataclass
class FareState:
    """Lowest outbound/inbound prices observed since monitoring began.

    Only :class:`~fare_tracker.tracking.diff_engine.DiffEngine` mutates
    this; once set, each value only ever moves down.
    """

    lowest_outbound: int | None = None
    lowest_inbound: int | None = None
