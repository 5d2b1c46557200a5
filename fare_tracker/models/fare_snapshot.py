# fare_tracker/models/fare_snapshot.py

"""Raw and parsed fare samples returned by a fetcher."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FareSnapshot:
    """One sample of outbound/inbound price text, exactly as fetched."""

    outbound_raw: str
    inbound_raw: str


@dataclass(frozen=True)
class ParsedFare:
    """Integer prices parsed from a snapshot; ``None`` marks an invalid field."""

    outbound: int | None
    inbound: int | None

    @property
    def is_valid(self) -> bool:
        """True when both directions parsed to a price."""
        return self.outbound is not None and self.inbound is not None
