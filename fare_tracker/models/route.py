# fare_tracker/models/route.py

"""The single round trip being monitored."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RouteQuery:
    """Origin, destination, dates and party size passed to every fetch.

    Values are taken from the command line as-is; missing ones stay ``None``.
    """

    origin: str | None = None
    destination: str | None = None
    leave_date: str | None = None
    return_date: str | None = None
    passengers: int | None = None

    @property
    def label(self) -> str:
        """Short human-readable description, e.g. ``YYZ → LAX``."""
        origin = self.origin or "?"
        destination = self.destination or "?"
        return f"{origin} → {destination}"
