# fare_tracker/models/series_point.py

"""Time-series records of the lowest fares, used for trend plotting."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SeriesPoint:
    """Lowest fares for both legs at the end of one valid cycle."""

    timestamp: datetime
    outbound_lowest: int
    inbound_lowest: int


@dataclass(frozen=True)
class PlotSeries:
    """Column view of a series, as handed to a presenter's ``plot``."""

    timestamps: list[datetime] = field(
        default_factory=lambda: list[datetime]()
    )
    outbound: list[int] = field(default_factory=lambda: list[int]())
    inbound: list[int] = field(default_factory=lambda: list[int]())

    def tail(self, count: int) -> "PlotSeries":
        """Return only the most recent *count* points."""
        if count <= 0 or len(self.timestamps) <= count:
            return self
        return PlotSeries(
            timestamps=self.timestamps[-count:],
            outbound=self.outbound[-count:],
            inbound=self.inbound[-count:],
        )
