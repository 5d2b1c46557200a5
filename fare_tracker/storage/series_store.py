# fare_tracker/storage/series_store.py

"""In-memory, append-only log of lowest-fare points."""

from fare_tracker.models.series_point import PlotSeries, SeriesPoint


class SeriesStore:
    """Ordered record of one :class:`SeriesPoint` per valid cycle.

    Points are never removed or rewritten.  Retention is unbounded for the
    lifetime of the process; readers that only want recent history should
    use :meth:`PlotSeries.tail` on the view instead.
    """

    def __init__(self) -> None:
        self._points: list[SeriesPoint] = []

    def __len__(self) -> int:
        return len(self._points)

    def append(self, point: SeriesPoint) -> None:
        """Record a point at the end of the series."""
        self._points.append(point)

    def snapshot(self) -> tuple[SeriesPoint, ...]:
        """Return every point in arrival order as a read-only tuple."""
        return tuple(self._points)

    def as_plot_series(self) -> PlotSeries:
        """Split the series into per-leg columns for plotting."""
        return PlotSeries(
            timestamps=[p.timestamp for p in self._points],
            outbound=[p.outbound_lowest for p in self._points],
            inbound=[p.inbound_lowest for p in self._points],
        )
