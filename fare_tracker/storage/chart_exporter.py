# fare_tracker/storage/chart_exporter.py

"""Generate interactive Plotly HTML charts from the fare series."""

import importlib
import logging
import webbrowser
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import Any

from fare_tracker.config.settings import Settings
from fare_tracker.models.series_point import PlotSeries

logger = logging.getLogger("fare_tracker.chart")

# Leg label and line colour, matching the dashboard sparklines
_LEGS: tuple[tuple[str, str, str], ...] = (
    ("outbound", "Origin/Outbound", "red"),
    ("inbound", "Destination/Return", "gold"),
)


def _get_plotly_go() -> ModuleType:
    """Import plotly.graph_objects lazily."""
    return importlib.import_module("plotly.graph_objects")


def _ensure_charts_dir() -> Path:
    """Create the charts directory if it doesn't exist."""
    charts_dir = Settings.CHARTS_DIR
    charts_dir.mkdir(parents=True, exist_ok=True)
    return charts_dir


def build_fare_chart(series: PlotSeries, title: str) -> Any:
    """Build a two-line Plotly chart of the lowest fares."""
    go = _get_plotly_go()
    currency = Settings.CURRENCY_SYMBOL

    fig: Any = go.Figure()
    for attr, label, colour in _LEGS:
        prices: list[int] = getattr(series, attr)
        fig.add_trace(go.Scatter(
            x=series.timestamps,
            y=prices,
            mode="lines+markers",
            name=label,
            line={"color": colour},
            hovertemplate=(
                "%{x|%Y-%m-%d %H:%M}<br>"
                f"Lowest: {currency}%{{y}}"
                "<extra></extra>"
            ),
        ))
        min_price = min(prices)
        min_idx = prices.index(min_price)
        fig.add_annotation(
            x=series.timestamps[min_idx], y=min_price,
            text=f"{label} min: {currency}{min_price}",
            showarrow=True, arrowhead=2,
        )

    fig.update_layout(
        title=f"Lowest fares: {title}",
        xaxis_title="Time",
        yaxis_title=f"Price ({currency})",
        hovermode="x unified",
        template="plotly_white",
        legend={"orientation": "h", "y": -0.15},
    )
    return fig


def export_fare_chart(
    series: PlotSeries,
    title: str,
    open_browser: bool = True,
) -> Path | None:
    """Write the series as an HTML chart; ``None`` when it is empty."""
    if not series.timestamps:
        logger.warning("No fare data to chart for %s", title)
        return None

    fig = build_fare_chart(series, title)

    charts_dir = _ensure_charts_dir()
    slug = (
        title[:30]
        .replace(" ", "_")
        .replace("/", "_")
        .replace("→", "to")
    )
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = charts_dir / f"fares_{slug}_{stamp}.html"
    fig.write_html(str(filepath))
    logger.info("Chart saved to %s", filepath)

    if open_browser:
        webbrowser.open(filepath.as_uri())

    return filepath
