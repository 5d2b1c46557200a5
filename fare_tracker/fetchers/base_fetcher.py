# fare_tracker/fetchers/base_fetcher.py

"""Abstract base class for fare retrieval mechanisms."""

import importlib
import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from fare_tracker.config.settings import Settings
from fare_tracker.models.fare_snapshot import FareSnapshot


class FetchError(Exception):
    """Raised when a fetcher cannot produce a snapshot for this cycle."""


def load_fetcher_class(dotted_path: str) -> type[Any]:
    """Dynamically import a fetcher class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


class BaseFareFetcher(ABC):
    """Retrieves the current outbound/inbound price text for one route.

    A fetch makes a single attempt.  Any failure is raised as
    :class:`FetchError`; the next scheduled cycle is the retry.
    """

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(
            f"fare_tracker.fetch.{source_name}"
        )
        self.settings = Settings()
        self.selectors: dict[str, str] = self._load_selectors()

    def _load_selectors(self) -> dict[str, str]:
        """Load CSS selectors for this source from selectors.json."""
        with open(self.settings.SELECTORS_PATH) as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, str] = all_selectors.get(
            self.source_name, {}
        )
        return result

    @abstractmethod
    def fetch(
        self,
        origin: str | None,
        destination: str | None,
        leave_date: str | None,
        return_date: str | None,
        passengers: int | None,
    ) -> FareSnapshot:
        """Return the current fares for the route or raise FetchError."""
        ...
