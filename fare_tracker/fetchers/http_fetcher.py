# fare_tracker/fetchers/http_fetcher.py

"""Fare fetcher that reads the price elements of a search results page."""

from urllib.parse import quote

from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from fare_tracker.fetchers.base_fetcher import BaseFareFetcher, FetchError
from fare_tracker.models.fare_snapshot import FareSnapshot


class HttpFareFetcher(BaseFareFetcher):
    """Fetches a fare search page over HTTP and extracts both leg prices.

    Uses a ``curl_cffi`` session impersonating a desktop browser so the
    TLS fingerprint matches a real visitor.  The search URL template and
    the price element selectors come from configuration.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(self, source_name: str = "aircanada") -> None:
        super().__init__(source_name)
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def build_url(
        self,
        origin: str | None,
        destination: str | None,
        leave_date: str | None,
        return_date: str | None,
        passengers: int | None,
    ) -> str:
        """Fill the search URL template; missing values become empty."""
        def enc(value: object) -> str:
            return quote("" if value is None else str(value), safe="")

        return self.settings.FARE_SEARCH_URL.format(
            origin=enc(origin),
            destination=enc(destination),
            leave_date=enc(leave_date),
            return_date=enc(return_date),
            passengers=enc(passengers),
        )

    def _is_challenge_page(self, text: str) -> bool:
        """Check for Cloudflare challenge pages and CAPTCHA indicators."""
        lower = text.lower()
        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "[%s] Cloudflare challenge detected "
                    "(marker: '%s')",
                    self.source_name,
                    marker,
                )
                return True

        # Real result pages are large; only scan short pages for keywords
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    self.logger.warning(
                        "[%s] CAPTCHA keyword '%s' detected",
                        self.source_name,
                        keyword,
                    )
                    return True
        return False

    def _extract_text(self, soup: BeautifulSoup, leg: str) -> str:
        """Return the stripped text of the price element for *leg*."""
        selector = self.selectors.get(leg)
        if not selector:
            raise FetchError(
                f"No '{leg}' selector configured for {self.source_name}"
            )
        element = soup.select_one(selector)
        if element is None:
            raise FetchError(f"Price element not found: {selector}")
        return element.get_text(strip=True)

    def fetch(
        self,
        origin: str | None,
        destination: str | None,
        leave_date: str | None,
        return_date: str | None,
        passengers: int | None,
    ) -> FareSnapshot:
        """GET the search page once and read both leg prices."""
        url = self.build_url(
            origin, destination, leave_date, return_date, passengers
        )
        headers: dict[str, str] = dict(self.settings.DEFAULT_HEADERS)
        self.logger.info("[%s] Fetching %s", self.source_name, url)

        try:
            resp = self.session.get(
                url,
                headers=headers,
                timeout=self._request_timeout,
            )
        except Exception as exc:
            raise FetchError(f"Request failed: {exc}") from exc

        if resp.status_code != 200:
            raise FetchError(f"HTTP {resp.status_code}")
        if self._is_challenge_page(resp.text):
            raise FetchError("Blocked by bot challenge page")

        soup = BeautifulSoup(resp.text, "lxml")
        snapshot = FareSnapshot(
            outbound_raw=self._extract_text(soup, "outbound"),
            inbound_raw=self._extract_text(soup, "inbound"),
        )
        self.logger.debug(
            "[%s] Raw fares outbound=%r inbound=%r",
            self.source_name,
            snapshot.outbound_raw,
            snapshot.inbound_raw,
        )
        return snapshot
