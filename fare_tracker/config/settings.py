# fare_tracker/config/settings.py

"""Central configuration for the fare_tracker monitor."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the fare_tracker monitor."""

    # --- Monitoring ---
    DEFAULT_INTERVAL_MINUTES: float = 30.0  # Pause between cycles
    PLOT_WINDOW: int = 120                  # Points drawn by the dashboard
    LOG_TIMESTAMP_FORMAT: str = "%m/%d/%y-%H:%M:%S"
    CURRENCY_SYMBOL: str = "$"

    # --- Fetching ---
    REQUEST_TIMEOUT: int = 30           # Seconds before a request times out
    FARE_SEARCH_URL: str = os.getenv(
        "FARE_SEARCH_URL",
        (
            "https://www.aircanada.com/en/booking/search"
            "?org1={origin}&dest1={destination}"
            "&departure1={leave_date}&departure2={return_date}"
            "&numberOfAdults={passengers}"
        ),
    )
    FARE_FETCHER: str = os.getenv(
        "FARE_FETCHER",
        "fare_tracker.fetchers.http_fetcher.HttpFareFetcher",
    )
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- SMS (Twilio) ---
    TWILIO_API_URL: str = (
        "https://api.twilio.com/2010-04-01/Accounts/"
        "{account_sid}/Messages.json"
    )
    TWILIO_ACCOUNT_SID: str = os.getenv("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str = os.getenv("TWILIO_AUTH_TOKEN", "")
    TWILIO_FROM_NUMBER: str = os.getenv("TWILIO_FROM_NUMBER", "")
    TWILIO_TO_NUMBER: str = os.getenv("TWILIO_TO_NUMBER", "")
    SMS_MAX_LENGTH: int = 1500

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = (
        BASE_DIR / "fare_tracker" / "config" / "selectors.json"
    )
    LOGS_DIR: Path = BASE_DIR / "logs"
    CHARTS_DIR: Path = BASE_DIR / "charts"
