# fare_tracker/services/notifier.py

"""SMS delivery of deal alerts through the Twilio REST API."""

import logging
from typing import Protocol

from curl_cffi import requests as curl_requests

from fare_tracker.config.settings import Settings

logger = logging.getLogger("fare_tracker.notifier")


class NotificationError(Exception):
    """Raised when an alert message could not be delivered."""


class AlertNotifier(Protocol):
    """Anything that can deliver an alert message."""

    @property
    def is_configured(self) -> bool: ...

    def send(self, message: str) -> bool: ...


class SmsNotifier:
    """Sends alert texts via Twilio's Messages endpoint.

    Credentials come from :class:`Settings` (``TWILIO_*`` environment
    variables).  Without them every send is a logged no-op.
    """

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
        to_number: str | None = None,
    ) -> None:
        self.settings = Settings()
        self.account_sid = (
            account_sid
            if account_sid is not None
            else self.settings.TWILIO_ACCOUNT_SID
        )
        self.auth_token = (
            auth_token
            if auth_token is not None
            else self.settings.TWILIO_AUTH_TOKEN
        )
        self.from_number = (
            from_number
            if from_number is not None
            else self.settings.TWILIO_FROM_NUMBER
        )
        self.to_number = (
            to_number
            if to_number is not None
            else self.settings.TWILIO_TO_NUMBER
        )
        self.session = curl_requests.Session()

    @property
    def is_configured(self) -> bool:
        """True when every Twilio credential is present."""
        return all([
            self.account_sid,
            self.auth_token,
            self.from_number,
            self.to_number,
        ])

    def send(self, message: str) -> bool:
        """Send *message* as an SMS.

        Returns False when the notifier is not configured.  Raises
        :class:`NotificationError` when Twilio rejects the request.
        """
        if not self.is_configured:
            logger.debug("SMS not configured, skipping alert")
            return False

        url = self.settings.TWILIO_API_URL.format(
            account_sid=self.account_sid
        )
        body = message[: self.settings.SMS_MAX_LENGTH]
        try:
            resp = self.session.post(
                url,
                data={
                    "From": self.from_number,
                    "To": self.to_number,
                    "Body": body,
                },
                auth=(self.account_sid, self.auth_token),
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        except Exception as exc:
            raise NotificationError(f"SMS request failed: {exc}") from exc

        if resp.status_code not in (200, 201):
            raise NotificationError(
                f"Twilio returned HTTP {resp.status_code}"
            )
        logger.info("SMS alert sent to %s", self.to_number)
        return True
