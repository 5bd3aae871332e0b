"""Best-effort outbound email for notifications.

Delivery is fire-and-forget: callers submit sends through the background
dispatcher and failures are logged, never surfaced to the triggering request.
"""

from __future__ import annotations

import html
import logging
import threading
from dataclasses import dataclass
from typing import Protocol

import httpx

from agora_stage.core.settings import settings

logger = logging.getLogger(__name__)

HTTP_BAD_REQUEST = 400


class EmailError(RuntimeError):
    """Raised when the email transport rejects or cannot deliver a message."""


@dataclass(frozen=True)
class EmailMessage:
    """A rendered message ready for a transport."""

    to: str
    subject: str
    body: str


class EmailSender(Protocol):
    """Port implemented by every email transport."""

    def send_notification(self, message: EmailMessage) -> None:
        """Deliver ``message`` or raise :class:`EmailError`."""


@dataclass
class EmailConfig:
    """Transport configuration resolved from settings."""

    enabled: bool
    api_url: str | None
    api_key: str | None
    sender: str
    timeout_seconds: float


def load_email_config() -> EmailConfig:
    """Build configuration object from global settings."""
    return EmailConfig(
        enabled=bool(settings.email_enabled and settings.email_api_url),
        api_url=settings.email_api_url,
        api_key=settings.email_api_key,
        sender=settings.email_from,
        timeout_seconds=float(settings.email_timeout_seconds),
    )


def render_notification_email(
    to: str,
    message: str,
    link_url: str | None,
    *,
    subject: str | None = None,
) -> EmailMessage:
    """Render the HTML body sent for a new notification."""
    link = (
        f'<p><a href="{html.escape(link_url, quote=True)}">View details</a></p>'
        if link_url
        else ""
    )
    body = (
        "<html><body>"
        "<h2>New Notification</h2>"
        f"<p>{html.escape(message)}</p>"
        f"{link}"
        "</body></html>"
    )
    return EmailMessage(
        to=to,
        subject=subject or settings.notification_email_subject,
        body=body,
    )


class LoggingEmailSender:
    """Transport used when email is disabled; records the send in the log."""

    def send_notification(self, message: EmailMessage) -> None:
        logger.info("Email disabled; would send %r to %s", message.subject, message.to)


class HttpEmailSender:
    """Sends mail through a transactional email HTTP API."""

    def __init__(
        self,
        config: EmailConfig | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config or load_email_config()
        self._client = client
        self._client_lock = threading.Lock()

    def _ensure_client(self) -> httpx.Client:
        if not self.config.api_url:
            raise EmailError("Email API URL is not configured")

        with self._client_lock:
            if self._client is None:
                headers = {}
                if self.config.api_key:
                    headers["Authorization"] = f"Bearer {self.config.api_key}"
                self._client = httpx.Client(
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    headers=headers,
                )
        return self._client

    def send_notification(self, message: EmailMessage) -> None:
        client = self._ensure_client()
        payload = {
            "from": self.config.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.body,
        }
        try:
            response = client.post(self.config.api_url or "", json=payload)
        except httpx.HTTPError as exc:
            raise EmailError(f"Email request failed: {exc}") from exc

        if response.status_code >= HTTP_BAD_REQUEST:
            raise EmailError(f"Email API responded with {response.status_code}")
        logger.debug("Sent notification email to %s", message.to)

    def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None


class _EmailSenderSingleton:
    """Singleton wrapper for the configured email transport."""

    _instance: EmailSender | None = None

    @classmethod
    def get_instance(cls) -> EmailSender:
        if cls._instance is None:
            config = load_email_config()
            cls._instance = HttpEmailSender(config) if config.enabled else LoggingEmailSender()
        return cls._instance


def get_email_sender() -> EmailSender:
    """Return the process-wide email transport selected by settings."""
    return _EmailSenderSingleton.get_instance()
