"""Outgoing email through an HTTP mail provider."""

from __future__ import annotations

import base64
from dataclasses import dataclass

import httpx

from app.core.config import settings
from app.core.custom_logging import logger


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class EmailClient:
    """
    Sends messages through a JSON mail API (SendGrid-style payload).

    ``send`` reports the outcome as a bool instead of raising, so callers
    can decide how a failed delivery affects their response.
    """

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url if api_url is not None else settings.EMAIL_API_URL
        self.api_key = api_key if api_key is not None else settings.EMAIL_API_KEY
        self.sender = sender or settings.EMAIL_FROM
        self.timeout = timeout or settings.EMAIL_HTTP_TIMEOUT
        self._transport = transport

    def build_payload(
        self,
        to: str,
        subject: str,
        html: str,
        attachment: Attachment | None = None,
    ) -> dict:
        payload = {
            "from": {"email": self.sender},
            "personalizations": [{"to": [{"email": to}], "subject": subject}],
            "content": [{"type": "text/html", "value": html}],
        }
        if attachment is not None:
            payload["attachments"] = [
                {
                    "filename": attachment.filename,
                    "type": attachment.content_type,
                    "content": base64.b64encode(attachment.content).decode("ascii"),
                }
            ]
        return payload

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        attachment: Attachment | None = None,
    ) -> bool:
        """
        Deliver one message.

        Args:
            to (str): Recipient address.
            subject (str): Subject line.
            html (str): HTML body.
            attachment (Attachment | None): Optional single attachment.

        Returns:
            bool: True when the provider accepted the message (2xx).
        """
        if not self.api_url or not self.api_key:
            logger.error("Email provider not configured: EMAIL_API_URL/EMAIL_API_KEY")
            return False

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(to, subject, html, attachment)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Email to {to} failed: {e!r}")
            return False

        if resp.is_success:
            logger.info(f"Email '{subject}' sent to {to}")
            return True

        logger.error(
            f"Email provider rejected '{subject}' to {to}: "
            f"{resp.status_code} {resp.text[:200]}"
        )
        return False


def get_email_client() -> EmailClient:
    """Dependency that provides the configured email client."""
    return EmailClient()
