"""Email delivery service using the Resend API."""

import logging
from typing import Any

import httpx

from app.core.config import Settings
from app.core.exceptions import NotificationError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailService:
    """Sends transactional emails through the configured provider.

    Without an API key the service runs in dry-run mode: messages are logged
    and reported as handled, nothing leaves the process.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def is_dry_run(self) -> bool:
        return self.settings.is_dry_run

    async def send_email(self, to_email: str, subject: str, html_content: str) -> str | None:
        """Send one email.

        Returns the provider message ID when one is reported, None otherwise.
        Never raises: delivery failures are logged and absorbed.
        """
        if self.is_dry_run:
            logger.info(
                "DRY RUN - email not sent: to=%s subject=%s html=%s...",
                to_email,
                subject,
                html_content[:200],
            )
            return None

        try:
            if self.settings.email_provider == "resend":
                return await self._send_with_resend(to_email, subject, html_content)
            raise NotificationError(
                f"Email provider not implemented: {self.settings.email_provider}"
            )
        except Exception:
            logger.exception("Error sending email to %s", to_email)
            return None

    async def _send_with_resend(self, to_email: str, subject: str, html_content: str) -> str | None:
        payload: dict[str, Any] = {
            "from": self.settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }
        async with httpx.AsyncClient(timeout=self.settings.email_timeout_seconds) as client:
            response = await client.post(
                RESEND_API_URL,
                headers={
                    "Authorization": f"Bearer {self.settings.email_api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )
        if not response.is_success:
            raise NotificationError(
                f"Resend rejected email: status={response.status_code} body={response.text[:500]}"
            )
        try:
            email_id = response.json().get("id")
        except ValueError:
            # Accepted by Resend; only the message ID is unavailable.
            logger.warning("Resend reply for %s was not JSON: %s", to_email, response.text[:200])
            email_id = None
        logger.info("Email sent via Resend: to=%s id=%s", to_email, email_id)
        return str(email_id) if email_id else None
