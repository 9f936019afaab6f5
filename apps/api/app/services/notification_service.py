"""Signup notification emails: operator notice and user confirmation."""

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from app.core.config import Settings
from app.schemas.signup import Signup
from app.services.email_service import EmailService

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"
_jinja_env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=True)


class NotificationService:
    """Renders signup emails and hands them to the email service."""

    def __init__(self, settings: Settings, email_service: EmailService | None = None) -> None:
        self.settings = settings
        self.email_service = email_service or EmailService(settings)

    @property
    def is_dry_run(self) -> bool:
        return self.email_service.is_dry_run

    def render_admin_notification(self, signup: Signup) -> tuple[str, str]:
        """Return (subject, html) for the operator notice."""
        subject = f"New {self.settings.brand_name} Signup: {signup.email}"
        html = _jinja_env.get_template("admin_notification.html").render(
            signup=signup,
            brand=self.settings.brand_name,
        )
        return subject, html

    def render_confirmation(self, signup: Signup) -> tuple[str, str]:
        """Return (subject, html) for the welcome email sent to the subscriber."""
        subject = f"Welcome to {self.settings.brand_name} - You're on the list!"
        html = _jinja_env.get_template("signup_confirmation.html").render(
            signup=signup,
            brand=self.settings.brand_name,
        )
        return subject, html

    async def notify_admin(self, signup: Signup) -> str | None:
        subject, html = self.render_admin_notification(signup)
        return await self.email_service.send_email(self.settings.email_to, subject, html)

    async def send_confirmation(self, signup: Signup) -> str | None:
        subject, html = self.render_confirmation(signup)
        return await self.email_service.send_email(signup.email, subject, html)
