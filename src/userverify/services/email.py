"""Templated email delivery for verification links."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any

import aiosmtplib
import httpx

from userverify.config import settings

logger = logging.getLogger(__name__)

VERIFICATION_TEMPLATE = "emails.user-verification"

RESEND_API_URL = "https://api.resend.com/emails"

# Renders (html, text) from a template context
TemplateRenderer = Callable[[dict[str, Any]], tuple[str, str]]


class EmailDeliveryError(Exception):
    """The transport refused or failed to deliver a message."""

    pass


@dataclass
class RenderedEmail:
    """A rendered template ready for a backend."""

    template_id: str
    to: str
    subject: str
    html: str
    text: str


class EmailBackend(ABC):
    """Delivers rendered emails.

    ``send`` never raises on transport problems: failures are logged and
    reported as False so callers can surface them as a boolean result.
    """

    name = "base"

    async def send(self, email: RenderedEmail) -> bool:
        try:
            await self.deliver(email)
        except Exception as e:
            logger.error(f"{email.template_id} to {email.to} failed via {self.name}: {e}")
            return False
        logger.info(f"{email.template_id} sent to {email.to} via {self.name}")
        return True

    @abstractmethod
    async def deliver(self, email: RenderedEmail) -> None:
        """Hand the email to the transport, raising on failure."""


class ConsoleEmailBackend(EmailBackend):
    """Logs emails instead of sending them (development)."""

    name = "console"

    async def deliver(self, email: RenderedEmail) -> None:
        logger.info(
            f"\n{'=' * 60}\n"
            f"{email.template_id} (console backend - not sent)\n"
            f"To: {email.to}\n"
            f"Subject: {email.subject}\n"
            f"{'=' * 60}\n"
            f"{email.text}\n"
        )


class SMTPEmailBackend(EmailBackend):
    """Sends multipart (text + html) mail over SMTP."""

    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        from_address: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address

    def build_message(self, email: RenderedEmail) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["From"] = self.from_address
        message["To"] = email.to
        message["Subject"] = email.subject
        message.attach(MIMEText(email.text, "plain"))
        message.attach(MIMEText(email.html, "html"))
        return message

    async def deliver(self, email: RenderedEmail) -> None:
        await aiosmtplib.send(
            self.build_message(email),
            hostname=self.host,
            port=self.port,
            username=self.username or None,
            password=self.password or None,
            start_tls=self.use_tls,
        )


class ResendEmailBackend(EmailBackend):
    """Sends mail through the Resend HTTP API."""

    name = "resend"

    def __init__(self, api_key: str, from_address: str):
        self.api_key = api_key
        self.from_address = from_address

    async def deliver(self, email: RenderedEmail) -> None:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                RESEND_API_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "from": self.from_address,
                    "to": [email.to],
                    "subject": email.subject,
                    "html": email.html,
                    "text": email.text,
                    "tags": [{"name": "template", "value": email.template_id.replace(".", "_")}],
                },
            )
        if response.is_error:
            raise EmailDeliveryError(f"Resend API error: {response.status_code} - {response.text}")


def get_email_backend() -> EmailBackend:
    """Get the backend named by ``settings.email_backend``."""
    factories: dict[str, Callable[[], EmailBackend]] = {
        "console": ConsoleEmailBackend,
        "smtp": lambda: SMTPEmailBackend(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            from_address=settings.email_from,
        ),
        "resend": lambda: ResendEmailBackend(
            api_key=settings.resend_api_key,
            from_address=settings.email_from,
        ),
    }
    factory = factories.get(settings.email_backend)
    if factory is None:
        raise ValueError(f"Unknown email backend: {settings.email_backend}")
    return factory()


def render_verification_email(context: dict[str, Any]) -> tuple[str, str]:
    """Render the account verification email.

    The context must carry ``user`` (the account) and ``link`` (the full
    verification URL).
    """
    user = context["user"]
    link = context["link"]

    html = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2 style="color: #1a1a1a;">Verify your email address</h2>
    <p>Click the button below to confirm that {user.email} belongs to you.</p>
    <p style="text-align: center; margin: 30px 0;">
        <a href="{link}" style="background: #2563eb; color: white; padding: 12px 30px; border-radius: 6px; text-decoration: none;">Verify my account</a>
    </p>
    <p style="color: #666; font-size: 12px;">
        If the button doesn't work, open this link: <a href="{link}">{link}</a><br>
        If you didn't create an account, you can ignore this email.
    </p>
</body>
</html>
"""

    text = f"""
Verify your email address
=========================

Open the link below to confirm that {user.email} belongs to you.

{link}

If you didn't create an account, you can ignore this email.
"""

    return html, text


TEMPLATES: dict[str, TemplateRenderer] = {
    VERIFICATION_TEMPLATE: render_verification_email,
}


class EmailService:
    """Renders registered templates and hands them to a backend."""

    def __init__(
        self,
        backend: EmailBackend | None = None,
        templates: dict[str, TemplateRenderer] | None = None,
    ):
        self._backend = backend
        self.templates = dict(TEMPLATES if templates is None else templates)

    @property
    def backend(self) -> EmailBackend:
        """Lazy-load the backend."""
        if self._backend is None:
            self._backend = get_email_backend()
        return self._backend

    def register_template(self, template_id: str, renderer: TemplateRenderer) -> None:
        self.templates[template_id] = renderer

    def render(
        self,
        template_id: str,
        to: str,
        context: dict[str, Any],
        subject: str,
    ) -> RenderedEmail:
        renderer = self.templates.get(template_id)
        if renderer is None:
            raise ValueError(f"Unknown email template: {template_id}")
        html, text = renderer(context)
        return RenderedEmail(template_id=template_id, to=to, subject=subject, html=html, text=text)

    async def send_template(
        self,
        template_id: str,
        to: str,
        context: dict[str, Any],
        subject: str,
    ) -> bool:
        """Render a registered template and send it.

        Args:
            template_id: Registered template name
            to: Recipient email address
            context: Values made available to the template
            subject: Email subject

        Returns:
            True if sent successfully
        """
        return await self.backend.send(self.render(template_id, to, context, subject))


# Global email service instance
email_service = EmailService()
