"""
Notification email delivery with a pluggable provider.

Supports SMTP (default), Resend API, and AWS SES, selected by
``COLLABEX_EMAIL_PROVIDER``. Providers never raise: a failed delivery is
logged and reported as False so the outbox can retry it.
"""

from __future__ import annotations

import ssl
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage

import aioboto3
import aiosmtplib
import httpx
import structlog

from collabex.config import Settings, get_settings
from collabex.email.templates import render_notification_email
from collabex.notifications.payloads import NotificationPayload

logger = structlog.get_logger()

RESEND_API_URL = "https://api.resend.com/emails"


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    html_body: str
    text_body: str


class BaseEmailProvider(ABC):
    """Delivery backend. Subclasses implement ``_deliver`` and may raise freely."""

    name = "base"

    def __init__(self, from_address: str, from_name: str) -> None:
        self.from_address = from_address
        self.from_name = from_name

    @property
    def sender(self) -> str:
        return f"{self.from_name} <{self.from_address}>"

    @abstractmethod
    async def _deliver(self, email: OutgoingEmail) -> None: ...

    async def send(self, email: OutgoingEmail) -> bool:
        """Deliver ``email``. Returns True on success, False (logged) on any failure."""
        try:
            await self._deliver(email)
        except Exception:
            logger.exception("email_send_failed", to=email.to, provider=self.name)
            return False
        logger.info("email_sent", to=email.to, subject=email.subject, provider=self.name)
        return True


class SMTPProvider(BaseEmailProvider):
    """SMTP via aiosmtplib, STARTTLS when enabled."""

    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_address: str,
        from_name: str,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        super().__init__(from_address, from_name)
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, email: OutgoingEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = email.to
        msg["Subject"] = email.subject
        msg.set_content(email.text_body)
        msg.add_alternative(email.html_body, subtype="html")
        return msg

    async def _deliver(self, email: OutgoingEmail) -> None:
        await aiosmtplib.send(
            self.build_message(email),
            hostname=self.host,
            port=self.port,
            username=self.username or None,
            password=self.password or None,
            start_tls=self.use_tls,
            tls_context=ssl.create_default_context() if self.use_tls else None,
            timeout=self.timeout,
        )


class ResendProvider(BaseEmailProvider):
    """Resend HTTP API."""

    name = "resend"

    def __init__(self, api_key: str, from_address: str, from_name: str, timeout: float = 10.0) -> None:
        super().__init__(from_address, from_name)
        self.api_key = api_key
        self.timeout = timeout

    async def _deliver(self, email: OutgoingEmail) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                RESEND_API_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "from": self.sender,
                    "to": [email.to],
                    "subject": email.subject,
                    "html": email.html_body,
                    "text": email.text_body,
                },
            )
            response.raise_for_status()


class SESProvider(BaseEmailProvider):
    """AWS SES; credentials come from the standard AWS environment."""

    name = "ses"

    def __init__(self, region: str, from_address: str, from_name: str) -> None:
        super().__init__(from_address, from_name)
        self.region = region

    async def _deliver(self, email: OutgoingEmail) -> None:
        session = aioboto3.Session()
        async with session.client("ses", region_name=self.region) as ses:
            await ses.send_email(
                Source=self.sender,
                Destination={"ToAddresses": [email.to]},
                Message={
                    "Subject": {"Data": email.subject, "Charset": "UTF-8"},
                    "Body": {
                        "Text": {"Data": email.text_body, "Charset": "UTF-8"},
                        "Html": {"Data": email.html_body, "Charset": "UTF-8"},
                    },
                },
            )


def _create_provider(settings: Settings | None = None) -> BaseEmailProvider:
    """
    Build the configured provider.

    Raises:
        ValueError: If the provider is unknown or missing its credential.
    """
    settings = settings or get_settings()
    provider_name = settings.email_provider.lower()
    sender = {"from_address": settings.email_from_address, "from_name": settings.email_from_name}

    if provider_name == "smtp":
        return SMTPProvider(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.outbound_timeout_seconds,
            **sender,
        )
    if provider_name == "resend":
        if not settings.resend_api_key:
            msg = "Resend provider selected but COLLABEX_RESEND_API_KEY is not set"
            raise ValueError(msg)
        return ResendProvider(api_key=settings.resend_api_key, timeout=settings.outbound_timeout_seconds, **sender)
    if provider_name == "ses":
        return SESProvider(region=settings.ses_region, **sender)
    msg = f"Unsupported email provider: {provider_name}"
    raise ValueError(msg)


class EmailService:
    """Renders notification templates and hands them to a provider."""

    def __init__(self, provider: BaseEmailProvider | None = None) -> None:
        self.provider = provider or _create_provider()

    async def send_email(self, to: str, subject: str, html_body: str, text_body: str) -> bool:
        return await self.provider.send(OutgoingEmail(to, subject, html_body, text_body))

    async def send_notification_email(
        self,
        to: str,
        type_: str,
        sender_name: str,
        message: str,
        payload: NotificationPayload | None = None,
    ) -> bool:
        """
        Render the per-type notification template and send.

        Raises:
            ValueError: If the notification type has no template.
        """
        subject, html_body, text_body = render_notification_email(type_, sender_name, message, payload)
        return await self.send_email(to, subject, html_body, text_body)


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get or create the email service singleton."""
    global _email_service  # noqa: PLW0603
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
