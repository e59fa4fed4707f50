"""Email delivery over SMTP for password reset links."""

from functools import lru_cache
from typing import Protocol
from urllib.parse import urlencode

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
from loguru import logger

from reset_api.core.config import Settings, get_settings
from reset_api.utils.logger import mask_email

RESET_EMAIL_SUBJECT = "Reset Your Password"

RESET_EMAIL_BODY = (
    "{greeting} You requested a password reset. "
    "Please click the link below to reset your password:\n\n"
    "{reset_link}\n\n"
    "If you did not request this, please ignore this email, Thank you."
)


class Mailer(Protocol):
    async def send(self, to_address: str, subject: str, body: str) -> None: ...


def get_email_config(settings: Settings) -> ConnectionConfig:
    """
    Create and return email configuration for FastMail.

    Returns:
        ConnectionConfig: Configuration object for implicit-TLS SMTP (port 465 by default).

    Raises:
        ValueError: If required email settings are not configured.
    """
    if not settings.SMTP_HOST:
        raise ValueError("SMTP_HOST is required for email functionality")
    if not settings.SMTP_USER:
        raise ValueError("SMTP_USER is required for email functionality")
    if not settings.SMTP_PASSWORD:
        raise ValueError("SMTP_PASSWORD is required for email functionality")

    return ConnectionConfig(
        MAIL_USERNAME=settings.SMTP_USER,
        MAIL_PASSWORD=settings.SMTP_PASSWORD,
        MAIL_FROM=settings.SMTP_FROM_EMAIL or settings.SMTP_USER,
        MAIL_FROM_NAME=settings.SMTP_FROM_NAME,
        MAIL_PORT=settings.SMTP_PORT,
        MAIL_SERVER=settings.SMTP_HOST,
        MAIL_STARTTLS=not settings.SMTP_SSL_TLS,
        MAIL_SSL_TLS=settings.SMTP_SSL_TLS,
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
    )


class SmtpMailer:
    """Mailer sending plain-text messages through fastapi-mail."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: FastMail | None = None

    @property
    def client(self) -> FastMail:
        # Built on first send so a missing SMTP config only fails delivery
        if self._client is None:
            self._client = FastMail(get_email_config(self.settings))
        return self._client

    async def send(self, to_address: str, subject: str, body: str) -> None:
        message = MessageSchema(
            subject=subject,
            recipients=[to_address],
            body=body,
            subtype=MessageType.plain,
        )
        await self.client.send_message(message)


@lru_cache()
def get_mailer() -> Mailer:
    """Process-wide mailer, created once and reused by every request."""
    return SmtpMailer(get_settings())


def build_reset_link(base_url: str, token: str) -> str:
    """
    Embed the token as a query parameter on the frontend reset page.

    Example: build_reset_link("https://app.example.com", "ab12") ->
    "https://app.example.com/reset-password?token=ab12"
    """
    return f"{base_url.rstrip('/')}/reset-password?{urlencode({'token': token})}"


def build_reset_email(settings: Settings, token: str) -> tuple[str, str]:
    """Return the (subject, body) of the reset email for ``token``."""
    body = RESET_EMAIL_BODY.format(
        greeting=settings.MAIL_GREETING,
        reset_link=build_reset_link(settings.FRONTEND_URL, token),
    )
    return RESET_EMAIL_SUBJECT, body


async def send_password_reset_email(
    mailer: Mailer, settings: Settings, email: str, reset_token: str
) -> bool:
    """
    Send the password reset email, logging instead of raising on failure.

    The token is already stored when this runs, so a delivery failure leaves it
    in place and the API response is unaffected.

    Args:
        mailer: Mail transport.
        settings: Settings providing the link base and template values.
        email: Recipient address.
        reset_token: Plain reset token to embed in the link.

    Returns:
        bool: True if the transport accepted the message, False otherwise.
    """
    subject, body = build_reset_email(settings, reset_token)
    try:
        await mailer.send(email, subject, body)
    except Exception as e:
        logger.error(f"Error sending password reset email to {mask_email(email)}: {e}")
        return False
    logger.info(f"Password reset email sent to {mask_email(email)}")
    return True
