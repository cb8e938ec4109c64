"""Verification and password-reset code delivery adapters."""

from __future__ import annotations

import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Protocol

from qrmenu_api.common.logging import log_context
from qrmenu_api.settings import Settings

from .store import CodePurpose

logger = logging.getLogger(__name__)


class CodeDeliveryError(RuntimeError):
    """Raised by delivery adapters that cannot hand a code to its recipient."""


class CodeDelivery(Protocol):
    """Delivery interface for pending codes.

    Returns ``True`` when the transport accepted the message.
    """

    def deliver(
        self,
        *,
        recipient_key: str,
        code: str,
        purpose: CodePurpose,
        expires_at: datetime,
    ) -> bool: ...


class NoopCodeDelivery:
    """No-op delivery used until a transport is configured."""

    def deliver(
        self,
        *,
        recipient_key: str,
        code: str,
        purpose: CodePurpose,
        expires_at: datetime,
    ) -> bool:
        # Never log the raw code.
        logger.info(
            "verification.delivery.noop",
            extra=log_context(
                recipient=recipient_key,
                purpose=purpose.value,
                expires_at=expires_at.isoformat(),
            ),
        )
        return True


_SUBJECTS = {
    CodePurpose.VERIFICATION: "Email Verification",
    CodePurpose.PASSWORD_RESET: "Password Reset",
}


def render_code_email(*, code: str, purpose: CodePurpose, brand: str) -> tuple[str, str, str]:
    """Return ``(subject, plain_text, html)`` for a code email."""

    subject = _SUBJECTS[purpose]
    if purpose is CodePurpose.VERIFICATION:
        lead = "Your verification code is:"
        closing = f"Thank you for registering with {brand}!"
    else:
        lead = "Your password reset code is:"
        closing = "If you did not request a password reset, you can ignore this email."

    plain = (
        f"Hello,\n\n{lead} {code}\n\n{closing}\n\n"
        f"Best regards,\nThe {brand} Team"
    )
    html = (
        f"<html><body><p>Hello,</p><p>{lead} <b>{code}</b></p>"
        f"<p>{closing}</p><p>Best regards,<br/>The {brand} Team</p></body></html>"
    )
    return subject, plain, html


class SmtpCodeDelivery:
    """Send codes as multipart (plain + HTML) emails over SMTP."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        from_email: str,
        from_name: str = "QR_Menu",
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.from_email = from_email
        self.from_name = from_name
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> SmtpCodeDelivery:
        if not settings.smtp_host or not settings.smtp_from_email:
            raise ValueError("SMTP delivery requires QRMENU_SMTP_HOST and QRMENU_SMTP_FROM_EMAIL.")
        password = settings.smtp_password.get_secret_value() if settings.smtp_password else None
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            from_email=settings.smtp_from_email,
            from_name=settings.smtp_from_name,
            username=settings.smtp_username,
            password=password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
        )

    def build_message(self, *, recipient_key: str, code: str, purpose: CodePurpose) -> MIMEMultipart:
        subject, plain, html = render_code_email(code=code, purpose=purpose, brand=self.from_name)
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = formataddr((self.from_name, self.from_email))
        message["To"] = recipient_key
        message.attach(MIMEText(plain, "plain", "utf-8"))
        message.attach(MIMEText(html, "html", "utf-8"))
        return message

    def deliver(
        self,
        *,
        recipient_key: str,
        code: str,
        purpose: CodePurpose,
        expires_at: datetime,
    ) -> bool:
        if "@" not in recipient_key:
            logger.warning(
                "verification.delivery.smtp.unsupported_recipient",
                extra=log_context(recipient=recipient_key, purpose=purpose.value),
            )
            return False

        message = self.build_message(recipient_key=recipient_key, code=code, purpose=purpose)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.exception(
                "verification.delivery.smtp.failed",
                extra=log_context(recipient=recipient_key, purpose=purpose.value),
            )
            return False

        logger.info(
            "verification.delivery.smtp.sent",
            extra=log_context(
                recipient=recipient_key,
                purpose=purpose.value,
                expires_at=expires_at.isoformat(),
            ),
        )
        return True


def build_code_delivery(settings: Settings) -> CodeDelivery:
    """Return the delivery adapter selected by ``settings.code_delivery``."""

    if settings.code_delivery == "smtp":
        return SmtpCodeDelivery.from_settings(settings)
    return NoopCodeDelivery()


__all__ = [
    "CodeDelivery",
    "CodeDeliveryError",
    "NoopCodeDelivery",
    "SmtpCodeDelivery",
    "build_code_delivery",
    "render_code_email",
]
