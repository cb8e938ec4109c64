from __future__ import annotations

import logging
import smtplib
from datetime import UTC, datetime

import pytest

import qrmenu_api.features.verification.delivery as delivery_module
from qrmenu_api.features.verification import (
    CodePurpose,
    NoopCodeDelivery,
    SmtpCodeDelivery,
    build_code_delivery,
)
from qrmenu_api.settings import Settings

EXPIRES_AT = datetime(2025, 1, 1, 12, 15, tzinfo=UTC)


class FakeSMTP:
    instances: list[FakeSMTP] = []
    fail_on_send = False

    def __init__(self, host: str, port: int, timeout: float) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.calls: list[str] = []
        self.messages: list[object] = []
        FakeSMTP.instances.append(self)

    def __enter__(self) -> FakeSMTP:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.calls.append("quit")

    def starttls(self) -> None:
        self.calls.append("starttls")

    def login(self, username: str, password: str) -> None:
        self.calls.append(f"login:{username}")

    def send_message(self, message: object) -> None:
        if FakeSMTP.fail_on_send:
            raise smtplib.SMTPRecipientsRefused({})
        self.calls.append("send")
        self.messages.append(message)


@pytest.fixture
def fake_smtp(monkeypatch: pytest.MonkeyPatch) -> type[FakeSMTP]:
    FakeSMTP.instances = []
    FakeSMTP.fail_on_send = False
    monkeypatch.setattr(delivery_module.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


@pytest.fixture
def smtp_delivery() -> SmtpCodeDelivery:
    return SmtpCodeDelivery(
        host="smtp.example.com",
        port=587,
        from_email="noreply@example.com",
        username="mailer",
        password="mail-password",
    )


def test_noop_delivery_never_logs_the_code(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=delivery_module.__name__)

    delivered = NoopCodeDelivery().deliver(
        recipient_key="owner@example.com",
        code="482913",
        purpose=CodePurpose.VERIFICATION,
        expires_at=EXPIRES_AT,
    )

    assert delivered is True
    record = caplog.records[-1]
    assert record.getMessage() == "verification.delivery.noop"
    assert "482913" not in repr(record.__dict__)
    assert "owner@example.com" not in repr(record.__dict__)


@pytest.mark.parametrize(
    "purpose,subject",
    [(CodePurpose.VERIFICATION, "Email Verification"), (CodePurpose.PASSWORD_RESET, "Password Reset")],
)
def test_build_message(smtp_delivery: SmtpCodeDelivery, purpose: CodePurpose, subject: str) -> None:
    message = smtp_delivery.build_message(recipient_key="owner@example.com", code="482913", purpose=purpose)

    assert message["Subject"] == subject
    assert message["To"] == "owner@example.com"
    assert "QR_Menu" in message["From"]
    assert "noreply@example.com" in message["From"]
    parts = message.get_payload()
    assert [part.get_content_type() for part in parts] == ["text/plain", "text/html"]
    assert all("482913" in part.get_payload(decode=True).decode("utf-8") for part in parts)


def test_smtp_delivery_sends_over_starttls(smtp_delivery: SmtpCodeDelivery, fake_smtp) -> None:
    delivered = smtp_delivery.deliver(
        recipient_key="owner@example.com",
        code="482913",
        purpose=CodePurpose.VERIFICATION,
        expires_at=EXPIRES_AT,
    )

    assert delivered is True
    (server,) = fake_smtp.instances
    assert (server.host, server.port) == ("smtp.example.com", 587)
    assert server.calls == ["starttls", "login:mailer", "send", "quit"]


def test_smtp_failure_reports_false(smtp_delivery: SmtpCodeDelivery, fake_smtp) -> None:
    fake_smtp.fail_on_send = True

    delivered = smtp_delivery.deliver(
        recipient_key="owner@example.com",
        code="482913",
        purpose=CodePurpose.PASSWORD_RESET,
        expires_at=EXPIRES_AT,
    )

    assert delivered is False


def test_smtp_delivery_skips_phone_recipients(smtp_delivery: SmtpCodeDelivery, fake_smtp) -> None:
    delivered = smtp_delivery.deliver(
        recipient_key="+905551234567",
        code="482913",
        purpose=CodePurpose.VERIFICATION,
        expires_at=EXPIRES_AT,
    )

    assert delivered is False
    assert fake_smtp.instances == []


def test_build_code_delivery_selects_backend() -> None:
    assert isinstance(build_code_delivery(Settings(_env_file=None)), NoopCodeDelivery)

    smtp = build_code_delivery(
        Settings(
            _env_file=None,
            code_delivery="smtp",
            smtp_host="smtp.example.com",
            smtp_from_email="noreply@example.com",
            smtp_password="secret",
        )
    )
    assert isinstance(smtp, SmtpCodeDelivery)
    assert smtp.password == "secret"
