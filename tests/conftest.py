"""Shared pytest fixtures for the QR Menu core tests."""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta

import pytest

from qrmenu_api.settings import Settings

TEST_JWT_SECRET = "test-secret-key-for-tests-please-change"


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer QRMENU_* variables out of the test settings."""

    for name in list(os.environ):
        if name.startswith("QRMENU_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret_key=TEST_JWT_SECRET,
        paytr_merchant_id=123456,
        paytr_merchant_key="merchant-key",
        paytr_merchant_salt="merchant-salt",
        paytr_test_mode=False,
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 1, 1, 12, 0, tzinfo=UTC))
