"""QR Menu core settings (conventional Pydantic v2)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from functools import lru_cache
from typing import Literal, TypeVar

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
ALLOWED_LOG_FORMATS = frozenset({"console", "json"})

# ---- Defaults ---------------------------------------------------------------

DEFAULT_CODE_TTL_MINUTES = 15
DEFAULT_IDENTIFIER_PREFIX = "SP"
DEFAULT_IDENTIFIER_MAX_ATTEMPTS = 10

T = TypeVar("T")


def qrmenu_settings_config(
    *,
    enable_decoding: bool = True,
    populate_by_name: bool = False,
) -> SettingsConfigDict:
    """Return the standard ``BaseSettings`` config dict."""

    return SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QRMENU_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        enable_decoding=enable_decoding,
        populate_by_name=populate_by_name,
        str_strip_whitespace=True,
    )


def create_settings_accessors(
    settings_type: type[T],
) -> tuple[Callable[[], T], Callable[[], T]]:
    """Create ``get_settings`` and ``reload_settings`` helpers for a settings class."""

    @lru_cache(maxsize=1)
    def _build() -> T:
        return settings_type()

    def get_settings() -> T:
        return _build()

    def reload_settings() -> T:
        _build.cache_clear()
        return _build()

    return get_settings, reload_settings


def normalize_log_format(value: str, *, env_var: str = "QRMENU_LOG_FORMAT") -> str:
    normalized = value.strip().lower()
    if normalized not in ALLOWED_LOG_FORMATS:
        allowed = ", ".join(sorted(ALLOWED_LOG_FORMATS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


def normalize_log_level(value: str | None, *, env_var: str) -> str | None:
    if value is None:
        return None
    normalized = value.strip().upper()
    if normalized not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


# ---- Settings ---------------------------------------------------------------


class Settings(BaseSettings):
    """Core settings loaded from QRMENU_* environment variables."""

    model_config = qrmenu_settings_config(enable_decoding=False, populate_by_name=True)

    # Core
    app_name: str = "QR Menu API"
    log_format: str = "console"
    log_level: str = "INFO"

    # JWT
    jwt_secret_key: SecretStr | None = None
    jwt_algorithm: str = "HS256"
    jwt_issuer: str | None = None
    jwt_audience: list[str] = Field(default_factory=list)

    # Verification / reset codes
    code_ttl_minutes: int = Field(DEFAULT_CODE_TTL_MINUTES, ge=1, le=24 * 60)
    code_delivery: Literal["noop", "smtp"] = "noop"

    # SMTP
    smtp_host: str | None = None
    smtp_port: int = Field(587, ge=1, le=65535)
    smtp_username: str | None = None
    smtp_password: SecretStr | None = None
    smtp_from_email: str | None = None
    smtp_from_name: str = "QR_Menu"
    smtp_use_tls: bool = True
    smtp_timeout_seconds: float = Field(10.0, gt=0)

    # Business identifiers
    identifier_prefix: str = DEFAULT_IDENTIFIER_PREFIX
    identifier_max_attempts: int = Field(DEFAULT_IDENTIFIER_MAX_ATTEMPTS, ge=1, le=1000)

    # PayTR
    paytr_merchant_id: int | None = Field(default=None, ge=1)
    paytr_merchant_key: SecretStr | None = None
    paytr_merchant_salt: SecretStr | None = None
    paytr_test_mode: bool = True

    # ---- Validators ----

    @field_validator("jwt_audience", mode="before")
    @classmethod
    def _parse_audience(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("identifier_prefix", mode="before")
    @classmethod
    def _normalize_identifier_prefix(cls, value: object) -> object:
        if value is None:
            return DEFAULT_IDENTIFIER_PREFIX
        raw = str(value).strip().upper()
        if len(raw) != 2 or not raw.isascii() or not raw.isalpha():
            raise ValueError("QRMENU_IDENTIFIER_PREFIX must be two ASCII letters.")
        return raw

    @model_validator(mode="after")
    def _finalize(self) -> Settings:
        self.log_format = normalize_log_format(self.log_format, env_var="QRMENU_LOG_FORMAT")

        normalized_log_level = normalize_log_level(self.log_level, env_var="QRMENU_LOG_LEVEL")
        if normalized_log_level is None:
            raise ValueError("QRMENU_LOG_LEVEL must not be empty.")
        self.log_level = normalized_log_level

        if self.code_delivery == "smtp":
            missing = [
                name
                for name, value in (
                    ("QRMENU_SMTP_HOST", self.smtp_host),
                    ("QRMENU_SMTP_FROM_EMAIL", self.smtp_from_email),
                )
                if not value
            ]
            if missing:
                raise ValueError(
                    "SMTP code delivery requires: " + ", ".join(missing) + "."
                )
        return self

    @property
    def code_ttl(self) -> timedelta:
        return timedelta(minutes=self.code_ttl_minutes)


get_settings, reload_settings = create_settings_accessors(Settings)


__all__ = [
    "ALLOWED_LOG_FORMATS",
    "ALLOWED_LOG_LEVELS",
    "Settings",
    "get_settings",
    "normalize_log_format",
    "normalize_log_level",
    "qrmenu_settings_config",
    "reload_settings",
]
