"""Collision-checked allocation of human-readable business identifiers."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from qrmenu_api.common.logging import log_context
from qrmenu_api.core.security import random_int
from qrmenu_api.settings import Settings

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[A-Z]{2}\d{6}$")
IDENTIFIER_DIGITS = 6
MAX_IDENTIFIER_NUMBER = 10**IDENTIFIER_DIGITS - 1
DEFAULT_PREFIX = "SP"
DEFAULT_MAX_ATTEMPTS = 10

ExistsCheck = Callable[[str], bool]


class IdentifierExhaustedError(RuntimeError):
    """Raised when every attempt produced an identifier that already exists."""

    def __init__(self, *, prefix: str, attempts: int, sentinel: str) -> None:
        super().__init__(f"No free '{prefix}' identifier found after {attempts} attempts.")
        self.prefix = prefix
        self.attempts = attempts
        self.sentinel = sentinel


def is_valid_identifier(value: str) -> bool:
    return bool(IDENTIFIER_PATTERN.match(value))


def format_identifier(prefix: str, number: int) -> str:
    if not 0 <= number <= MAX_IDENTIFIER_NUMBER:
        raise ValueError(f"Identifier number must be within 0..{MAX_IDENTIFIER_NUMBER}")
    return f"{prefix}{number:0{IDENTIFIER_DIGITS}d}"


class IdentifierAllocator:
    """Allocate ``<prefix><6 digits>`` identifiers in one flat keyspace.

    Numbers are drawn uniformly from 1..999999. Each candidate is checked
    against the authoritative store; allocation gives up after
    ``max_attempts`` collisions. Check-then-insert is not atomic: the
    inserting layer still needs a uniqueness constraint.
    """

    def __init__(
        self,
        *,
        prefix: str = DEFAULT_PREFIX,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        draw: Callable[[int, int], int] = random_int,
    ) -> None:
        if len(prefix) != 2 or not prefix.isascii() or not prefix.isalpha() or not prefix.isupper():
            raise ValueError("Identifier prefix must be two uppercase ASCII letters")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.prefix = prefix
        self.max_attempts = max_attempts
        self._draw = draw

    @classmethod
    def from_settings(cls, settings: Settings) -> IdentifierAllocator:
        return cls(prefix=settings.identifier_prefix, max_attempts=settings.identifier_max_attempts)

    @property
    def sentinel(self) -> str:
        return format_identifier(self.prefix, 0)

    def allocate(self, exists: ExistsCheck) -> str:
        """Return an identifier ``exists`` reports as free.

        Raises :class:`IdentifierExhaustedError` when every attempt collides.
        """

        for attempt in range(1, self.max_attempts + 1):
            candidate = format_identifier(self.prefix, self._draw(1, MAX_IDENTIFIER_NUMBER))
            if not exists(candidate):
                if attempt > 1:
                    logger.info(
                        "identifiers.allocated_after_collisions",
                        extra=log_context(prefix=self.prefix, attempts=attempt),
                    )
                return candidate

        logger.error(
            "identifiers.exhausted",
            extra=log_context(prefix=self.prefix, attempts=self.max_attempts),
        )
        raise IdentifierExhaustedError(
            prefix=self.prefix,
            attempts=self.max_attempts,
            sentinel=self.sentinel,
        )

    def allocate_or_sentinel(self, exists: ExistsCheck) -> str:
        """Like :meth:`allocate` but fall back to the all-zero sentinel.

        The sentinel itself is never checked for collisions; callers opting
        into this must re-check it before inserting.
        """

        try:
            return self.allocate(exists)
        except IdentifierExhaustedError as exc:
            logger.warning(
                "identifiers.sentinel_fallback",
                extra=log_context(prefix=self.prefix, sentinel=exc.sentinel),
            )
            return exc.sentinel


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_PREFIX",
    "IDENTIFIER_PATTERN",
    "ExistsCheck",
    "IdentifierAllocator",
    "IdentifierExhaustedError",
    "format_identifier",
    "is_valid_identifier",
]
