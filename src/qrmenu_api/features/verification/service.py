"""Issue and validate short-lived verification and password-reset codes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from fastapi import status

from qrmenu_api.common.logging import log_context
from qrmenu_api.common.problem_details import ApiError
from qrmenu_api.common.time import utc_now
from qrmenu_api.core.security import constant_time_equals, random_numeric_code
from qrmenu_api.settings import Settings

from .delivery import CodeDelivery, CodeDeliveryError, build_code_delivery
from .store import CodeKey, CodePurpose, CodeStore, InMemoryCodeStore, PendingCode

logger = logging.getLogger(__name__)

DEFAULT_CODE_TTL = timedelta(minutes=15)
CODE_DIGITS = 6


class CodeValidationResult(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"
    MISMATCH = "mismatch"

    @property
    def message(self) -> str:
        return _RESULT_MESSAGES[self]


_RESULT_MESSAGES = {
    CodeValidationResult.VALID: "Code verified.",
    CodeValidationResult.EXPIRED: "The code has expired. Request a new code.",
    CodeValidationResult.NOT_FOUND: "No pending code was found. Request a new code.",
    CodeValidationResult.MISMATCH: "The code is incorrect. Try again.",
}


@dataclass(frozen=True, slots=True)
class IssuedCode:
    """Outcome of :meth:`CodeIssuer.issue`.

    ``delivered`` reports the transport result; the code stays pending
    either way.
    """

    code: str
    expires_at: datetime
    delivered: bool


def normalize_recipient_key(recipient_key: str) -> str:
    """Canonical key for an email address or phone number."""

    candidate = recipient_key.strip()
    if not candidate:
        raise ValueError("Recipient key must not be empty")
    if "@" in candidate:
        return candidate.lower()
    return candidate


class CodeIssuer:
    """Generate, store, deliver, and validate one-time codes."""

    def __init__(
        self,
        *,
        store: CodeStore,
        delivery: CodeDelivery,
        ttl: timedelta = DEFAULT_CODE_TTL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Code TTL must be positive")
        self._store = store
        self._delivery = delivery
        self._ttl = ttl
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        store: CodeStore | None = None,
        delivery: CodeDelivery | None = None,
    ) -> CodeIssuer:
        return cls(
            store=store if store is not None else InMemoryCodeStore(),
            delivery=delivery if delivery is not None else build_code_delivery(settings),
            ttl=settings.code_ttl,
        )

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(
        self,
        recipient_key: str,
        purpose: CodePurpose = CodePurpose.VERIFICATION,
    ) -> IssuedCode:
        """Store a fresh code for ``recipient_key`` and hand it to delivery.

        Any code already pending for the same recipient and purpose is
        replaced. Delivery runs after the store update and its failure does
        not withdraw the code.
        """

        recipient = normalize_recipient_key(recipient_key)
        key: CodeKey = (purpose, recipient)
        code = random_numeric_code(CODE_DIGITS)

        with self._store.lock(key):
            issued_at = self._clock()
            entry = PendingCode(
                recipient_key=recipient,
                code=code,
                purpose=purpose,
                issued_at=issued_at,
                expires_at=issued_at + self._ttl,
            )
            self._store.set(key, entry)

        logger.info(
            "verification.code.issued",
            extra=log_context(
                recipient=recipient,
                purpose=purpose.value,
                expires_at=entry.expires_at.isoformat(),
            ),
        )

        delivered = self._deliver(entry)
        return IssuedCode(code=code, expires_at=entry.expires_at, delivered=delivered)

    def validate(
        self,
        recipient_key: str,
        submitted_code: str,
        purpose: CodePurpose = CodePurpose.VERIFICATION,
    ) -> CodeValidationResult:
        """Check ``submitted_code`` against the pending code.

        Expired entries are removed on lookup; a matching code is consumed.
        A mismatch leaves the pending code in place. A blank recipient key
        can never have a pending code and reads as ``NOT_FOUND``.
        """

        if not recipient_key.strip():
            return CodeValidationResult.NOT_FOUND
        recipient = normalize_recipient_key(recipient_key)
        key: CodeKey = (purpose, recipient)
        candidate = submitted_code.strip()

        with self._store.lock(key):
            entry = self._store.get(key)
            if entry is None:
                result = CodeValidationResult.NOT_FOUND
            elif entry.is_expired(self._clock()):
                self._store.delete(key)
                result = CodeValidationResult.EXPIRED
            elif not constant_time_equals(candidate, entry.code):
                result = CodeValidationResult.MISMATCH
            else:
                self._store.delete(key)
                result = CodeValidationResult.VALID

        logger.info(
            "verification.code.validated",
            extra=log_context(recipient=recipient, purpose=purpose.value, result=result.value),
        )
        return result

    def peek(
        self,
        recipient_key: str,
        purpose: CodePurpose = CodePurpose.VERIFICATION,
    ) -> PendingCode | None:
        """Return the pending entry without validating or consuming it."""

        if not recipient_key.strip():
            return None
        return self._store.get((purpose, normalize_recipient_key(recipient_key)))

    def _deliver(self, entry: PendingCode) -> bool:
        try:
            delivered = self._delivery.deliver(
                recipient_key=entry.recipient_key,
                code=entry.code,
                purpose=entry.purpose,
                expires_at=entry.expires_at,
            )
        except CodeDeliveryError:
            logger.exception(
                "verification.code.delivery_failed",
                extra=log_context(recipient=entry.recipient_key, purpose=entry.purpose.value),
            )
            return False

        if not delivered:
            logger.warning(
                "verification.code.delivery_failed",
                extra=log_context(recipient=entry.recipient_key, purpose=entry.purpose.value),
            )
        return bool(delivered)


def raise_for_result(result: CodeValidationResult) -> None:
    """Raise a 400 :class:`ApiError` for every non-valid result."""

    if result is CodeValidationResult.VALID:
        return
    raise ApiError(
        error_type=f"code_{result.value}",
        status_code=status.HTTP_400_BAD_REQUEST,
        title="Invalid code",
        detail=result.message,
    )


__all__ = [
    "CODE_DIGITS",
    "DEFAULT_CODE_TTL",
    "CodeIssuer",
    "CodeValidationResult",
    "IssuedCode",
    "normalize_recipient_key",
    "raise_for_result",
]
