"""PayTR request signing and callback verification.

Every gateway operation hashes its own fixed field order, concatenated with
no separator and keyed by the merchant key. The order is the protocol:

* direct payment: merchant_id, user_ip, merchant_oid, email, payment_amount,
  payment_type, installment_count, currency, test_mode, non_3d, merchant_salt
* create link: name, price, currency, max_installment, link_type, lang,
  min_count, merchant_salt
* delete link: id, merchant_id, merchant_salt
* callback: merchant_oid, merchant_salt, status, total_amount
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from qrmenu_api.common.logging import log_context
from qrmenu_api.core.security import constant_time_equals, hmac_sha256_base64
from qrmenu_api.settings import Settings

from .schemas import (
    Amount,
    CallbackPayload,
    CreateLinkTokenFields,
    DeleteLinkTokenFields,
    DirectPaymentTokenFields,
    SignedPayload,
)

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999999.99")
_PLAIN_AMOUNT = re.compile(r"\d+(\.\d*)?|\.\d+", re.ASCII)


class SigningConfigurationError(ValueError):
    """Raised when a token cannot be computed from the given inputs."""


def format_amount(value: Amount) -> str:
    """Render ``value`` with exactly two decimals and a ``.`` separator.

    Formatting goes through :class:`~decimal.Decimal`, so the process locale
    never leaks into the canonical string. Text must be plain digits with an
    optional ``.`` fraction: comma separators, signs, exponents, and
    underscores are rejected, as are negative, non-finite, and out-of-range
    values.
    """

    if isinstance(value, bool):
        raise SigningConfigurationError("Amount must be numeric, not boolean")
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip()
        if not _PLAIN_AMOUNT.fullmatch(text):
            raise SigningConfigurationError(f"Amount {value!r} is not a plain decimal number")
        amount = Decimal(text)
    if not amount.is_finite():
        raise SigningConfigurationError(f"Amount {value!r} is not finite")
    if amount < 0:
        raise SigningConfigurationError(f"Amount {value!r} must not be negative")
    if amount > MAX_AMOUNT:
        raise SigningConfigurationError(f"Amount {value!r} exceeds {MAX_AMOUNT}")
    try:
        quantized = abs(amount).quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise SigningConfigurationError(f"Amount {value!r} cannot be rounded to cents") from exc
    return f"{quantized:f}"


def canonical_string(parts: Iterable[object]) -> str:
    return "".join(str(part) for part in parts)


def sign_canonical(canonical: str, merchant_key: str) -> SignedPayload:
    if not merchant_key:
        raise SigningConfigurationError("Merchant key must not be empty")
    return SignedPayload(canonical=canonical, signature=hmac_sha256_base64(canonical, merchant_key))


class PaymentTokenSigner:
    """Compute PayTR tokens for one merchant account.

    Credentials are validated on construction so a misconfiguration surfaces
    before any request is built.
    """

    def __init__(
        self,
        *,
        merchant_id: int | str,
        merchant_key: str,
        merchant_salt: str,
        test_mode: bool = False,
    ) -> None:
        merchant_id_text = str(merchant_id).strip()
        if not merchant_id_text.isdigit() or int(merchant_id_text) <= 0:
            raise SigningConfigurationError("Merchant id must be a positive integer")
        if not merchant_key:
            raise SigningConfigurationError("Merchant key must not be empty")
        if not merchant_salt:
            raise SigningConfigurationError("Merchant salt must not be empty")
        self.merchant_id = merchant_id_text
        self._merchant_key = merchant_key
        self._merchant_salt = merchant_salt
        self.test_mode = test_mode

    @classmethod
    def from_settings(cls, settings: Settings) -> PaymentTokenSigner:
        if (
            settings.paytr_merchant_id is None
            or settings.paytr_merchant_key is None
            or settings.paytr_merchant_salt is None
        ):
            raise SigningConfigurationError(
                "QRMENU_PAYTR_MERCHANT_ID, QRMENU_PAYTR_MERCHANT_KEY and "
                "QRMENU_PAYTR_MERCHANT_SALT are required."
            )
        return cls(
            merchant_id=settings.paytr_merchant_id,
            merchant_key=settings.paytr_merchant_key.get_secret_value(),
            merchant_salt=settings.paytr_merchant_salt.get_secret_value(),
            test_mode=settings.paytr_test_mode,
        )

    def __repr__(self) -> str:
        return f"PaymentTokenSigner(merchant_id={self.merchant_id!r})"

    # ------------------------------------------------------------------
    # Outbound tokens
    # ------------------------------------------------------------------

    def sign_direct_payment(self, fields: DirectPaymentTokenFields) -> SignedPayload:
        test_mode = fields.test_mode if fields.test_mode is not None else self._test_mode_flag
        canonical = canonical_string(
            (
                self.merchant_id,
                fields.user_ip,
                fields.merchant_oid,
                fields.email,
                format_amount(fields.payment_amount),
                fields.payment_type,
                fields.installment_count,
                fields.currency,
                test_mode,
                fields.non_3d,
                self._merchant_salt,
            )
        )
        return self._sign("direct_payment", canonical, merchant_oid=fields.merchant_oid)

    def sign_create_link(self, fields: CreateLinkTokenFields) -> SignedPayload:
        canonical = canonical_string(
            (
                fields.name,
                format_amount(fields.price),
                fields.currency,
                fields.max_installment,
                fields.link_type,
                fields.lang,
                fields.min_count,
                self._merchant_salt,
            )
        )
        return self._sign("create_link", canonical)

    def sign_delete_link(self, fields: DeleteLinkTokenFields) -> SignedPayload:
        link_id = fields.id.strip()
        if not link_id.isdigit():
            raise SigningConfigurationError("Link id must be numeric")
        canonical = canonical_string((link_id, self.merchant_id, self._merchant_salt))
        return self._sign("delete_link", canonical)

    # ------------------------------------------------------------------
    # Inbound callbacks
    # ------------------------------------------------------------------

    def callback_signature(self, payload: CallbackPayload) -> SignedPayload:
        canonical = canonical_string(
            (
                payload.merchant_oid,
                self._merchant_salt,
                payload.status,
                payload.total_amount,
            )
        )
        return sign_canonical(canonical, self._merchant_key)

    def verify_callback(self, payload: CallbackPayload) -> bool:
        """Return ``True`` when ``payload.hash`` matches the recomputed signature."""

        if not payload.hash:
            return False
        expected = self.callback_signature(payload).signature
        verified = constant_time_equals(payload.hash.strip(), expected)
        if not verified:
            logger.warning(
                "payments.callback.signature_mismatch",
                extra=log_context(merchant_oid=payload.merchant_oid, status=payload.status),
            )
        return verified

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @property
    def _test_mode_flag(self) -> str:
        return "1" if self.test_mode else "0"

    def _sign(
        self,
        operation: str,
        canonical: str,
        *,
        merchant_oid: str | None = None,
    ) -> SignedPayload:
        signed = sign_canonical(canonical, self._merchant_key)
        logger.debug(
            "payments.token.signed",
            extra=log_context(merchant_oid=merchant_oid, operation=operation),
        )
        return signed


__all__ = [
    "MAX_AMOUNT",
    "PaymentTokenSigner",
    "SigningConfigurationError",
    "canonical_string",
    "format_amount",
    "sign_canonical",
]
