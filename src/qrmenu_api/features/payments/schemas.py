"""Field sets that feed PayTR token computation."""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from qrmenu_api.common.schema import BaseSchema

Amount = Decimal | int | float | str


class DirectPaymentTokenFields(BaseSchema):
    """Inputs for the direct (iFrame-less) payment token."""

    user_ip: str
    merchant_oid: str
    email: str
    payment_amount: Amount
    payment_type: str = "card"
    installment_count: int = 0
    currency: str = "TL"
    test_mode: str | None = Field(
        default=None,
        description="'1' or '0'; falls back to the signer's configured mode.",
    )
    non_3d: str = "0"


class CreateLinkTokenFields(BaseSchema):
    """Inputs for the create-payment-link token."""

    name: str
    price: Amount
    currency: str = "TL"
    max_installment: str = "1"
    link_type: str = "product"
    lang: str = "tr"
    min_count: str = "0"


class DeleteLinkTokenFields(BaseSchema):
    """Inputs for the delete-payment-link token."""

    id: str


class CallbackPayload(BaseSchema):
    """Notification posted by PayTR once a payment settles."""

    merchant_oid: str
    status: str
    total_amount: str
    hash: str
    failed_reason_code: str | None = None
    failed_reason_msg: str | None = None
    test_mode: str | None = None
    payment_type: str | None = None
    currency: str | None = None
    payment_amount: str | None = None


class SignedPayload(BaseSchema):
    """Canonical string and its base64 HMAC-SHA256 signature."""

    canonical: str = Field(repr=False)
    signature: str


__all__ = [
    "Amount",
    "CallbackPayload",
    "CreateLinkTokenFields",
    "DeleteLinkTokenFields",
    "DirectPaymentTokenFields",
    "SignedPayload",
]
