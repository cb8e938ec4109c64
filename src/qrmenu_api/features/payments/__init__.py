"""PayTR payment token signing."""

from .schemas import (
    CallbackPayload,
    CreateLinkTokenFields,
    DeleteLinkTokenFields,
    DirectPaymentTokenFields,
    SignedPayload,
)
from .signer import (
    MAX_AMOUNT,
    PaymentTokenSigner,
    SigningConfigurationError,
    canonical_string,
    format_amount,
    sign_canonical,
)

__all__ = [
    "MAX_AMOUNT",
    "CallbackPayload",
    "CreateLinkTokenFields",
    "DeleteLinkTokenFields",
    "DirectPaymentTokenFields",
    "PaymentTokenSigner",
    "SignedPayload",
    "SigningConfigurationError",
    "canonical_string",
    "format_amount",
    "sign_canonical",
]
