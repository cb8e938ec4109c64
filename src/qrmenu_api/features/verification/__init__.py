"""Time-limited verification and password-reset codes."""

from .delivery import (
    CodeDelivery,
    CodeDeliveryError,
    NoopCodeDelivery,
    SmtpCodeDelivery,
    build_code_delivery,
)
from .service import (
    CodeIssuer,
    CodeValidationResult,
    IssuedCode,
    normalize_recipient_key,
    raise_for_result,
)
from .store import CodePurpose, CodeStore, InMemoryCodeStore, PendingCode

__all__ = [
    "CodeDelivery",
    "CodeDeliveryError",
    "CodeIssuer",
    "CodePurpose",
    "CodeStore",
    "CodeValidationResult",
    "InMemoryCodeStore",
    "IssuedCode",
    "NoopCodeDelivery",
    "PendingCode",
    "SmtpCodeDelivery",
    "build_code_delivery",
    "normalize_recipient_key",
    "raise_for_result",
]
