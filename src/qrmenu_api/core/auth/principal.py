"""Authenticated principal built from verified token claims."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

# Claim names accepted for the subject, in lookup order.
SUBJECT_CLAIMS = (
    "sub",
    "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/nameidentifier",
)
ROLE_CLAIMS = (
    "role",
    "http://schemas.microsoft.com/ws/2008/06/identity/claims/role",
)


@dataclass(frozen=True, slots=True)
class AuthenticatedPrincipal:
    """Identity of the caller as asserted by a verified token."""

    user_id: UUID
    email: str | None = None
    role_claim: str | None = None


def principal_from_claims(claims: Mapping[str, Any]) -> AuthenticatedPrincipal | None:
    """Return a principal for ``claims`` or ``None`` when the subject is unusable.

    The subject must parse as a UUID; any other shape is treated as an
    unverifiable identity rather than an error.
    """

    raw_subject = next((claims[name] for name in SUBJECT_CLAIMS if claims.get(name)), None)
    if not isinstance(raw_subject, str):
        return None
    try:
        user_id = UUID(raw_subject.strip())
    except ValueError:
        return None

    email = claims.get("email")
    role_claim = next((claims[name] for name in ROLE_CLAIMS if claims.get(name)), None)
    return AuthenticatedPrincipal(
        user_id=user_id,
        email=email if isinstance(email, str) else None,
        role_claim=role_claim if isinstance(role_claim, str) else None,
    )


__all__ = ["AuthenticatedPrincipal", "principal_from_claims"]
