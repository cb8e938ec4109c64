"""Token helpers for bearer extraction and JWT decoding."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import jwt

BEARER_SCHEME = "bearer"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the raw token from an ``Authorization`` header value.

    Bare tokens without the ``Bearer`` scheme are accepted as well, so a
    token pasted straight into API tooling still authenticates.
    """

    if not authorization:
        return None
    candidate = authorization.strip()
    scheme, _, rest = candidate.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        candidate = rest.strip()
    return candidate or None


def decode_token(
    token: str,
    *,
    secret: str,
    algorithms: Sequence[str],
    audience: Sequence[str] | None = None,
    issuer: str | None = None,
) -> dict[str, Any]:
    """Decode a JWT and return its payload.

    Raises :class:`jwt.InvalidTokenError` (or a subclass) when the signature,
    expiry, audience, or issuer does not verify.
    """

    # The subject may arrive under "sub" or a URI claim; principal_from_claims decides.
    options: dict[str, Any] = {"require": ["exp"]}
    if not audience:
        options["verify_aud"] = False
    return jwt.decode(
        token,
        secret,
        algorithms=list(algorithms),
        audience=list(audience) if audience else None,
        issuer=issuer,
        options=options,
    )


__all__ = ["decode_token", "extract_bearer_token"]
