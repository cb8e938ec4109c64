"""FastAPI dependencies that bridge HTTP requests to the auth/RBAC foundation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated

import jwt
from fastapi import Depends, Header, Request

from qrmenu_api.common.logging import log_context
from qrmenu_api.settings import Settings, get_settings

from ..auth import (
    AuthenticatedPrincipal,
    AuthenticationError,
    IdentityUnavailableError,
    PermissionDeniedError,
    principal_from_claims,
)
from ..rbac.evaluator import AuthorizationEvaluator, RoleResolver
from ..rbac.types import DecisionOutcome
from ..security.tokens import decode_token, extract_bearer_token

logger = logging.getLogger(__name__)

SettingsDep = Annotated[Settings, Depends(get_settings)]
PermissionDependency = Callable[..., AuthenticatedPrincipal]


def get_role_resolver(request: Request) -> RoleResolver:
    """Return the role resolver installed on ``app.state.role_resolver``."""

    resolver = getattr(request.app.state, "role_resolver", None)
    if resolver is None:
        raise IdentityUnavailableError("Role resolver is not configured.")
    return resolver


def get_authorization_evaluator(
    resolver: Annotated[RoleResolver, Depends(get_role_resolver)],
) -> AuthorizationEvaluator:
    return AuthorizationEvaluator(resolver)


def get_current_principal(
    settings: SettingsDep,
    authorization: Annotated[str | None, Header()] = None,
) -> AuthenticatedPrincipal | None:
    """Return the principal asserted by the bearer token, if it verifies.

    Missing, malformed, or expired tokens yield ``None`` so the caller can
    issue a challenge instead of a forbid.
    """

    token = extract_bearer_token(authorization)
    if token is None:
        return None
    if settings.jwt_secret_key is None:
        raise IdentityUnavailableError("JWT verification is not configured.")

    try:
        claims = decode_token(
            token,
            secret=settings.jwt_secret_key.get_secret_value(),
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience or None,
            issuer=settings.jwt_issuer,
        )
    except jwt.InvalidTokenError as exc:
        logger.info(
            "auth.token.rejected",
            extra=log_context(reason=type(exc).__name__),
        )
        return None
    return principal_from_claims(claims)


def require_authenticated(
    principal: Annotated[AuthenticatedPrincipal | None, Depends(get_current_principal)],
) -> AuthenticatedPrincipal:
    if principal is None:
        raise AuthenticationError("Authentication required")
    return principal


def require_permission(permission: str) -> PermissionDependency:
    """Return a dependency enforcing ``permission`` for the current principal.

    ``INDETERMINATE`` maps to :class:`AuthenticationError` (401) and ``DENY``
    to :class:`PermissionDeniedError` (403).
    """

    def dependency(
        principal: Annotated[AuthenticatedPrincipal | None, Depends(get_current_principal)],
        evaluator: Annotated[AuthorizationEvaluator, Depends(get_authorization_evaluator)],
    ) -> AuthenticatedPrincipal:
        decision = evaluator.evaluate(principal, permission)
        if decision.outcome is DecisionOutcome.ALLOW and principal is not None:
            return principal
        if decision.outcome is DecisionOutcome.INDETERMINATE:
            raise AuthenticationError("Authentication required")
        raise PermissionDeniedError(permission)

    dependency.__name__ = f"require_permission[{permission}]"
    return dependency


__all__ = [
    "get_authorization_evaluator",
    "get_current_principal",
    "get_role_resolver",
    "require_authenticated",
    "require_permission",
]
