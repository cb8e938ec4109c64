"""Exception handlers that translate auth errors to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from qrmenu_api.common.exceptions import api_error_handler
from qrmenu_api.common.logging import log_context
from qrmenu_api.common.problem_details import ApiError

from ..auth.errors import AuthenticationError, IdentityUnavailableError, PermissionDeniedError

logger = logging.getLogger(__name__)


def _handle_authentication_error(request: Request, exc: AuthenticationError) -> JSONResponse:
    """Translate missing credentials into an HTTP 401 challenge."""

    error = ApiError(
        error_type="unauthorized",
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=str(exc) or "Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )
    return api_error_handler(request, error)


def _handle_permission_denied(request: Request, exc: PermissionDeniedError) -> JSONResponse:
    """Translate insufficient grants into HTTP 403."""

    error = ApiError(
        error_type="forbidden",
        status_code=status.HTTP_403_FORBIDDEN,
        detail=str(exc) or "Forbidden",
    )
    return api_error_handler(request, error)


def _handle_identity_unavailable(request: Request, exc: IdentityUnavailableError) -> JSONResponse:
    """Surface identity store outages as HTTP 503, never as a forbid."""

    logger.error(
        "auth.identity_unavailable",
        exc_info=exc,
        extra=log_context(path=str(request.url.path), detail=str(exc)),
    )
    error = ApiError(
        error_type="service_unavailable",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Identity service unavailable",
    )
    return api_error_handler(request, error)


def register_auth_exception_handlers(app: FastAPI) -> None:
    """Attach auth exception handlers to ``app``."""

    app.add_exception_handler(AuthenticationError, _handle_authentication_error)  # type: ignore[arg-type]
    app.add_exception_handler(PermissionDeniedError, _handle_permission_denied)  # type: ignore[arg-type]
    app.add_exception_handler(IdentityUnavailableError, _handle_identity_unavailable)  # type: ignore[arg-type]


__all__ = ["register_auth_exception_handlers"]
