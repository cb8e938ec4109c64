"""FastAPI handlers that render errors as Problem Details."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from qrmenu_api.common.logging import current_request_id, log_context
from qrmenu_api.common.problem_details import ApiError, build_problem_details

_UNHANDLED_LOGGER = logging.getLogger("qrmenu_api.errors")
PROBLEM_MEDIA_TYPE = "application/problem+json"


def problem_response(request: Request, error: ApiError) -> JSONResponse:
    """Render ``error`` with the current correlation id as ``requestId``."""

    problem = build_problem_details(
        status_code=error.status_code,
        instance=request.url.path,
        detail=error.detail,
        error_type=error.error_type,
        title=error.title,
        request_id=current_request_id(),
    )
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(by_alias=True, exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=error.headers,
    )


def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return problem_response(request, exc)


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the stack trace and answer with an opaque 500."""

    _UNHANDLED_LOGGER.exception(
        "unhandled_exception",
        extra=log_context(
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
        ),
    )
    error = ApiError(
        error_type="internal_error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )
    return problem_response(request, error)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "api_error_handler",
    "problem_response",
    "register_exception_handlers",
    "unhandled_exception_handler",
]
