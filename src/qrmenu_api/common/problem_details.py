"""Problem Details bodies for every error the API returns."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import status
from pydantic import Field

from .schema import BaseSchema


@dataclass(frozen=True)
class ErrorDefinition:
    type: str
    title: str
    status: int


_DEFINITIONS = (
    ErrorDefinition("bad_request", "Bad request", status.HTTP_400_BAD_REQUEST),
    ErrorDefinition("unauthorized", "Unauthorized", status.HTTP_401_UNAUTHORIZED),
    ErrorDefinition("forbidden", "Forbidden", status.HTTP_403_FORBIDDEN),
    ErrorDefinition("internal_error", "Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR),
    ErrorDefinition("service_unavailable", "Service unavailable", status.HTTP_503_SERVICE_UNAVAILABLE),
)

ERROR_DEFINITIONS: dict[str, ErrorDefinition] = {item.type: item for item in _DEFINITIONS}
_BY_STATUS: dict[int, ErrorDefinition] = {item.status: item for item in _DEFINITIONS}


class ProblemDetails(BaseSchema):
    """``application/problem+json`` payload."""

    type: str
    title: str
    status: int
    detail: str | None = None
    instance: str
    request_id: str | None = Field(default=None, alias="requestId")


class ApiError(RuntimeError):
    """Error carrying the fields of a Problem Details response.

    ``error_type`` may be more specific than the status family (for example
    ``code_expired`` on a 400); the title then falls back to the family's.
    """

    def __init__(
        self,
        *,
        error_type: str,
        status_code: int,
        detail: str | None = None,
        title: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(detail or title or error_type)
        self.error_type = error_type
        self.status_code = status_code
        self.detail = detail
        self.title = title
        self.headers = headers


def build_problem_details(
    *,
    status_code: int,
    instance: str,
    detail: str | None = None,
    error_type: str | None = None,
    title: str | None = None,
    request_id: str | None = None,
) -> ProblemDetails:
    family = ERROR_DEFINITIONS.get(error_type or "") or _BY_STATUS.get(
        status_code,
        ErrorDefinition("error", "Error", status_code),
    )
    return ProblemDetails(
        type=error_type or family.type,
        title=title or family.title,
        status=status_code,
        detail=detail,
        instance=instance,
        request_id=request_id,
    )


__all__ = [
    "ERROR_DEFINITIONS",
    "ApiError",
    "ErrorDefinition",
    "ProblemDetails",
    "build_problem_details",
]
