"""Auth-related exceptions shared across layers."""

from __future__ import annotations


class AuthenticationError(RuntimeError):
    """Raised when a request carries no verifiable identity (HTTP 401)."""


class PermissionDeniedError(RuntimeError):
    """Raised when a verified actor lacks the required permission (HTTP 403)."""

    def __init__(self, permission: str, message: str | None = None) -> None:
        super().__init__(message or f"Missing permission '{permission}'.")
        self.permission = permission


class IdentityUnavailableError(RuntimeError):
    """Raised when the identity/role store cannot be reached (HTTP 503)."""


__all__ = ["AuthenticationError", "IdentityUnavailableError", "PermissionDeniedError"]
