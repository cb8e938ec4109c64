"""Authentication contracts: principals and auth errors."""

from .errors import AuthenticationError, IdentityUnavailableError, PermissionDeniedError
from .principal import AuthenticatedPrincipal, principal_from_claims

__all__ = [
    "AuthenticatedPrincipal",
    "AuthenticationError",
    "IdentityUnavailableError",
    "PermissionDeniedError",
    "principal_from_claims",
]
