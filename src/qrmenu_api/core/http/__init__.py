"""HTTP dependency helpers built on the shared auth/RBAC contracts."""

from .dependencies import (
    get_authorization_evaluator,
    get_current_principal,
    get_role_resolver,
    require_authenticated,
    require_permission,
)
from .errors import register_auth_exception_handlers

__all__ = [
    "get_authorization_evaluator",
    "get_current_principal",
    "get_role_resolver",
    "register_auth_exception_handlers",
    "require_authenticated",
    "require_permission",
]
