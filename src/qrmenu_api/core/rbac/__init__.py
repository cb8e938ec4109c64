"""RBAC contracts, the permission registry, and the evaluator."""

from .evaluator import AuthorizationDecision, AuthorizationEvaluator, RoleResolver, candidate_roles
from .registry import (
    MODULES,
    PERMISSION_KEYS,
    PERMISSION_REGISTRY,
    PERMISSIONS,
    ROLE_LEVELS,
    ROLE_PERMISSIONS,
    UNKNOWN_ROLE_LEVEL,
    all_permissions,
    all_roles,
    module_permissions,
    parse_role,
    permissions_for_role,
    role_has_permission,
    role_level,
)
from .types import ActorRoles, DecisionOutcome, PermissionDef, Role

__all__ = [
    "MODULES",
    "PERMISSIONS",
    "PERMISSION_KEYS",
    "PERMISSION_REGISTRY",
    "ROLE_LEVELS",
    "ROLE_PERMISSIONS",
    "UNKNOWN_ROLE_LEVEL",
    "ActorRoles",
    "AuthorizationDecision",
    "AuthorizationEvaluator",
    "DecisionOutcome",
    "PermissionDef",
    "Role",
    "RoleResolver",
    "all_permissions",
    "all_roles",
    "candidate_roles",
    "module_permissions",
    "parse_role",
    "permissions_for_role",
    "role_has_permission",
    "role_level",
]
