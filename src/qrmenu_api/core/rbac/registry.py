"""Canonical permission registry and the fixed role table."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .types import PermissionDef, Role


def _module(module: str, entries: Iterable[tuple[str, str]]) -> tuple[PermissionDef, ...]:
    return tuple(
        PermissionDef(key=f"{module}.{action}", module=module, description=description)
        for action, description in entries
    )


PERMISSIONS: tuple[PermissionDef, ...] = (
    # Users ---------------------------------------------------------------
    *_module(
        "users",
        (
            ("view", "View users within reach."),
            ("view_all", "View every user account."),
            ("view_details", "Inspect a user's profile details."),
            ("create", "Create user accounts."),
            ("update", "Update user accounts."),
            ("delete", "Delete user accounts."),
            ("manage_roles", "Assign or revoke user roles."),
            ("view_sensitive", "View sensitive user data."),
            ("export", "Export user lists."),
            ("bulk_operations", "Run bulk user operations."),
        ),
    ),
    # Restaurants ---------------------------------------------------------
    *_module(
        "restaurants",
        (
            ("view", "View restaurants within reach."),
            ("view_all", "View every restaurant."),
            ("view_own", "View restaurants the actor owns."),
            ("view_licensed", "View restaurants licensed by the actor."),
            ("create", "Create restaurants."),
            ("update", "Update restaurants."),
            ("update_own", "Update restaurants the actor owns."),
            ("delete", "Delete restaurants."),
            ("manage_ownership", "Transfer restaurant ownership."),
            ("view_analytics", "View restaurant analytics."),
            ("export", "Export restaurant lists."),
            ("bulk_operations", "Run bulk restaurant operations."),
        ),
    ),
    # Licenses ------------------------------------------------------------
    *_module(
        "licenses",
        (
            ("view", "View licenses within reach."),
            ("view_all", "View every license."),
            ("view_own", "View licenses the actor holds or sold."),
            ("create", "Create licenses."),
            ("update", "Update licenses."),
            ("delete", "Delete licenses."),
            ("extend", "Extend license periods."),
            ("activate", "Activate licenses."),
            ("deactivate", "Deactivate licenses."),
            ("view_financials", "View license revenue."),
            ("manage_pricing", "Manage license package pricing."),
            ("export", "Export license lists."),
            ("bulk_operations", "Run bulk license operations."),
        ),
    ),
    # Dashboard -----------------------------------------------------------
    *_module(
        "dashboard",
        (
            ("view_basic", "View the basic dashboard."),
            ("view_advanced", "View advanced dashboard panels."),
            ("view_financials", "View dashboard financial panels."),
            ("view_user_stats", "View user statistics."),
            ("view_restaurant_stats", "View restaurant statistics."),
            ("view_license_stats", "View license statistics."),
            ("export", "Export dashboard data."),
        ),
    ),
    # Orders --------------------------------------------------------------
    *_module(
        "orders",
        (
            ("view", "View orders within reach."),
            ("view_all", "View every order."),
            ("view_own", "View orders of owned restaurants."),
            ("create", "Create orders."),
            ("update", "Update orders."),
            ("delete", "Delete orders."),
            ("manage_status", "Change order status."),
            ("view_financials", "View order totals and payments."),
            ("export", "Export orders."),
        ),
    ),
    # Menu ----------------------------------------------------------------
    *_module(
        "menu",
        (
            ("view", "View menus within reach."),
            ("view_all", "View every menu."),
            ("view_own", "View menus of owned restaurants."),
            ("create", "Create categories and products."),
            ("update", "Update categories and products."),
            ("delete", "Delete categories and products."),
            ("manage_pricing", "Change product prices."),
            ("export", "Export menus."),
            ("bulk_operations", "Run bulk menu operations."),
        ),
    ),
    # System --------------------------------------------------------------
    *_module(
        "system",
        (
            ("view_logs", "Read system logs."),
            ("manage_settings", "Change system settings."),
            ("manage_permissions", "Change permission assignments."),
            ("view_stats", "View system statistics."),
            ("manage_backup", "Manage backups."),
            ("manage_maintenance", "Toggle maintenance mode."),
        ),
    ),
    # Finance -------------------------------------------------------------
    *_module(
        "finance",
        (
            ("view_revenue", "View revenue figures."),
            ("view_all", "View all financial data."),
            ("view_own", "View the actor's own financial data."),
            ("manage_pricing", "Manage pricing."),
            ("view_reports", "View financial reports."),
            ("export", "Export financial data."),
        ),
    ),
)

PERMISSION_REGISTRY: Mapping[str, PermissionDef] = MappingProxyType(
    {definition.key: definition for definition in PERMISSIONS}
)
PERMISSION_KEYS: frozenset[str] = frozenset(PERMISSION_REGISTRY)
MODULES: tuple[str, ...] = tuple(dict.fromkeys(definition.module for definition in PERMISSIONS))


_OWNER_PERMISSIONS = frozenset(
    {
        "restaurants.view_own",
        "restaurants.update_own",
        "menu.view_own",
        "menu.create",
        "menu.update",
        "menu.delete",
        "menu.manage_pricing",
        "orders.view_own",
        "orders.update",
        "orders.manage_status",
        "orders.create",
        "finance.view_own",
        "licenses.view_own",
    }
)

_DEALER_PERMISSIONS = frozenset(
    {
        "users.view",
        "users.create",
        "users.update",
        "restaurants.view_licensed",
        "restaurants.update",
        "restaurants.view_analytics",
        "licenses.view_own",
        "licenses.create",
        "licenses.update",
        "licenses.extend",
        "licenses.activate",
        "licenses.deactivate",
        "orders.view",
        "orders.view_financials",
        "orders.create",
        "menu.view",
        "menu.update",
        "finance.view_own",
        "finance.view_reports",
    }
)

ROLE_PERMISSIONS: Mapping[Role, frozenset[str]] = MappingProxyType(
    {
        Role.MANAGER: PERMISSION_KEYS,
        Role.OWNER: _OWNER_PERMISSIONS,
        Role.DEALER: _DEALER_PERMISSIONS,
    }
)

# Lower number means higher privilege.
ROLE_LEVELS: Mapping[Role, int] = MappingProxyType(
    {
        Role.MANAGER: 0,
        Role.DEALER: 1,
        Role.OWNER: 2,
    }
)
UNKNOWN_ROLE_LEVEL = 999

_ROLE_BY_NAME: Mapping[str, Role] = MappingProxyType({role.value: role for role in Role})


def parse_role(name: object) -> Role | None:
    """Return the :class:`Role` named by ``name`` or ``None`` when unknown.

    Matching is exact on the canonical role name; anything that is not a
    string resolves to ``None``.
    """

    if isinstance(name, Role):
        return name
    if not isinstance(name, str):
        return None
    return _ROLE_BY_NAME.get(name.strip())


def permissions_for_role(role: object) -> frozenset[str]:
    resolved = parse_role(role)
    if resolved is None:
        return frozenset()
    return ROLE_PERMISSIONS[resolved]


def role_has_permission(role: object, permission: str) -> bool:
    return permission in permissions_for_role(role)


def role_level(role: object) -> int:
    resolved = parse_role(role)
    if resolved is None:
        return UNKNOWN_ROLE_LEVEL
    return ROLE_LEVELS[resolved]


def module_permissions(module: str) -> tuple[str, ...]:
    """Return every permission key declared for ``module`` (case-insensitive)."""

    normalized = module.strip().lower()
    return tuple(definition.key for definition in PERMISSIONS if definition.module == normalized)


def all_permissions() -> tuple[str, ...]:
    return tuple(definition.key for definition in PERMISSIONS)


def all_roles() -> tuple[Role, ...]:
    return tuple(Role)


__all__ = [
    "MODULES",
    "PERMISSIONS",
    "PERMISSION_KEYS",
    "PERMISSION_REGISTRY",
    "ROLE_LEVELS",
    "ROLE_PERMISSIONS",
    "UNKNOWN_ROLE_LEVEL",
    "all_permissions",
    "all_roles",
    "module_permissions",
    "parse_role",
    "permissions_for_role",
    "role_has_permission",
    "role_level",
]
