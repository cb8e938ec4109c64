"""Typed building blocks for the RBAC registry and evaluator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Closed set of system roles."""

    MANAGER = "Manager"
    OWNER = "Owner"
    DEALER = "Dealer"


class DecisionOutcome(str, Enum):
    """Tri-state result of an authorization evaluation."""

    ALLOW = "allow"
    DENY = "deny"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True, slots=True)
class PermissionDef:
    """Describes one permission entry in the registry."""

    key: str
    module: str
    description: str


@dataclass(frozen=True, slots=True)
class ActorRoles:
    """Role data resolved for one actor by the identity collaborator.

    ``legacy_role`` carries the single-role column kept for accounts created
    before multi-role assignments existed.
    """

    active: bool
    roles: tuple[str, ...] = ()
    legacy_role: str | None = None


__all__ = ["ActorRoles", "DecisionOutcome", "PermissionDef", "Role"]
