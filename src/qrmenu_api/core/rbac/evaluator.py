"""Permission evaluation for authenticated actors."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from uuid import UUID

from qrmenu_api.common.logging import log_context

from ..auth.errors import IdentityUnavailableError
from ..auth.principal import AuthenticatedPrincipal
from .registry import PERMISSION_KEYS, parse_role, role_has_permission
from .types import ActorRoles, DecisionOutcome, Role

logger = logging.getLogger(__name__)


@runtime_checkable
class RoleResolver(Protocol):
    """Identity collaborator that resolves an actor's role data.

    Returns ``None`` when the actor is unknown. Implementations signal an
    unreachable store by raising :class:`IdentityUnavailableError`.
    """

    def resolve_roles(self, user_id: UUID) -> ActorRoles | None: ...


@dataclass(frozen=True, slots=True)
class AuthorizationDecision:
    """Result of an authorization evaluation."""

    outcome: DecisionOutcome
    permission: str
    matched_role: Role | None = None
    reason: str = ""

    @property
    def is_allowed(self) -> bool:
        return self.outcome is DecisionOutcome.ALLOW

    @property
    def is_denied(self) -> bool:
        return self.outcome is DecisionOutcome.DENY

    @property
    def is_indeterminate(self) -> bool:
        return self.outcome is DecisionOutcome.INDETERMINATE


def candidate_roles(actor: ActorRoles) -> Iterator[Role]:
    """Yield the actor's known roles in evaluation order.

    Primary roles come first in the order the resolver returned them. The
    legacy single-role field follows as one extra candidate unless it repeats
    a primary role. Unknown role names are skipped.
    """

    seen: set[Role] = set()
    for name in actor.roles:
        role = parse_role(name)
        if role is None or role in seen:
            continue
        seen.add(role)
        yield role

    legacy = parse_role(actor.legacy_role)
    if legacy is not None and legacy not in seen:
        yield legacy


class AuthorizationEvaluator:
    """Decide whether an actor may exercise a permission.

    The evaluator never raises for business reasons: missing or malformed
    identities degrade to ``INDETERMINATE`` and insufficient grants to
    ``DENY``. Only an unreachable identity store escapes, as
    :class:`IdentityUnavailableError`.
    """

    def __init__(self, resolver: RoleResolver) -> None:
        self._resolver = resolver

    def evaluate(
        self,
        principal: AuthenticatedPrincipal | None,
        permission: str,
    ) -> AuthorizationDecision:
        if principal is None or not isinstance(principal.user_id, UUID):
            return self._decide(
                DecisionOutcome.INDETERMINATE,
                permission,
                reason="no verifiable identity",
            )

        actor = self._resolve(principal.user_id)
        if actor is None:
            return self._decide(
                DecisionOutcome.INDETERMINATE,
                permission,
                principal=principal,
                reason="unknown actor",
            )
        if not isinstance(actor, ActorRoles):
            logger.warning(
                "rbac.resolver.malformed",
                extra=log_context(
                    user_id=principal.user_id,
                    payload_type=type(actor).__name__,
                ),
            )
            return self._decide(
                DecisionOutcome.INDETERMINATE,
                permission,
                principal=principal,
                reason="malformed role data",
            )
        if actor.active is not True:
            return self._decide(
                DecisionOutcome.DENY,
                permission,
                principal=principal,
                reason="actor inactive",
            )

        if permission in PERMISSION_KEYS:
            for role in candidate_roles(actor):
                if role_has_permission(role, permission):
                    return self._decide(
                        DecisionOutcome.ALLOW,
                        permission,
                        principal=principal,
                        matched_role=role,
                        reason="granted",
                    )

        return self._decide(
            DecisionOutcome.DENY,
            permission,
            principal=principal,
            reason="permission not granted",
        )

    def _resolve(self, user_id: UUID) -> ActorRoles | None:
        try:
            return self._resolver.resolve_roles(user_id)
        except IdentityUnavailableError:
            raise
        except Exception as exc:
            raise IdentityUnavailableError("Identity store lookup failed.") from exc

    @staticmethod
    def _decide(
        outcome: DecisionOutcome,
        permission: str,
        *,
        principal: AuthenticatedPrincipal | None = None,
        matched_role: Role | None = None,
        reason: str,
    ) -> AuthorizationDecision:
        logger.debug(
            "rbac.decision",
            extra=log_context(
                user_id=principal.user_id if principal is not None else None,
                permission=permission,
                outcome=outcome.value,
                matched_role=matched_role.value if matched_role is not None else None,
                reason=reason,
            ),
        )
        return AuthorizationDecision(
            outcome=outcome,
            permission=permission,
            matched_role=matched_role,
            reason=reason,
        )


__all__ = [
    "AuthorizationDecision",
    "AuthorizationEvaluator",
    "RoleResolver",
    "candidate_roles",
]
