"""Access control orchestration: loads team directories, applies the gate, records denials."""

import logging
from typing import Any, Mapping, Optional

from opsconsole.application.repositories import UserRepository
from opsconsole.observability.metrics import MetricsCollector
from opsconsole.security.exceptions import AccessDeniedError, NotAuthenticatedError
from opsconsole.security.gate import AccessDecision, AccessGate
from opsconsole.security.permissions import Action, GrantKind, ResourceType, Scope
from opsconsole.security.predicates import Predicate
from opsconsole.security.principal import Principal
from opsconsole.security.scope import DirectorySnapshot

ACCESS_DECISIONS_METRIC = "access_decisions_total"


class AccessControl:
    """
    Wraps the pure AccessGate with the lookups it needs.
    Team scope is resolved in two steps: load the member set, then filter or compare.
    """

    def __init__(
        self,
        gate: AccessGate,
        users: UserRepository,
        metrics: Optional[MetricsCollector] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._gate = gate
        self._users = users
        self._metrics = metrics
        self._logger = logger or logging.getLogger(__name__)

    def check_type(
        self,
        principal: Optional[Principal],
        resource_type: ResourceType,
        action: Action,
    ) -> AccessDecision:
        """Type-level check only: raises NotAuthenticatedError or ForbiddenError, never ScopeDeniedError."""
        return self._guarded(
            lambda: self._gate.authorize(principal, resource_type, action),
            principal,
            resource_type,
            action,
        )

    async def authorize(
        self,
        principal: Optional[Principal],
        resource_type: ResourceType,
        action: Action,
        record: Mapping[str, Any],
    ) -> AccessDecision:
        """Full check against one loaded record."""
        directory = None
        if self._needs_team(principal, resource_type, action):
            anchor = self._gate.resolver.team_anchor(resource_type, record)
            members = await self._users.get_many([anchor]) if anchor else []
            directory = DirectorySnapshot(u.principal for u in members)
        decision = self._guarded(
            lambda: self._gate.authorize(principal, resource_type, action, record, directory),
            principal,
            resource_type,
            action,
        )
        self._count(resource_type, action, "allowed")
        return decision

    async def list_filter(
        self,
        principal: Optional[Principal],
        resource_type: ResourceType,
        query_filter: Optional[Predicate] = None,
        action: Action = Action.READ,
    ) -> Predicate:
        """Scope filter ANDed with the caller's query filter."""
        directory = None
        if self._needs_team(principal, resource_type, action) and principal.department:
            members = await self._users.list_department(principal.department)
            directory = DirectorySnapshot(u.principal for u in members)
        scope_filter = self._guarded(
            lambda: self._gate.list_filter(principal, resource_type, action, directory),
            principal,
            resource_type,
            action,
        )
        return self._gate.restrict(scope_filter, query_filter)

    def _needs_team(self, principal: Optional[Principal], resource_type: ResourceType, action: Action) -> bool:
        if principal is None or not principal.is_active:
            return False
        grant = self._gate.effective_grant(principal, resource_type, action)
        return grant.kind is GrantKind.SCOPED and grant.scope is Scope.TEAM

    def _guarded(self, check, principal, resource_type: ResourceType, action: Action):
        try:
            return check()
        except NotAuthenticatedError:
            self._count(resource_type, action, "unauthenticated")
            raise
        except AccessDeniedError as e:
            self._count(resource_type, action, e.reason)
            self._logger.warning(
                "access_denied",
                extra={
                    "principal_id": principal.id if principal else None,
                    "resource_type": resource_type.value,
                    "action": action.value,
                    "reason": e.reason,
                },
            )
            raise

    def _count(self, resource_type: ResourceType, action: Action, outcome: str) -> None:
        if self._metrics is None:
            return
        self._metrics.increment(
            ACCESS_DECISIONS_METRIC,
            labels={"resource": resource_type.value, "action": action.value, "outcome": outcome},
        )

    def full_grant_roles(self, resource_type: ResourceType, action: Action) -> list[str]:
        """Roles whose grant for the action is unscoped."""
        return [
            role
            for role in self._gate.matrix.roles_with(resource_type, action)
            if self._gate.matrix.permitted_scopes(resource_type, role, action).kind is GrantKind.FULL
        ]
