"""Access decision gate: principal x resource type x action -> decision or row filter. No FastAPI."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

from opsconsole.security.exceptions import (
    ForbiddenError,
    NotAuthenticatedError,
    ScopeDeniedError,
)
from opsconsole.security.permissions import (
    DEFAULT_MATRIX,
    Action,
    Grant,
    GrantKind,
    PermissionMatrix,
    ResourceType,
    Scope,
)
from opsconsole.security.predicates import MatchAll, Predicate, all_of
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role
from opsconsole.security.scope import ScopeResolver, TeamDirectory

REASON_NOT_AUTHENTICATED = "not_authenticated"
REASON_FORBIDDEN = "forbidden"
REASON_OUT_OF_SCOPE = "out_of_scope"


# Full grants narrowed to a scope at the handler level. The matrix still reports Full for these;
# only the gate's effective grant changes.
DEFAULT_CONFINEMENTS: Mapping[tuple[ResourceType, Role, Action], Scope] = MappingProxyType(
    {
        (ResourceType.ASSETS, Role.MANAGER, Action.READ): Scope.TEAM,
        (ResourceType.ASSETS, Role.MANAGER, Action.UPDATE): Scope.TEAM,
        (ResourceType.ASSETS, Role.MANAGER, Action.DELETE): Scope.TEAM,
        (ResourceType.USERS, Role.MANAGER, Action.READ): Scope.TEAM,
    }
)


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    resource_type: ResourceType
    action: Action
    scope: Optional[Scope] = None
    reason: Optional[str] = None


class AccessGate:
    """
    Composes the permission matrix and the scope resolver.
    Pure: same inputs, same decision. Never mutates its tables.
    """

    def __init__(
        self,
        matrix: PermissionMatrix = DEFAULT_MATRIX,
        resolver: Optional[ScopeResolver] = None,
        confinements: Mapping[tuple[ResourceType, Role, Action], Scope] = DEFAULT_CONFINEMENTS,
    ) -> None:
        self._matrix = matrix
        self._resolver = resolver or ScopeResolver()
        self._confinements = MappingProxyType(dict(confinements))

    @property
    def matrix(self) -> PermissionMatrix:
        return self._matrix

    @property
    def resolver(self) -> ScopeResolver:
        return self._resolver

    def effective_grant(self, principal: Principal, resource_type: ResourceType, action: Action) -> Grant:
        """Matrix grant for the principal's role, with confinements applied to Full grants."""
        grant = self._matrix.permitted_scopes(resource_type, principal.role, action)
        if grant.kind is GrantKind.FULL:
            confined = self._confinements.get((resource_type, principal.role, action))
            if confined is not None:
                return Grant.scoped(confined)
        return grant

    def decide(
        self,
        principal: Optional[Principal],
        resource_type: ResourceType,
        action: Action,
        target: Optional[Mapping[str, Any]] = None,
        directory: Optional[TeamDirectory] = None,
    ) -> AccessDecision:
        """
        Decision for one target record. With target=None only the type-level grant is checked,
        so a scoped grant is allowed (the caller must still filter or check the record).
        """
        if principal is None or not principal.is_active:
            return AccessDecision(False, resource_type, action, reason=REASON_NOT_AUTHENTICATED)

        grant = self.effective_grant(principal, resource_type, action)
        if grant.kind is GrantKind.NONE:
            return AccessDecision(False, resource_type, action, reason=REASON_FORBIDDEN)
        if grant.kind is GrantKind.FULL:
            return AccessDecision(True, resource_type, action)
        if target is None:
            return AccessDecision(True, resource_type, action, scope=grant.scope)
        if self._resolver.authorize_single(grant.scope, principal, resource_type, target, directory):
            return AccessDecision(True, resource_type, action, scope=grant.scope)
        return AccessDecision(False, resource_type, action, scope=grant.scope, reason=REASON_OUT_OF_SCOPE)

    def authorize(
        self,
        principal: Optional[Principal],
        resource_type: ResourceType,
        action: Action,
        target: Optional[Mapping[str, Any]] = None,
        directory: Optional[TeamDirectory] = None,
    ) -> AccessDecision:
        """Same as decide() but raises NotAuthenticatedError, ForbiddenError or ScopeDeniedError."""
        decision = self.decide(principal, resource_type, action, target, directory)
        if decision.allowed:
            return decision
        self._raise_for(decision, principal)
        return decision

    def list_filter(
        self,
        principal: Optional[Principal],
        resource_type: ResourceType,
        action: Action = Action.READ,
        directory: Optional[TeamDirectory] = None,
    ) -> Predicate:
        """Row filter for list queries. Raises when the role has no grant at all."""
        decision = self.decide(principal, resource_type, action)
        if not decision.allowed:
            self._raise_for(decision, principal)
        if decision.scope is None:
            return MatchAll()
        return self._resolver.resolve_scope(decision.scope, principal, resource_type, directory)

    @staticmethod
    def restrict(scope_filter: Predicate, query_filter: Optional[Predicate] = None) -> Predicate:
        """AND the scope filter with caller filters. Caller filters can only narrow."""
        if query_filter is None:
            return scope_filter
        return all_of(scope_filter, query_filter)

    def _raise_for(self, decision: AccessDecision, principal: Optional[Principal]) -> None:
        if decision.reason == REASON_NOT_AUTHENTICATED:
            raise NotAuthenticatedError()
        resource = decision.resource_type.value
        action = decision.action.value
        current = principal.role.value
        if decision.reason == REASON_FORBIDDEN:
            raise ForbiddenError(
                "Access denied. Insufficient permissions.",
                resource_type=resource,
                action=action,
                current=current,
                required=self._matrix.roles_with(decision.resource_type, decision.action),
            )
        raise ScopeDeniedError(
            f"Access denied. {resource} outside {action}:{decision.scope.value} scope.",
            resource_type=resource,
            action=action,
            current=current,
            required=[f"{action}:{decision.scope.value}"],
        )
