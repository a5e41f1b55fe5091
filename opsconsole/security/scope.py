"""Resource scope resolver: scope token -> single-record check or list predicate. No FastAPI."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Protocol

from opsconsole.security.permissions import ResourceType, Scope
from opsconsole.security.predicates import (
    FieldEquals,
    FieldIsNull,
    MatchNone,
    Predicate,
    all_of,
    any_of,
    field_in,
)
from opsconsole.security.principal import Principal


@dataclass(frozen=True)
class ResourceBinding:
    """Names of the relation fields a resource type exposes to scope checks."""

    owner_field: Optional[str] = None
    assignee_field: Optional[str] = None
    own_field: Optional[str] = None
    allow_self: bool = False


DEFAULT_BINDINGS: Mapping[ResourceType, ResourceBinding] = MappingProxyType(
    {
        ResourceType.USERS: ResourceBinding(owner_field="id", own_field="id"),
        ResourceType.ASSETS: ResourceBinding(
            owner_field="created_by",
            assignee_field="assigned_to",
            own_field="created_by",
            allow_self=True,
        ),
        ResourceType.VENDORS: ResourceBinding(owner_field="created_by", own_field="created_by"),
        ResourceType.ONBOARDING_TEMPLATES: ResourceBinding(
            owner_field="created_by", own_field="created_by"
        ),
        ResourceType.ONBOARDING_INSTANCES: ResourceBinding(
            assignee_field="employee", own_field="employee"
        ),
    }
)


class TeamDirectory(Protocol):
    """Department lookups needed by the team scope."""

    def department_of(self, principal_id: str) -> Optional[str]:
        """Department of a principal, or None when unknown or unset."""
        ...

    def member_ids(self, department: str) -> FrozenSet[str]:
        """Ids of active principals in the department."""
        ...


class DirectorySnapshot:
    """In-memory TeamDirectory over principals loaded for a single request."""

    def __init__(self, principals: Iterable[Principal]) -> None:
        self._by_id = {p.id: p for p in principals}

    def department_of(self, principal_id: str) -> Optional[str]:
        principal = self._by_id.get(principal_id)
        if principal is None or not principal.is_active:
            return None
        return principal.department

    def member_ids(self, department: str) -> FrozenSet[str]:
        return frozenset(
            p.id for p in self._by_id.values() if p.is_active and p.department == department
        )


def _relation(record: Mapping[str, Any], field: Optional[str]) -> Optional[Any]:
    if field is None:
        return None
    return record.get(field)


class ScopeResolver:
    """Translates scope tokens against relation bindings. Fails closed on anything unresolvable."""

    def __init__(self, bindings: Mapping[ResourceType, ResourceBinding] = DEFAULT_BINDINGS) -> None:
        self._bindings = MappingProxyType(dict(bindings))

    def binding(self, resource_type: ResourceType) -> Optional[ResourceBinding]:
        return self._bindings.get(resource_type)

    def team_anchor(self, resource_type: ResourceType, record: Mapping[str, Any]) -> Optional[str]:
        """Principal id whose department decides team membership: the assignee, else the owner."""
        binding = self.binding(resource_type)
        if binding is None:
            return None
        assignee = _relation(record, binding.assignee_field)
        if assignee:
            return assignee
        return _relation(record, binding.owner_field) or None

    def authorize_single(
        self,
        scope: Scope,
        principal: Principal,
        resource_type: ResourceType,
        record: Mapping[str, Any],
        directory: Optional[TeamDirectory] = None,
    ) -> bool:
        binding = self.binding(resource_type)
        if binding is None or not principal.id:
            return False

        if scope is Scope.SELF:
            if _relation(record, binding.owner_field) == principal.id:
                return True
            return binding.allow_self and _relation(record, binding.assignee_field) == principal.id

        if scope in (Scope.OWN, Scope.OWN_TASKS):
            return _relation(record, binding.own_field) == principal.id

        if scope is Scope.ASSIGNED:
            return _relation(record, binding.assignee_field) == principal.id

        if scope is Scope.TEAM:
            if not principal.department or directory is None:
                return False
            anchor = self.team_anchor(resource_type, record)
            if anchor is None:
                return False
            return directory.department_of(anchor) == principal.department

        return False

    def resolve_scope(
        self,
        scope: Scope,
        principal: Principal,
        resource_type: ResourceType,
        directory: Optional[TeamDirectory] = None,
    ) -> Predicate:
        binding = self.binding(resource_type)
        if binding is None or not principal.id:
            return MatchNone()

        if scope is Scope.SELF:
            owner = FieldEquals(binding.owner_field, principal.id) if binding.owner_field else MatchNone()
            if binding.allow_self and binding.assignee_field:
                return any_of(owner, FieldEquals(binding.assignee_field, principal.id))
            return owner

        if scope in (Scope.OWN, Scope.OWN_TASKS):
            if binding.own_field is None:
                return MatchNone()
            return FieldEquals(binding.own_field, principal.id)

        if scope is Scope.ASSIGNED:
            if binding.assignee_field is None:
                return MatchNone()
            return FieldEquals(binding.assignee_field, principal.id)

        if scope is Scope.TEAM:
            if not principal.department or directory is None:
                return MatchNone()
            members = directory.member_ids(principal.department)
            if binding.assignee_field and binding.owner_field:
                return any_of(
                    field_in(binding.assignee_field, members),
                    all_of(FieldIsNull(binding.assignee_field), field_in(binding.owner_field, members)),
                )
            if binding.assignee_field:
                return field_in(binding.assignee_field, members)
            if binding.owner_field:
                return field_in(binding.owner_field, members)
            return MatchNone()

        return MatchNone()
