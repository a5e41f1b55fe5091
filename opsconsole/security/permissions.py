"""Permission matrix: resource type x role -> action tokens. Immutable after construction. No FastAPI."""

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Union

from opsconsole.security.exceptions import PermissionConfigError
from opsconsole.security.roles import Role, parse_role


class ResourceType(str, Enum):
    USERS = "users"
    ASSETS = "assets"
    VENDORS = "vendors"
    ONBOARDING_TEMPLATES = "onboarding_templates"
    ONBOARDING_INSTANCES = "onboarding_instances"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    ASSIGN = "assign"
    ANY = "*"


class Scope(str, Enum):
    SELF = "self"
    OWN = "own"
    OWN_TASKS = "own-tasks"
    ASSIGNED = "assigned"
    TEAM = "team"


@dataclass(frozen=True)
class ActionToken:
    """An action, optionally narrowed by a scope. Action.ANY without scope is the wildcard."""

    action: Action
    scope: Optional[Scope] = None

    @classmethod
    def parse(cls, raw: str) -> "ActionToken":
        """Build a token from its config form: 'read', 'read:self' or '*'."""
        text = raw.strip()
        action_part, sep, scope_part = text.partition(":")
        try:
            action = Action(action_part)
            scope = Scope(scope_part) if sep else None
        except ValueError as e:
            raise PermissionConfigError(f"Invalid action token '{raw}'") from e
        if action is Action.ANY and scope is not None:
            raise PermissionConfigError(f"Wildcard token cannot carry a scope: '{raw}'")
        return cls(action=action, scope=scope)

    def __str__(self) -> str:
        if self.scope is None:
            return self.action.value
        return f"{self.action.value}:{self.scope.value}"


WILDCARD = ActionToken(Action.ANY)


class GrantKind(str, Enum):
    NONE = "none"
    FULL = "full"
    SCOPED = "scoped"


@dataclass(frozen=True)
class Grant:
    """Result of a matrix lookup."""

    kind: GrantKind
    scope: Optional[Scope] = None

    @classmethod
    def none(cls) -> "Grant":
        return cls(GrantKind.NONE)

    @classmethod
    def full(cls) -> "Grant":
        return cls(GrantKind.FULL)

    @classmethod
    def scoped(cls, scope: Scope) -> "Grant":
        return cls(GrantKind.SCOPED, scope)

    @property
    def allowed(self) -> bool:
        return self.kind is not GrantKind.NONE


def _parse_enum(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


class PermissionMatrix:
    """
    Read-only mapping (resource type, role) -> frozenset of ActionTokens.
    Built once at startup and injected; lookups never raise.
    """

    def __init__(
        self,
        entries: Mapping[tuple[ResourceType, Role], Iterable[ActionToken]],
    ) -> None:
        self._entries: Mapping[tuple[ResourceType, Role], FrozenSet[ActionToken]] = MappingProxyType(
            {key: frozenset(tokens) for key, tokens in entries.items()}
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Mapping[str, Iterable[str]]]) -> "PermissionMatrix":
        """Build from {resource: {role: ["create", "read:self", ...]}}. Raises PermissionConfigError."""
        entries: dict[tuple[ResourceType, Role], list[ActionToken]] = {}
        for resource_name, roles in config.items():
            resource_type = _parse_enum(ResourceType, resource_name)
            if resource_type is None:
                raise PermissionConfigError(f"Unknown resource type '{resource_name}'")
            for role_name, tokens in roles.items():
                role = parse_role(role_name)
                if role is None:
                    raise PermissionConfigError(f"Unknown role '{role_name}' for '{resource_name}'")
                if isinstance(tokens, str):
                    raise PermissionConfigError(
                        f"Tokens for {resource_name}/{role_name} must be a list, not a string"
                    )
                entries[(resource_type, role)] = [ActionToken.parse(t) for t in tokens]
        return cls(entries)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "PermissionMatrix":
        try:
            config = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PermissionConfigError(f"Cannot load permission table from {path}: {e}") from e
        if not isinstance(config, dict):
            raise PermissionConfigError("Permission table must be a JSON object")
        return cls.from_config(config)

    def tokens(self, resource_type: Any, role: Any) -> FrozenSet[ActionToken]:
        key = (_parse_enum(ResourceType, resource_type), parse_role(role))
        return self._entries.get(key, frozenset())

    def permitted_scopes(self, resource_type: Any, role: Any, action: Any) -> Grant:
        """
        Exact action or wildcard -> Full; 'action:scope' -> Scoped(scope); otherwise None.
        Unknown resource types, roles or actions resolve to None.
        """
        parsed_action = _parse_enum(Action, action)
        if parsed_action is None or parsed_action is Action.ANY:
            return Grant.none()
        tokens = self.tokens(resource_type, role)
        if ActionToken(parsed_action) in tokens or WILDCARD in tokens:
            return Grant.full()
        scoped = sorted(
            (t.scope for t in tokens if t.action is parsed_action and t.scope is not None),
            key=lambda s: s.value,
        )
        if scoped:
            return Grant.scoped(scoped[0])
        return Grant.none()

    def roles_with(self, resource_type: Any, action: Any) -> list[str]:
        """Roles holding any grant (full or scoped) for the action, highest first."""
        return [
            role.value
            for role in (Role.ADMIN, Role.MANAGER, Role.EMPLOYEE)
            if self.permitted_scopes(resource_type, role, action).allowed
        ]

    def to_config(self) -> dict[str, dict[str, list[str]]]:
        out: dict[str, dict[str, list[str]]] = {}
        for (resource_type, role), tokens in self._entries.items():
            out.setdefault(resource_type.value, {})[role.value] = sorted(str(t) for t in tokens)
        return out


# Permission matrix:
# resource               admin                          manager                            employee
# users                  create,read,update,delete      read                               read:self, update:self
# assets                 create,read,update,delete,     create,read,update,delete,         read:assigned
#                        assign                         assign:team
# vendors                create,read,update,delete      read                               -
# onboarding_templates   create,read,update,delete      read                               read:own
# onboarding_instances   create,read,update,delete      create,read:team,update:team       read:own, update:own-tasks

DEFAULT_PERMISSIONS: dict[str, dict[str, list[str]]] = {
    "users": {
        "admin": ["create", "read", "update", "delete"],
        "manager": ["read"],
        "employee": ["read:self", "update:self"],
    },
    "assets": {
        "admin": ["create", "read", "update", "delete", "assign"],
        "manager": ["create", "read", "update", "delete", "assign:team"],
        "employee": ["read:assigned"],
    },
    "vendors": {
        "admin": ["create", "read", "update", "delete"],
        "manager": ["read"],
        "employee": [],
    },
    "onboarding_templates": {
        "admin": ["create", "read", "update", "delete"],
        "manager": ["read"],
        "employee": ["read:own"],
    },
    "onboarding_instances": {
        "admin": ["create", "read", "update", "delete"],
        "manager": ["create", "read:team", "update:team"],
        "employee": ["read:own", "update:own-tasks"],
    },
}

DEFAULT_MATRIX = PermissionMatrix.from_config(DEFAULT_PERMISSIONS)
