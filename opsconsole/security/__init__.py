"""Security: role hierarchy, permission matrix, scope resolution, access gate, last-admin guard. No FastAPI."""

from opsconsole.security.gate import AccessDecision, AccessGate
from opsconsole.security.last_admin import LastAdminGuard
from opsconsole.security.permissions import (
    DEFAULT_MATRIX,
    Action,
    ActionToken,
    Grant,
    GrantKind,
    PermissionMatrix,
    ResourceType,
    Scope,
)
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role, at_least, rank
from opsconsole.security.scope import DirectorySnapshot, ScopeResolver

__all__ = [
    "AccessDecision",
    "AccessGate",
    "Action",
    "ActionToken",
    "DEFAULT_MATRIX",
    "DirectorySnapshot",
    "Grant",
    "GrantKind",
    "LastAdminGuard",
    "PermissionMatrix",
    "Principal",
    "ResourceType",
    "Role",
    "Scope",
    "ScopeResolver",
    "at_least",
    "rank",
]
