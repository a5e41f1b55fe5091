"""Security-layer exceptions. Typed, no HTTP."""

from typing import Optional


class SecurityError(Exception):
    """Base for all security-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotAuthenticatedError(SecurityError):
    """Raised when there is no principal, or the principal is deactivated."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class AccessDeniedError(SecurityError):
    """Base for denials that carry the resource, action and role context of the decision."""

    reason = "denied"

    def __init__(
        self,
        message: str,
        *,
        resource_type: str,
        action: str,
        current: str,
        required: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message)
        self.resource_type = resource_type
        self.action = action
        self.current = current
        self.required = required or []

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "reason": self.reason,
            "resource": self.resource_type,
            "action": self.action,
            "required": self.required,
            "current": self.current,
        }


class ForbiddenError(AccessDeniedError):
    """Raised when the role has no grant at all for the action on the resource type."""

    reason = "forbidden"


class ScopeDeniedError(AccessDeniedError):
    """Raised when the role holds a scoped grant but the target falls outside the scope."""

    reason = "out_of_scope"


class LastAdminViolationError(SecurityError):
    """Raised when a change would leave the organization without an active admin."""

    def __init__(self, message: str = "Cannot demote the last active admin") -> None:
        super().__init__(message)


class SelfRoleChangeDeniedError(SecurityError):
    """Raised when a principal tries to change its own role."""

    def __init__(self, message: str = "Cannot change your own role") -> None:
        super().__init__(message)


class SelfDeactivationDeniedError(SecurityError):
    """Raised when a principal tries to deactivate itself."""

    def __init__(self, message: str = "Cannot deactivate yourself") -> None:
        super().__init__(message)


class PermissionConfigError(SecurityError):
    """Raised when a permission table cannot be built from configuration."""
