"""Last-admin guard: at least one active admin at all times, no self role changes. No FastAPI."""

from opsconsole.security.exceptions import (
    LastAdminViolationError,
    SecurityError,
    SelfDeactivationDeniedError,
    SelfRoleChangeDeniedError,
)
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role


class LastAdminGuard:
    """Checked before the gate's update check. Admin permissions do not bypass it."""

    def check_role_change(
        self,
        actor: Principal,
        target: Principal,
        new_role: Role,
        active_admin_count: int,
    ) -> None:
        """Raises SelfRoleChangeDeniedError or LastAdminViolationError."""
        if actor.id == target.id:
            raise SelfRoleChangeDeniedError()
        if target.role is Role.ADMIN and new_role is not Role.ADMIN:
            self._require_other_admin(active_admin_count)

    def can_change_role(
        self,
        actor: Principal,
        target: Principal,
        new_role: Role,
        active_admin_count: int,
    ) -> bool:
        try:
            self.check_role_change(actor, target, new_role, active_admin_count)
        except SecurityError:
            return False
        return True

    def check_deactivation(self, actor: Principal, target: Principal, active_admin_count: int) -> None:
        """Raises SelfDeactivationDeniedError or LastAdminViolationError."""
        if actor.id == target.id:
            raise SelfDeactivationDeniedError()
        if target.role is Role.ADMIN:
            self._require_other_admin(active_admin_count)

    @staticmethod
    def _require_other_admin(active_admin_count: int) -> None:
        # Inactive targets included; only active admins are counted.
        if active_admin_count <= 1:
            raise LastAdminViolationError()
