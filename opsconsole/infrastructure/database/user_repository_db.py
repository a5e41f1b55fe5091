"""DB-backed user repository. Role and activation writes are conditional on the admin count."""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import aliased

from opsconsole.domain.models.user import User
from opsconsole.infrastructure.database.models import UserRow
from opsconsole.infrastructure.database.repository import SqlRepository, utc
from opsconsole.security.roles import Role, parse_role


class DbUserRepository(SqlRepository[User]):
    """Implements UserRepository protocol."""

    model = UserRow

    def _to_domain(self, row: UserRow) -> User:
        return User(
            id=row.id,
            email=row.email,
            name=row.name,
            role=parse_role(row.role),
            department=row.department,
            is_active=row.is_active,
            avatar=row.avatar,
            created_at=utc(row.created_at),
            updated_at=utc(row.updated_at),
        )

    def _to_values(self, user: User) -> Dict[str, Any]:
        return {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role.value,
            "department": user.department,
            "is_active": user.is_active,
            "avatar": user.avatar,
            "created_at": user.created_at,
            "updated_at": user.updated_at,
        }

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(UserRow).where(UserRow.email == email.lower())
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    async def get_many(self, user_ids: Iterable[str]) -> List[User]:
        ids = [i for i in user_ids if i]
        if not ids:
            return []
        result = await self._session.execute(select(UserRow).where(UserRow.id.in_(ids)))
        return [self._to_domain(r) for r in result.scalars().all()]

    async def list_department(self, department: str) -> List[User]:
        stmt = select(UserRow).where(
            UserRow.department == department,
            UserRow.is_active == True,  # noqa: E712
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(r) for r in result.scalars().all()]

    async def count_active_admins(self) -> int:
        result = await self._session.execute(self._active_admin_count())
        return int(result.scalar_one())

    async def change_role(self, user_id: str, new_role: Role, *, keep_one_admin: bool) -> bool:
        return await self._conditional_update(user_id, {"role": new_role.value}, keep_one_admin)

    async def deactivate(self, user_id: str, *, keep_one_admin: bool) -> bool:
        return await self._conditional_update(user_id, {"is_active": False}, keep_one_admin)

    def _active_admin_count(self):
        # Aliased so the count is never correlated with an enclosing UPDATE.
        admins = aliased(UserRow)
        return (
            select(func.count())
            .select_from(admins)
            .where(admins.role == Role.ADMIN.value, admins.is_active == True)  # noqa: E712
        )

    async def _conditional_update(self, user_id: str, values: Dict[str, Any], keep_one_admin: bool) -> bool:
        # Admin count and write must stay one statement.
        stmt = update(UserRow).where(UserRow.id == user_id)
        if keep_one_admin:
            stmt = stmt.where(self._active_admin_count().scalar_subquery() > 1)
        stmt = stmt.values(**values, updated_at=func.now()).execution_options(synchronize_session=False)
        result = await self._session.execute(stmt)
        await self._session.commit()
        self._session.expire_all()
        return result.rowcount > 0
