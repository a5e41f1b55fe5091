"""Repository protocols. Application layer depends on these; infrastructure implements them."""

from typing import Dict, Iterable, List, Optional, Protocol, Tuple, TypeVar

from opsconsole.domain.models import Asset, OnboardingInstance, OnboardingTemplate, User, Vendor
from opsconsole.security.predicates import Predicate
from opsconsole.security.roles import Role

T = TypeVar("T")


class EntityRepository(Protocol[T]):
    """Common persistence operations. Filters are storage-agnostic predicates."""

    async def get(self, entity_id: str) -> Optional[T]:
        """Return the entity or None."""
        ...

    async def page(self, predicate: Predicate, skip: int, limit: int) -> Tuple[List[T], int]:
        """Return one page of matching entities and the total match count."""
        ...

    async def find(self, predicate: Predicate) -> List[T]:
        """Return every matching entity."""
        ...

    async def count(self, predicate: Predicate) -> int:
        ...

    async def count_by(self, field: str, predicate: Predicate) -> Dict[str, int]:
        """Match counts grouped by a column value."""
        ...

    async def add(self, entity: T) -> T:
        ...

    async def save(self, entity: T) -> T:
        ...


class UserRepository(EntityRepository[User], Protocol):
    async def get_by_email(self, email: str) -> Optional[User]:
        ...

    async def get_many(self, user_ids: Iterable[str]) -> List[User]:
        """Users with the given ids, active or not."""
        ...

    async def list_department(self, department: str) -> List[User]:
        """Active users of a department."""
        ...

    async def count_active_admins(self) -> int:
        ...

    async def change_role(self, user_id: str, new_role: Role, *, keep_one_admin: bool) -> bool:
        """
        Set the role in one conditional write. With keep_one_admin the write only applies while
        more than one active admin exists. Returns False when nothing was written.
        """
        ...

    async def deactivate(self, user_id: str, *, keep_one_admin: bool) -> bool:
        """Soft delete under the same condition as change_role."""
        ...


class AssetRepository(EntityRepository[Asset], Protocol):
    async def sum_current_value(self, predicate: Predicate) -> float:
        ...


class VendorRepository(EntityRepository[Vendor], Protocol):
    pass


class TemplateRepository(EntityRepository[OnboardingTemplate], Protocol):
    async def delete(self, template_id: str) -> None:
        ...


class InstanceRepository(EntityRepository[OnboardingInstance], Protocol):
    pass
