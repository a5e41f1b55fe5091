# opsconsole/infrastructure/database/repository.py

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from opsconsole.domain.models.common import aware
from opsconsole.infrastructure.database.filters import to_clause
from opsconsole.security.predicates import Predicate

T = TypeVar("T")

# Group key reported for rows whose grouped column is NULL.
UNSET_GROUP = "unassigned"


def utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything is stored as UTC."""
    return aware(value) if value is not None else None


class SqlRepository(Generic[T]):
    """
    Async repository over one ORM row class. Subclasses map rows to domain entities
    via _to_domain and entities to column values via _to_values.
    """

    model: Type[Any]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _to_domain(self, row: Any) -> T:
        raise NotImplementedError

    def _to_values(self, entity: T) -> Dict[str, Any]:
        raise NotImplementedError

    async def get(self, entity_id: str) -> Optional[T]:
        row = await self._session.get(self.model, entity_id)
        return self._to_domain(row) if row is not None else None

    async def page(self, predicate: Predicate, skip: int, limit: int) -> Tuple[List[T], int]:
        clause = to_clause(predicate, self.model)
        stmt = (
            select(self.model)
            .where(clause)
            .order_by(self.model.created_at.desc(), self.model.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        rows = result.scalars().all()
        return [self._to_domain(r) for r in rows], await self.count(predicate)

    async def find(self, predicate: Predicate) -> List[T]:
        stmt = select(self.model).where(to_clause(predicate, self.model))
        result = await self._session.execute(stmt)
        return [self._to_domain(r) for r in result.scalars().all()]

    async def count(self, predicate: Predicate) -> int:
        stmt = select(func.count()).select_from(self.model).where(to_clause(predicate, self.model))
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def count_by(self, field: str, predicate: Predicate) -> Dict[str, int]:
        column = getattr(self.model, field)
        stmt = (
            select(column, func.count())
            .where(to_clause(predicate, self.model))
            .group_by(column)
        )
        result = await self._session.execute(stmt)
        return {
            (str(key) if key is not None else UNSET_GROUP): int(total)
            for key, total in result.all()
        }

    async def add(self, entity: T) -> T:
        values = {k: v for k, v in self._to_values(entity).items() if v is not None or k != "created_at"}
        row = self.model(**values)
        self._session.add(row)
        await self._session.flush()
        await self._session.commit()
        await self._session.refresh(row)
        return self._to_domain(row)

    async def save(self, entity: T) -> T:
        row = await self._session.get(self.model, getattr(entity, "id"))
        if row is None:
            raise LookupError(f"{self.model.__name__} {getattr(entity, 'id')} does not exist")
        for name, value in self._to_values(entity).items():
            if name in ("id", "created_at"):
                continue
            setattr(row, name, value)
        await self._session.commit()
        await self._session.refresh(row)
        return self._to_domain(row)
