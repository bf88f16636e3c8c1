"""
Generic async repository.

Repositories flush but never commit; the request-scoped session from
get_db_session() owns the transaction.
"""
from typing import Any, Generic, TypeVar

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Primary-key lookup and write helpers shared by model repositories."""

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: str) -> ModelType | None:
        return await self.session.get(self.model, id)

    async def create(self, values: dict[str, Any]) -> ModelType:
        """Insert a row built from ``values`` and return it with defaults loaded."""
        instance = self.model(**values)
        self.session.add(instance)
        return await self.save(instance)

    async def save(self, instance: ModelType) -> ModelType:
        """Write pending changes on ``instance`` and reload it."""
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def _all(self, stmt: Select) -> list[ModelType]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _scalar(self, stmt: Select, default: Any = None) -> Any:
        result = await self.session.execute(stmt)
        value = result.scalar()
        return default if value is None else value
