"""Shared CRUD for the ORM models."""

from typing import Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from narrator.db.models import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """CRUD helpers; callers own the transaction (flush here, commit above)."""

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        self.session = session
        self.model = model

    async def get_by_id(self, id: int | UUID) -> Optional[ModelType]:
        return await self.session.get(self.model, id)

    async def create(self, **fields) -> ModelType:
        """Insert a row and return it with server defaults loaded."""
        instance = self.model(**fields)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, id: int | UUID, **fields) -> Optional[ModelType]:
        """Set mapped columns on a row; returns None if the row is gone."""
        instance = await self.get_by_id(id)
        if instance is None:
            return None

        columns = self.model.__table__.columns.keys()
        for key, value in fields.items():
            if key not in columns:
                raise AttributeError(f"{self.model.__name__} has no column {key}")
            setattr(instance, key, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: int | UUID) -> bool:
        """Delete through the ORM so relationship cascades apply."""
        instance = await self.get_by_id(id)
        if instance is None:
            return False
        await self.session.delete(instance)
        await self.session.flush()
        return True

    async def count(self, *criteria) -> int:
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await self.session.execute(stmt)
        return result.scalar() or 0
