# movie_api/db/crud/base.py
from __future__ import annotations

from typing import Any, Dict, Generic, List, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from movie_api.core.errors import Conflict, NotFound, StoreError
from movie_api.db.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """
    Generic CRUD over one ORM model.

    Entity repositories embed an instance of this class and add their own
    queries next to it. Constraint violations surface as ``Conflict`` (so a
    check-then-write race ends up the same as a failed pre-check), other
    database failures as ``StoreError``.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelT], *, label: str | None = None):
        self.session = session
        self.model = model
        self.label = label or model.__name__

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise Conflict(f"{self.label} already exists") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"Error saving {self.label}") from e

    async def create(self, data: Dict[str, Any]) -> ModelT:
        obj = self.model(**data)
        self.session.add(obj)
        await self._commit()
        await self.session.refresh(obj)
        return obj

    async def read(self, id: int) -> ModelT:
        try:
            obj = await self.session.get(self.model, id)
        except SQLAlchemyError as e:
            raise StoreError(f"Error getting {self.label} by id") from e
        if obj is None:
            raise NotFound(f"{self.label} not found")
        return obj

    async def update(self, id: int, patch: Dict[str, Any]) -> ModelT:
        obj = await self.read(id)
        for key, value in patch.items():
            if hasattr(self.model, key):
                setattr(obj, key, value)
        await self._commit()
        await self.session.refresh(obj)
        return obj

    async def delete(self, id: int) -> ModelT:
        obj = await self.read(id)
        await self.session.delete(obj)
        await self._commit()
        return obj

    async def list(self, **filters: Any) -> List[ModelT]:
        try:
            res = await self.session.execute(
                select(self.model).filter_by(**filters).order_by(self.model.id)
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Error listing {self.label}") from e
        return list(res.scalars().all())
