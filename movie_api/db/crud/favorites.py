# movie_api/db/crud/favorites.py
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from movie_api.core.errors import StoreError
from movie_api.db.crud.base import Repository
from movie_api.db.models import Favorite


class FavoriteRepository:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.crud: Repository[Favorite] = Repository(session, Favorite)

    async def list_by_user(self, user_id: int) -> List[Favorite]:
        """Favorites of one user, each with its movie loaded."""
        try:
            res = await self.session.execute(
                select(Favorite)
                .where(Favorite.user_id == user_id)
                .options(selectinload(Favorite.movie))
                .order_by(Favorite.id)
            )
        except SQLAlchemyError as e:
            raise StoreError("Failed to get favorites by user") from e
        return list(res.scalars().all())

    async def find_by_user_and_movie(self, user_id: int, movie_id: int) -> Optional[Favorite]:
        try:
            res = await self.session.execute(
                select(Favorite).where(
                    and_(Favorite.user_id == user_id, Favorite.movie_id == movie_id)
                )
            )
        except SQLAlchemyError as e:
            raise StoreError("Failed to get favorite") from e
        return res.scalar_one_or_none()

    async def delete_by_user(self, user_id: int, *, commit: bool = True) -> int:
        try:
            res = await self.session.execute(delete(Favorite).where(Favorite.user_id == user_id))
            if commit:
                await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError("Failed to delete favorites of user") from e
        return res.rowcount or 0
