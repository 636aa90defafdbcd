# movie_api/db/crud/reviews.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from movie_api.core.errors import StoreError
from movie_api.db.crud.base import Repository
from movie_api.db.models import Review


class ReviewRepository:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.crud: Repository[Review] = Repository(session, Review)

    async def list_by_movie(self, movie_id: int) -> List[Review]:
        """Reviews of a movie with the author loaded."""
        try:
            res = await self.session.execute(
                select(Review)
                .where(Review.movie_id == movie_id)
                .options(selectinload(Review.user))
                .order_by(Review.created_at.desc(), Review.id.desc())
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Error getting reviews for movie {movie_id}") from e
        return list(res.scalars().all())

    async def list_by_user(self, user_id: int) -> List[Review]:
        return await self.crud.list(user_id=user_id)

    async def find_by_user_and_movie(self, user_id: int, movie_id: int) -> Optional[Review]:
        try:
            res = await self.session.execute(
                select(Review).where(
                    and_(Review.user_id == user_id, Review.movie_id == movie_id)
                )
            )
        except SQLAlchemyError as e:
            raise StoreError("Error getting review") from e
        return res.scalar_one_or_none()

    async def update_by_user_and_movie(
        self, user_id: int, movie_id: int, patch: Dict[str, Any]
    ) -> Optional[Review]:
        existing = await self.find_by_user_and_movie(user_id, movie_id)
        if existing is None:
            return None
        return await self.crud.update(existing.id, patch)

    async def average_rating(self, movie_id: int) -> float:
        """Mean rating of a movie, 0 when it has no reviews."""
        try:
            res = await self.session.execute(
                select(func.avg(Review.rating)).where(Review.movie_id == movie_id)
            )
        except SQLAlchemyError as e:
            raise StoreError("Error calculating average rating") from e
        avg = res.scalar_one_or_none()
        return float(avg) if avg is not None else 0.0

    async def delete_by_user(self, user_id: int, *, commit: bool = True) -> int:
        try:
            res = await self.session.execute(delete(Review).where(Review.user_id == user_id))
            if commit:
                await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError("Error deleting reviews of user") from e
        return res.rowcount or 0
