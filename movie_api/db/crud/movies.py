# movie_api/db/crud/movies.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from movie_api.core.errors import StoreError
from movie_api.db.crud.base import Repository
from movie_api.db.models import Movie


class MovieRepository:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.crud: Repository[Movie] = Repository(session, Movie)

    async def find_by_pexels_id(self, pexels_id: int) -> Optional[Movie]:
        try:
            res = await self.session.execute(select(Movie).where(Movie.pexels_id == pexels_id))
        except SQLAlchemyError as e:
            raise StoreError("Error getting movie by pexels id") from e
        return res.scalar_one_or_none()
