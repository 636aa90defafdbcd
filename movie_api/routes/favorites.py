# movie_api/routes/favorites.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from movie_api.core.errors import Conflict
from movie_api.db.crud.favorites import FavoriteRepository
from movie_api.db.crud.movies import MovieRepository
from movie_api.db.crud.users import UserRepository
from movie_api.db.session import get_async_db
from movie_api.schemas import FavoriteIn, FavoriteOut, FavoriteWithMovieOut, MessageOut

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.post("", response_model=FavoriteOut, status_code=201)
async def add_favorite(payload: FavoriteIn, db: AsyncSession = Depends(get_async_db)):
    await UserRepository(db).crud.read(payload.user_id)
    await MovieRepository(db).crud.read(payload.movie_id)

    favorites = FavoriteRepository(db)
    if await favorites.find_by_user_and_movie(payload.user_id, payload.movie_id):
        raise Conflict("Movie is already in favorites")
    return await favorites.crud.create(payload.model_dump())


@router.get("/user/{user_id}", response_model=List[FavoriteWithMovieOut])
async def list_favorites_for_user(
    user_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_async_db),
):
    return await FavoriteRepository(db).list_by_user(user_id)


@router.delete("/{favorite_id}", response_model=MessageOut)
async def remove_favorite(
    favorite_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_async_db),
) -> MessageOut:
    await FavoriteRepository(db).crud.delete(favorite_id)
    return MessageOut(message="Favorite deleted successfully")
