# movie_api/routes/movies.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from movie_api.core.settings import Settings, get_settings
from movie_api.db.crud.movies import MovieRepository
from movie_api.db.session import get_async_db
from movie_api.integrations.pexels import PexelsClient
from movie_api.schemas import MovieOut, MovieSearchIn
from movie_api.services.catalog import ingest_videos

router = APIRouter(prefix="/movies", tags=["movies"])


def get_pexels_client(settings: Settings = Depends(get_settings)) -> PexelsClient:
    return PexelsClient(api_key=settings.pexels_api_key or "")


@router.get("", response_model=List[MovieOut])
async def list_movies(db: AsyncSession = Depends(get_async_db)):
    return await MovieRepository(db).crud.list()


@router.get("/popular/{per_page}", response_model=List[MovieOut])
async def popular_movies(
    per_page: int = Path(ge=1, le=80),
    db: AsyncSession = Depends(get_async_db),
    pexels: PexelsClient = Depends(get_pexels_client),
):
    """Fetch popular Pexels videos and store the ones not seen before."""
    videos = await pexels.popular(per_page=per_page)
    return await ingest_videos(MovieRepository(db), videos)


@router.post("/search", response_model=List[MovieOut])
async def search_movies(
    payload: MovieSearchIn,
    db: AsyncSession = Depends(get_async_db),
    pexels: PexelsClient = Depends(get_pexels_client),
):
    videos = await pexels.search(payload.category, per_page=payload.per_page)
    return await ingest_videos(MovieRepository(db), videos)


@router.get("/{movie_id}", response_model=MovieOut)
async def get_movie(
    movie_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_async_db),
):
    return await MovieRepository(db).crud.read(movie_id)
