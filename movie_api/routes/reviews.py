# movie_api/routes/reviews.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from movie_api.core.errors import Conflict, Forbidden, NotFound
from movie_api.db.crud.movies import MovieRepository
from movie_api.db.crud.reviews import ReviewRepository
from movie_api.db.session import get_async_db
from movie_api.schemas import (
    AverageRatingOut,
    MessageOut,
    ReviewIn,
    ReviewOut,
    ReviewUpdateIn,
    ReviewWithAuthorOut,
)
from movie_api.security import get_current_user_id

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("", response_model=ReviewOut, status_code=201)
async def create_review(
    payload: ReviewIn,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
):
    """One review per user and movie; the author is the logged-in user."""
    await MovieRepository(db).crud.read(payload.movie_id)

    reviews = ReviewRepository(db)
    if await reviews.find_by_user_and_movie(user_id, payload.movie_id):
        raise Conflict("You have already reviewed this movie")
    return await reviews.crud.create({"user_id": user_id, **payload.model_dump()})


@router.get("/movie/{movie_id}", response_model=List[ReviewWithAuthorOut])
async def reviews_for_movie(
    movie_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_async_db),
):
    rows = await ReviewRepository(db).list_by_movie(movie_id)
    if not rows:
        raise NotFound("No reviews for this movie")
    return rows


@router.get("/user/{user_id}", response_model=List[ReviewOut])
async def reviews_by_user(
    user_id: int = Path(ge=1),
    _: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
):
    rows = await ReviewRepository(db).list_by_user(user_id)
    if not rows:
        raise NotFound("This user has not written any reviews")
    return rows


@router.get("/average/{movie_id}", response_model=AverageRatingOut)
async def average_rating(
    movie_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_async_db),
) -> AverageRatingOut:
    average = await ReviewRepository(db).average_rating(movie_id)
    return AverageRatingOut(movie_id=movie_id, average=average)


@router.put("", response_model=ReviewOut)
async def update_review(
    payload: ReviewUpdateIn,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
):
    patch = payload.model_dump(exclude_none=True, exclude={"movie_id"})
    review = await ReviewRepository(db).update_by_user_and_movie(user_id, payload.movie_id, patch)
    if review is None:
        raise NotFound("Review not found")
    return review


@router.delete("/{review_id}", response_model=MessageOut)
async def delete_review(
    review_id: int = Path(ge=1),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
) -> MessageOut:
    reviews = ReviewRepository(db)
    review = await reviews.crud.read(review_id)
    if review.user_id != user_id:
        raise Forbidden("You can only delete your own reviews")
    await reviews.crud.delete(review_id)
    return MessageOut(message="Review deleted successfully")
