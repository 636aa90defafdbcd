from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class MessageOut(BaseModel):
    message: str


# ── Users / Auth ─────────────────────────────────────────────────────────────

class RegisterIn(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    age: int = Field(ge=13)
    email: EmailStr
    password: str = Field(max_length=128)
    confirm_password: str = Field(max_length=128)


class RegisterOut(BaseModel):
    id: int


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class LoginOut(BaseModel):
    message: str = "Login successful"
    user_id: int


class ForgotPasswordIn(BaseModel):
    email: EmailStr


class ResetPasswordIn(BaseModel):
    email: EmailStr
    token: str = Field(min_length=1)
    password: str = Field(max_length=128)
    confirm_password: str = Field(max_length=128)


class UserUpdateIn(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    age: Optional[int] = Field(default=None, ge=13)


class UserOut(ORMModel):
    id: int
    first_name: str
    last_name: str
    age: int
    email: EmailStr
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserSummary(ORMModel):
    id: int
    first_name: str
    last_name: str
    email: EmailStr


# ── Movies ───────────────────────────────────────────────────────────────────

class MovieOut(ORMModel):
    id: int
    pexels_id: int
    title: str
    image_url: str
    video_url: str
    duration: int
    author: str
    description: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MovieSearchIn(BaseModel):
    category: str = Field(min_length=1, max_length=100, description="Search term, e.g. 'nature'")
    per_page: int = Field(default=10, ge=1, le=80)


# ── Favorites ────────────────────────────────────────────────────────────────

class FavoriteIn(BaseModel):
    user_id: int = Field(ge=1)
    movie_id: int = Field(ge=1)


class FavoriteOut(ORMModel):
    id: int
    user_id: int
    movie_id: int
    created_at: Optional[datetime] = None


class FavoriteWithMovieOut(FavoriteOut):
    movie: MovieOut


# ── Reviews ──────────────────────────────────────────────────────────────────

Comment = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=1000)]


class ReviewIn(BaseModel):
    movie_id: int = Field(ge=1)
    comment: Comment
    rating: int = Field(ge=1, le=5)


class ReviewUpdateIn(BaseModel):
    movie_id: int = Field(ge=1)
    comment: Optional[Comment] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)


class ReviewOut(ORMModel):
    id: int
    user_id: int
    movie_id: int
    comment: str
    rating: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReviewWithAuthorOut(ReviewOut):
    user: UserSummary


class AverageRatingOut(BaseModel):
    movie_id: int
    average: float
