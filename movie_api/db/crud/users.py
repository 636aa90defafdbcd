# movie_api/db/crud/users.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from movie_api.core.errors import StoreError
from movie_api.db.crud.base import Repository
from movie_api.db.models import User


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.crud: Repository[User] = Repository(session, User)

    async def find_by_email(self, email: str) -> Optional[User]:
        try:
            res = await self.session.execute(select(User).where(User.email == email))
        except SQLAlchemyError as e:
            raise StoreError("Error getting user by email") from e
        return res.scalar_one_or_none()

    async def find_by_reset_token(self, email: str, token: str) -> Optional[User]:
        """Only matches while the stored reset token has not expired."""
        now = datetime.now(timezone.utc)
        try:
            res = await self.session.execute(
                select(User).where(
                    User.email == email,
                    User.reset_password_token == token,
                    User.reset_password_expires > now,
                )
            )
        except SQLAlchemyError as e:
            raise StoreError("Error getting user by reset token") from e
        return res.scalar_one_or_none()
