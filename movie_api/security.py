# movie_api/security.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, Response
from fastapi.security import APIKeyCookie
from sqlalchemy.ext.asyncio import AsyncSession

from movie_api.core.settings import Settings, get_settings
from movie_api.db.crud.users import UserRepository
from movie_api.db.session import get_async_db
from movie_api.services.auth import AuthService
from movie_api.services.mailer import Mailer

COOKIE_NAME = "token"

# auto_error=False so a missing cookie ends up as our own 401, not a framework 403
cookie_scheme = APIKeyCookie(name=COOKIE_NAME, auto_error=False)


def _cookie_params(settings: Settings) -> Dict[str, Any]:
    # Shared by set and delete: browsers only drop a cookie whose attributes match
    return {
        "path": "/",
        "httponly": True,
        "secure": settings.is_production or settings.cookie_samesite == "none",
        "samesite": settings.cookie_samesite,
    }


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=settings.access_token_expire_minutes * 60,
        **_cookie_params(settings),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(COOKIE_NAME, **_cookie_params(settings))


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
    return Mailer(settings)


def get_auth_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings),
    mailer: Mailer = Depends(get_mailer),
) -> AuthService:
    return AuthService(UserRepository(db), settings, mailer)


def get_current_user_id(
    token: Optional[str] = Depends(cookie_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> int:
    """Auth dependency: user id from the session cookie, 401 otherwise."""
    return auth.verify_token(token)
