# movie_api/routes/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from movie_api.core.settings import Settings, get_settings
from movie_api.db.crud.favorites import FavoriteRepository
from movie_api.db.crud.reviews import ReviewRepository
from movie_api.db.crud.users import UserRepository
from movie_api.db.session import get_async_db
from movie_api.schemas import (
    ForgotPasswordIn,
    LoginIn,
    LoginOut,
    MessageOut,
    RegisterIn,
    RegisterOut,
    ResetPasswordIn,
    UserOut,
    UserUpdateIn,
)
from movie_api.security import clear_session_cookie, get_auth_service, get_current_user_id, set_session_cookie
from movie_api.services.auth import AuthService

router = APIRouter(prefix="/users", tags=["users"])

RESET_ACK = "If that email is registered, you will receive a link to reset your password"


@router.post("", response_model=RegisterOut, status_code=201, summary="Register")
async def register(payload: RegisterIn, auth: AuthService = Depends(get_auth_service)) -> RegisterOut:
    return RegisterOut(id=await auth.register(payload))


@router.post("/login", response_model=LoginOut, summary="Login")
async def login(
    payload: LoginIn,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> LoginOut:
    user, token = await auth.login(str(payload.email), payload.password)
    set_session_cookie(response, token, settings)
    return LoginOut(user_id=user.id)


@router.post("/logout", response_model=MessageOut, summary="Logout")
async def logout(response: Response, settings: Settings = Depends(get_settings)) -> MessageOut:
    clear_session_cookie(response, settings)
    return MessageOut(message="Logged out")


@router.post("/forgot-password", response_model=MessageOut, summary="Request a password reset email")
async def forgot_password(
    payload: ForgotPasswordIn, auth: AuthService = Depends(get_auth_service)
) -> MessageOut:
    await auth.request_password_reset(str(payload.email))
    return MessageOut(message=RESET_ACK)


@router.post("/reset-password", response_model=MessageOut, summary="Reset password with a reset token")
async def reset_password(
    payload: ResetPasswordIn, auth: AuthService = Depends(get_auth_service)
) -> MessageOut:
    await auth.reset_password(payload)
    return MessageOut(message="Password updated")


@router.get("/me", response_model=UserOut, summary="Me")
async def me(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
):
    return await UserRepository(db).crud.read(user_id)


@router.put("/me", response_model=UserOut, summary="Update profile")
async def update_me(
    payload: UserUpdateIn,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
):
    return await UserRepository(db).crud.update(user_id, payload.model_dump(exclude_none=True))


@router.delete("/me", response_model=MessageOut, summary="Delete account")
async def delete_me(
    response: Response,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings),
) -> MessageOut:
    users = UserRepository(db)
    await users.crud.read(user_id)
    # One transaction: the user delete commits the dependent deletes too
    await FavoriteRepository(db).delete_by_user(user_id, commit=False)
    await ReviewRepository(db).delete_by_user(user_id, commit=False)
    await users.crud.delete(user_id)
    clear_session_cookie(response, settings)
    return MessageOut(message="Account deleted")
