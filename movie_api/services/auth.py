# movie_api/services/auth.py
from __future__ import annotations

import logging
import re
import secrets
import smtplib
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Tuple
from urllib.parse import urlencode

from jose import JWTError, jwt
from passlib.context import CryptContext

from movie_api.core.errors import Conflict, InvalidOrExpiredToken, Unauthorized, ValidationError
from movie_api.core.settings import Settings
from movie_api.db.crud.users import UserRepository
from movie_api.db.models import User
from movie_api.schemas import RegisterIn, ResetPasswordIn
from movie_api.services.mailer import Mailer

log = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

# At least 8 chars from letters, digits and these symbols; needs an uppercase
# letter, a digit and a symbol.
_SYMBOLS = r"""!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?"""
PASSWORD_RE = re.compile(
    rf"(?=.*[A-Z])(?=.*\d)(?=.*[{_SYMBOLS}])[A-Za-z\d{_SYMBOLS}]{{8,}}",
    re.ASCII,
)

ACCESS = "access"
RESET = "reset"


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


def password_is_valid(password: str) -> bool:
    return PASSWORD_RE.fullmatch(password) is not None


def check_password(password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise ValidationError("Password and confirmation do not match")
    if not password_is_valid(password):
        raise ValidationError(
            "Password must be at least 8 characters and include an uppercase letter, a number and a symbol"
        )


class AuthService:
    """
    Registration, login and password reset on top of UserRepository.

    Access tokens are HS256 JWTs ``{"sub": <user id>, "type": "access"}``.
    Reset tokens are separate JWTs with ``"type": "reset"`` and a random
    ``jti``; they are also stored on the user row with their expiry and
    cleared once used, which makes them single use.
    """

    def __init__(self, users: UserRepository, settings: Settings, mailer: Optional[Mailer] = None):
        if not settings.jwt_secret:
            raise RuntimeError("JWT_SECRET not set")
        self.users = users
        self.settings = settings
        self.mailer = mailer or Mailer(settings)

    # -------- Tokens --------
    def _encode(self, *, user_id: int, kind: str, minutes: int, **extra: Any) -> Tuple[str, datetime]:
        now = datetime.now(timezone.utc)
        exp = now + timedelta(minutes=minutes)
        payload = {
            "sub": str(user_id),
            "type": kind,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
            **extra,
        }
        token = jwt.encode(payload, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)
        return token, exp

    def create_access_token(self, user_id: int) -> str:
        token, _ = self._encode(
            user_id=user_id, kind=ACCESS, minutes=self.settings.access_token_expire_minutes
        )
        return token

    def verify_token(self, token: Optional[str]) -> int:
        """Return the user id bound to a valid access token."""
        if not token:
            raise Unauthorized("Missing authentication token")
        try:
            data = jwt.decode(token, self.settings.jwt_secret, algorithms=[self.settings.jwt_algorithm])
            if data.get("type") != ACCESS:
                raise Unauthorized("Invalid token")
            return int(data["sub"])
        except (JWTError, KeyError, TypeError, ValueError):
            raise Unauthorized("Invalid or expired token")

    # -------- Flows --------
    async def register(self, payload: RegisterIn) -> int:
        check_password(payload.password, payload.confirm_password)

        email = str(payload.email)
        if await self.users.find_by_email(email):
            raise Conflict("Email already registered")

        try:
            user = await self.users.crud.create(
                {
                    "first_name": payload.first_name,
                    "last_name": payload.last_name,
                    "age": payload.age,
                    "email": email,
                    "password_hash": hash_password(payload.password),
                }
            )
        except Conflict:
            raise Conflict("Email already registered")
        return user.id

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        user = await self.users.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise Unauthorized("Invalid credentials")
        return user, self.create_access_token(user.id)

    async def request_password_reset(self, email: str) -> None:
        """Issue and mail a reset token if the email is known; silent otherwise."""
        user = await self.users.find_by_email(email)
        if user is None:
            log.info("Password reset requested for unknown email")
            return

        minutes = self.settings.reset_token_expire_minutes
        token, expires = self._encode(
            user_id=user.id, kind=RESET, minutes=minutes, jti=secrets.token_urlsafe(16)
        )
        await self.users.crud.update(
            user.id, {"reset_password_token": token, "reset_password_expires": expires}
        )

        query = urlencode({"token": token, "email": user.email})
        link = f"{self.settings.frontend_url.rstrip('/')}/reset-password?{query}"
        try:
            await self.mailer.send_password_reset(user.email, link, valid_minutes=minutes)
            log.info("Password reset email dispatched for user %s", user.id)
        except (smtplib.SMTPException, OSError):
            log.exception("Failed to send password reset email for user %s", user.id)

    async def reset_password(self, payload: ResetPasswordIn) -> None:
        user = await self.users.find_by_reset_token(str(payload.email), payload.token)
        if user is None:
            raise InvalidOrExpiredToken()

        check_password(payload.password, payload.confirm_password)
        await self.users.crud.update(
            user.id,
            {
                "password_hash": hash_password(payload.password),
                "reset_password_token": None,
                "reset_password_expires": None,
            },
        )
