# movie_api/tests/conftest.py
import os

# The app module builds its settings at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from movie_api.core.settings import Settings, get_settings
from movie_api.db.crud.movies import MovieRepository
from movie_api.db.crud.users import UserRepository
from movie_api.db.models import Base
from movie_api.db.session import get_async_db
from movie_api.main import app
from movie_api.schemas import RegisterIn
from movie_api.security import get_mailer
from movie_api.services.auth import AuthService

PASSWORD = "Passw0rd!"


class FakeMailer:
    """Records reset emails instead of talking to SMTP."""

    def __init__(self):
        self.sent = []

    async def send_password_reset(self, to: str, link: str, valid_minutes: int = 60) -> None:
        self.sent.append({"to": to, "link": link})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite://",
        JWT_SECRET="test-secret",
        FRONTEND_URL="http://frontend.test",
    )


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
async def engine():
    # One shared in-memory database per test
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def session(engine):
    maker = async_sessionmaker(engine, expire_on_commit=False)
    async with maker() as s:
        yield s


@pytest.fixture
def auth(session, settings, mailer) -> AuthService:
    return AuthService(UserRepository(session), settings, mailer)


@pytest.fixture
def make_user(auth):
    async def _make(email: str = "ana@example.com", password: str = PASSWORD) -> int:
        return await auth.register(
            RegisterIn(
                first_name="Ana",
                last_name="Lopez",
                age=30,
                email=email,
                password=password,
                confirm_password=password,
            )
        )

    return _make


@pytest.fixture
def make_movie(session):
    async def _make(pexels_id: int = 1001, title: str = "ocean waves"):
        return await MovieRepository(session).crud.create(
            {
                "pexels_id": pexels_id,
                "title": title,
                "image_url": f"https://images.pexels.com/videos/{pexels_id}/preview.jpg",
                "video_url": f"https://videos.pexels.com/video-files/{pexels_id}/hd.mp4",
                "duration": 30,
                "author": "Jane Doe",
                "description": "Video by Jane Doe from Pexels",
            }
        )

    return _make


@pytest.fixture
async def client(engine, settings, mailer):
    maker = async_sessionmaker(engine, expire_on_commit=False)

    async def _db():
        async with maker() as s:
            yield s

    app.dependency_overrides[get_async_db] = _db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    async def _login(email: str = "ana@example.com", password: str = PASSWORD) -> int:
        r = await client.post("/api/v1/users/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return r.json()["user_id"]

    return _login
