"""
Shared fixtures: in-memory SQLite store, session store, HTTP client.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("SESSION_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.database import Base, build_engine, get_db, seed_categories
from app.main import create_app
from app.models.user import User
from app.modules.auth import AuthService, MemorySessionStore, PasswordHasher, SessionUser
from app.modules.forum import ForumService

DEFAULT_CATEGORIES = ["General", "Pets", "Technology"]


@pytest.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def categories(session_factory) -> list[str]:
    async with session_factory() as session:
        await seed_categories(session, DEFAULT_CATEGORIES)
    return DEFAULT_CATEGORIES


@pytest.fixture
def sessions() -> MemorySessionStore:
    return MemorySessionStore(ttl=3600)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def auth(db, sessions, hasher) -> AuthService:
    return AuthService(db, sessions, hasher=hasher)


@pytest.fixture
def forum(db) -> ForumService:
    return ForumService(db)


@pytest.fixture
async def alice(db, hasher) -> SessionUser:
    user = User(username="alice1", password_hash=await hasher.hash("abcd1234"))
    db.add(user)
    await db.commit()
    return SessionUser(id=user.id, username=user.username)


@pytest.fixture
async def client(session_factory, sessions, categories) -> AsyncGenerator[AsyncClient, None]:
    application = create_app(session_store=sessions)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
