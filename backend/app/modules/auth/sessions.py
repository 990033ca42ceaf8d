"""
Session storage.

Maps opaque session tokens to an authenticated user snapshot.
Two backends: in-process memory (default) and Redis.
"""

import asyncio
import secrets
import time
from abc import ABC, abstractmethod
from typing import Callable

import redis.asyncio as redis
from loguru import logger
from pydantic import BaseModel, ValidationError

from app.core.config import Settings


class SessionUser(BaseModel):
    """Authenticated user snapshot held by a session."""

    id: int
    username: str


def new_session_token() -> str:
    """Generate an opaque session token."""
    return secrets.token_urlsafe(32)


class SessionStore(ABC):
    """Session storage keyed by token."""

    def __init__(self, ttl: int) -> None:
        self.ttl = ttl

    @abstractmethod
    async def get(self, token: str) -> SessionUser | None:
        """Look up session, None if absent or expired."""

    @abstractmethod
    async def set(self, token: str, user: SessionUser) -> None:
        """Create or replace session."""

    @abstractmethod
    async def destroy(self, token: str) -> None:
        """Remove session. Absent tokens are ignored."""

    async def close(self) -> None:
        """Release backend resources."""


class MemorySessionStore(SessionStore):
    """
    Process-local session store.

    Each entry expires `ttl` seconds after it was set.
    """

    def __init__(self, ttl: int, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(ttl)
        self._clock = clock
        self._sessions: dict[str, tuple[SessionUser, float]] = {}
        self._lock = asyncio.Lock()

    async def get(self, token: str) -> SessionUser | None:
        async with self._lock:
            entry = self._sessions.get(token)
            if entry is None:
                return None

            user, expires_at = entry
            if expires_at <= self._clock():
                del self._sessions[token]
                return None
            return user

    async def set(self, token: str, user: SessionUser) -> None:
        async with self._lock:
            now = self._clock()
            self._sweep(now)
            self._sessions[token] = (user, now + self.ttl)

    def _sweep(self, now: float) -> None:
        """Drop expired entries. Caller holds the lock."""
        expired = [t for t, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for token in expired:
            del self._sessions[token]

    async def destroy(self, token: str) -> None:
        async with self._lock:
            self._sessions.pop(token, None)

    async def close(self) -> None:
        async with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


class RedisSessionStore(SessionStore):
    """
    Session store using Redis for storage.

    Sessions are stored as JSON with TTL for automatic expiration.
    """

    def __init__(self, ttl: int, client: redis.Redis) -> None:
        super().__init__(ttl)
        self._redis = client

    @classmethod
    def from_url(cls, url: str, ttl: int) -> "RedisSessionStore":
        return cls(
            ttl,
            redis.from_url(url, encoding="utf-8", decode_responses=True),
        )

    def _session_key(self, token: str) -> str:
        """Generate Redis key for session token."""
        return f"session:{token}"

    async def get(self, token: str) -> SessionUser | None:
        data = await self._redis.get(self._session_key(token))
        if not data:
            return None

        try:
            return SessionUser.model_validate_json(data)
        except ValidationError:
            logger.warning("Invalid session data, discarding")
            await self.destroy(token)
            return None

    async def set(self, token: str, user: SessionUser) -> None:
        await self._redis.setex(
            self._session_key(token),
            self.ttl,
            user.model_dump_json(),
        )

    async def destroy(self, token: str) -> None:
        await self._redis.delete(self._session_key(token))

    async def close(self) -> None:
        await self._redis.aclose()


def build_session_store(settings: Settings) -> SessionStore:
    """Create session store for configured backend."""
    if settings.session_backend == "redis":
        logger.info("Using Redis session store")
        return RedisSessionStore.from_url(str(settings.redis_url), settings.session_max_age)

    logger.info("Using in-memory session store")
    return MemorySessionStore(settings.session_max_age)
