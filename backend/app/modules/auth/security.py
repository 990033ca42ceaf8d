"""
Password hashing with bcrypt via passlib.
"""

from functools import lru_cache

from fastapi.concurrency import run_in_threadpool
from passlib.context import CryptContext

from app.core.config import settings


class PasswordHasher:
    """
    Salted one-way password digests.

    Hashing is CPU bound, so the async helpers run it in the threadpool.

    Usage:
        hasher = PasswordHasher(rounds=12)
        digest = await hasher.hash("abcd1234")
        ok = await hasher.verify("abcd1234", digest)
    """

    def __init__(self, rounds: int | None = None) -> None:
        self.rounds = rounds or settings.password_hash_rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=self.rounds,
        )

    async def hash(self, password: str) -> str:
        """Hash password with a fresh salt."""
        return await run_in_threadpool(self._context.hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        """Check password against a stored digest."""
        return await run_in_threadpool(self._context.verify, password, password_hash)

    async def dummy_verify(self) -> None:
        """Spend one verification worth of time when there is no user."""
        await run_in_threadpool(self._context.dummy_verify)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Get cached hasher using configured cost factor."""
    return PasswordHasher()
