"""
Service error taxonomy and result values.

Services return `Result` values instead of raising for expected
failures. The HTTP layer unwraps them and maps the error kind
to a status code.
"""

import functools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

T = TypeVar("T")

SERVER_ERROR_MESSAGE = "Server error"


class ErrorKind(str, Enum):
    """Failure categories surfaced to API callers."""

    VALIDATION = "validation"
    AUTH = "auth"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    SERVER = "server"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SERVER: 500,
}


@dataclass(frozen=True)
class ServiceError:
    """Failed operation outcome."""

    kind: ErrorKind
    message: str


class APIError(Exception):
    """Raised at the HTTP boundary when a service result is a failure."""

    def __init__(self, error: ServiceError) -> None:
        super().__init__(error.message)
        self.error = error

    @property
    def status_code(self) -> int:
        return self.error.kind.status_code


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a service operation.

    Usage:
        result = await forum.get_question(question_id)
        if not result.ok:
            ...
        question = result.unwrap()
    """

    value: T | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(error=ServiceError(kind=kind, message=message))

    def unwrap(self) -> T:
        """Return the value or raise `APIError`."""
        if self.error is not None:
            raise APIError(self.error)
        return self.value  # type: ignore[return-value]


def guard_store(
    *extra: type[Exception],
) -> Callable[[Callable[..., Awaitable[Result[T]]]], Callable[..., Awaitable[Result[T]]]]:
    """
    Map store failures inside a service method to a SERVER result.

    The wrapped method's owner must expose the session as `self.db`;
    the transaction is rolled back before returning. Extra exception
    types (e.g. hashing errors) can be passed in.
    """
    caught = (SQLAlchemyError, *extra)

    def decorator(
        func: Callable[..., Awaitable[Result[T]]],
    ) -> Callable[..., Awaitable[Result[T]]]:
        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Result[T]:
            try:
                return await func(self, *args, **kwargs)
            except caught:
                logger.exception(f"Store failure in {func.__qualname__}")
                await self.db.rollback()
                return Result.failure(ErrorKind.SERVER, SERVER_ERROR_MESSAGE)

        return wrapper

    return decorator
