"""
User model for authentication.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import utcnow

if TYPE_CHECKING:
    from app.models.forum import Answer, Question


class User(Base):
    """Registered forum member. Immutable after registration."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # Case-sensitive; uniqueness is enforced by the store
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    questions: Mapped[list["Question"]] = relationship(back_populates="author")
    answers: Mapped[list["Answer"]] = relationship(back_populates="author")

    def __repr__(self) -> str:
        return f"<User {self.username}>"
