"""
Forum models for Q&A discussions.

Includes:
- Categories (topic groupings, managed outside the API)
- Questions (filed under one category)
- Answers (replies to a question, oldest first)
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import utcnow

if TYPE_CHECKING:
    from app.models.user import User


class Category(Base):
    """Forum category. Read-only to the API."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    questions: Mapped[list["Question"]] = relationship(back_populates="category")

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class Question(Base):
    """Question posted by a user in a category."""

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), index=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

    title: Mapped[str] = mapped_column(String(255))
    body: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    # Relationships
    category: Mapped["Category"] = relationship(back_populates="questions")
    author: Mapped["User"] = relationship(back_populates="questions")
    answers: Mapped[list["Answer"]] = relationship(
        back_populates="question",
        order_by="[Answer.created_at, Answer.id]",
    )

    def __repr__(self) -> str:
        return f"<Question {self.title[:30]}>"


class Answer(Base):
    """Answer to a question."""

    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(ForeignKey("questions.id"), index=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

    body: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    question: Mapped["Question"] = relationship(back_populates="answers")
    author: Mapped["User"] = relationship(back_populates="answers")

    def __repr__(self) -> str:
        return f"<Answer {self.id} on question {self.question_id}>"
