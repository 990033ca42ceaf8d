"""ORM models."""

from app.models.forum import Answer, Category, Question
from app.models.user import User

__all__ = ["Answer", "Category", "Question", "User"]
