"""
Forum Service - Categories, questions and answers.
"""

from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import ErrorKind, Result, guard_store
from app.core.validation import clean_text, is_storable_id, parse_positive_int
from app.models.forum import Answer, Category, Question
from app.modules.auth.sessions import SessionUser
from app.modules.forum.schemas import (
    AnswerOut,
    CategoryOut,
    QuestionDetail,
    QuestionSummary,
)

TITLE_MIN_LENGTH = 3
BODY_MIN_LENGTH = 3
NOT_LOGGED_IN = "Not logged in"


class ForumService:
    """
    Service for browsing categories and managing questions and answers.

    Usage:
        forum = ForumService(db_session)
        questions = (await forum.list_questions(category_id)).unwrap()
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize forum service with database session."""
        self.db = db

    # ==================== Categories ====================

    @guard_store()
    async def list_categories(self) -> Result[list[CategoryOut]]:
        """Get all categories by sort order, then name."""
        query = select(Category).order_by(Category.sort_order, Category.name)
        result = await self.db.execute(query)
        return Result.success(
            [CategoryOut.model_validate(cat) for cat in result.scalars().all()]
        )

    # ==================== Questions ====================

    @guard_store()
    async def list_questions(self, category_id: Any) -> Result[list[QuestionSummary]]:
        """
        Get questions in a category, newest first.

        Args:
            category_id: Category ID (raw input, validated here)

        Returns:
            Question summaries with author usernames; empty list for
            a category with no questions
        """
        category_id = parse_positive_int(category_id)
        if category_id is None:
            return Result.failure(ErrorKind.VALIDATION, "categoryId is required")

        if not is_storable_id(category_id):
            return Result.success([])

        query = (
            select(Question)
            .options(selectinload(Question.author))
            .where(Question.category_id == category_id)
            .order_by(Question.created_at.desc(), Question.id.desc())
        )
        result = await self.db.execute(query)

        return Result.success(
            [
                QuestionSummary(
                    id=q.id,
                    title=q.title,
                    body=q.body,
                    created_at=q.created_at,
                    username=q.author.username,
                )
                for q in result.scalars().all()
            ]
        )

    @guard_store()
    async def create_question(
        self,
        author: SessionUser | None,
        category_id: Any,
        title: str | None,
        body: str | None,
    ) -> Result[int]:
        """
        Create new question.

        Args:
            author: Authenticated user, None if not logged in
            category_id: Category ID (raw input)
            title: Question title (trimmed, min 3 chars)
            body: Question body (trimmed, min 3 chars)

        Returns:
            New question ID
        """
        if author is None:
            return Result.failure(ErrorKind.AUTH, NOT_LOGGED_IN)

        category_id = parse_positive_int(category_id)
        title = clean_text(title)
        body = clean_text(body)

        if category_id is None:
            return Result.failure(ErrorKind.VALIDATION, "categoryId is required")
        if len(title) < TITLE_MIN_LENGTH:
            return Result.failure(
                ErrorKind.VALIDATION, f"Title must be at least {TITLE_MIN_LENGTH} chars"
            )
        if len(body) < BODY_MIN_LENGTH:
            return Result.failure(
                ErrorKind.VALIDATION, f"Body must be at least {BODY_MIN_LENGTH} chars"
            )

        category = await self.db.get(Category, category_id) if is_storable_id(category_id) else None
        if category is None:
            return Result.failure(ErrorKind.VALIDATION, "Unknown category")

        question = Question(
            category_id=category_id,
            author_id=author.id,
            title=title,
            body=body,
        )
        self.db.add(question)
        await self.db.commit()

        logger.info(f"Question {question.id} created by {author.username}")
        return Result.success(question.id)

    @guard_store()
    async def get_question(self, question_id: Any) -> Result[QuestionDetail]:
        """Get question with author and answers, oldest answer first."""
        question_id = parse_positive_int(question_id)
        if question_id is None:
            return Result.failure(ErrorKind.VALIDATION, "Invalid id")

        if not is_storable_id(question_id):
            return Result.failure(ErrorKind.NOT_FOUND, "Not found")

        query = (
            select(Question)
            .options(
                selectinload(Question.author),
                selectinload(Question.answers).selectinload(Answer.author),
            )
            .where(Question.id == question_id)
        )
        result = await self.db.execute(query)
        question = result.scalar_one_or_none()

        if question is None:
            return Result.failure(ErrorKind.NOT_FOUND, "Not found")

        return Result.success(
            QuestionDetail(
                id=question.id,
                category_id=question.category_id,
                title=question.title,
                body=question.body,
                created_at=question.created_at,
                username=question.author.username,
                answers=[
                    AnswerOut(
                        id=a.id,
                        body=a.body,
                        created_at=a.created_at,
                        username=a.author.username,
                    )
                    for a in question.answers
                ],
            )
        )

    # ==================== Answers ====================

    @guard_store()
    async def add_answer(
        self,
        author: SessionUser | None,
        question_id: Any,
        body: str | None,
    ) -> Result[int]:
        """
        Add answer to a question.

        Args:
            author: Authenticated user, None if not logged in
            question_id: Question ID (raw input)
            body: Answer text (trimmed, non-empty)

        Returns:
            New answer ID, NOT_FOUND if the question does not exist
        """
        if author is None:
            return Result.failure(ErrorKind.AUTH, NOT_LOGGED_IN)

        question_id = parse_positive_int(question_id)
        body = clean_text(body)

        if question_id is None:
            return Result.failure(ErrorKind.VALIDATION, "Invalid id")
        if not body:
            return Result.failure(ErrorKind.VALIDATION, "Answer body required")

        question = await self.db.get(Question, question_id) if is_storable_id(question_id) else None
        if question is None:
            return Result.failure(ErrorKind.NOT_FOUND, "Not found")

        answer = Answer(
            question_id=question_id,
            author_id=author.id,
            body=body,
        )
        self.db.add(answer)
        try:
            await self.db.commit()
        except IntegrityError:
            # Foreign key rejection: question vanished or author row missing
            await self.db.rollback()
            return Result.failure(ErrorKind.NOT_FOUND, "Not found")

        logger.info(f"Answer {answer.id} added to question {question_id} by {author.username}")
        return Result.success(answer.id)
