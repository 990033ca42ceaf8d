"""
Forum API Endpoints.

Categories, questions and answers.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.api.deps import get_forum_service, require_user
from app.modules.auth import SessionUser
from app.modules.forum import ForumService

router = APIRouter()


# ==================== Schemas ====================


class CreateQuestionRequest(BaseModel):
    """Create new question."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    category_id: int | str | None = None
    title: str | None = None
    body: str | None = None


class CreateAnswerRequest(BaseModel):
    """Answer a question."""

    body: str | None = None


# ==================== Categories ====================


@router.get("/categories")
async def get_categories(
    forum: ForumService = Depends(get_forum_service),
) -> dict[str, Any]:
    """Get all categories in display order."""
    categories = (await forum.list_categories()).unwrap()
    return {"categories": [cat.to_json() for cat in categories]}


# ==================== Questions ====================


@router.get("/questions")
async def get_questions(
    category_id: str | None = Query(None, alias="categoryId"),
    forum: ForumService = Depends(get_forum_service),
) -> dict[str, Any]:
    """Get questions in a category, newest first."""
    questions = (await forum.list_questions(category_id)).unwrap()
    return {"questions": [q.to_json() for q in questions]}


@router.post("/questions", status_code=status.HTTP_201_CREATED)
async def create_question(
    request: CreateQuestionRequest,
    user: SessionUser = Depends(require_user),
    forum: ForumService = Depends(get_forum_service),
) -> dict[str, Any]:
    """Create new question. Requires login."""
    result = await forum.create_question(
        author=user,
        category_id=request.category_id,
        title=request.title,
        body=request.body,
    )
    return {"id": result.unwrap()}


@router.get("/questions/{question_id}")
async def get_question(
    question_id: str,
    forum: ForumService = Depends(get_forum_service),
) -> dict[str, Any]:
    """Get question details with answers."""
    question = (await forum.get_question(question_id)).unwrap()
    return {"question": question.to_json()}


# ==================== Answers ====================


@router.post("/questions/{question_id}/answers", status_code=status.HTTP_201_CREATED)
async def create_answer(
    question_id: str,
    request: CreateAnswerRequest,
    user: SessionUser = Depends(require_user),
    forum: ForumService = Depends(get_forum_service),
) -> dict[str, Any]:
    """Add answer to question. Requires login."""
    result = await forum.add_answer(
        author=user,
        question_id=question_id,
        body=request.body,
    )
    return {"id": result.unwrap()}
