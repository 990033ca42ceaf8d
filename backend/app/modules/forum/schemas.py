"""
Forum response records.

Serialized with camelCase keys for the client.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ForumRecord(BaseModel):
    """Base for API-facing forum records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class CategoryOut(ForumRecord):
    id: int
    name: str
    sort_order: int


class QuestionSummary(ForumRecord):
    """Question row in a category listing."""

    id: int
    title: str
    body: str
    created_at: datetime
    username: str


class AnswerOut(ForumRecord):
    id: int
    body: str
    created_at: datetime
    username: str


class QuestionDetail(ForumRecord):
    """Question with its answers, oldest answer first."""

    id: int
    category_id: int
    title: str
    body: str
    created_at: datetime
    username: str
    answers: list[AnswerOut]
