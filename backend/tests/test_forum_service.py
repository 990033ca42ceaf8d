from datetime import datetime, timedelta

from app.core.errors import ErrorKind
from app.models.forum import Answer, Category, Question


async def test_list_categories_ordering(forum, db):
    db.add_all(
        [
            Category(name="Zoo", sort_order=1),
            Category(name="Apples", sort_order=2),
            Category(name="Birds", sort_order=1),
            Category(name="Cars", sort_order=0),
        ]
    )
    await db.commit()

    categories = (await forum.list_categories()).unwrap()

    assert [c.name for c in categories] == ["Cars", "Birds", "Zoo", "Apples"]
    assert categories[0].to_json() == {"id": categories[0].id, "name": "Cars", "sortOrder": 0}


class TestQuestions:
    async def test_empty_category_yields_empty_list(self, forum, categories):
        result = await forum.list_questions(1)
        assert result.ok
        assert result.unwrap() == []

    async def test_invalid_category_id(self, forum):
        for value in (None, "", "abc", 0, -3, "1.5"):
            result = await forum.list_questions(value)
            assert result.error.kind is ErrorKind.VALIDATION
            assert result.error.message == "categoryId is required"

    async def test_create_requires_author(self, forum, categories):
        result = await forum.create_question(None, 1, "Cat diet", "What food?")
        assert result.error.kind is ErrorKind.AUTH

    async def test_create_and_list_newest_first(self, forum, categories, alice):
        first = (await forum.create_question(alice, 1, "First one", "Body one")).unwrap()
        second = (await forum.create_question(alice, "1", "Second one", "Body two")).unwrap()
        (await forum.create_question(alice, 2, "Elsewhere", "Other category")).unwrap()

        questions = (await forum.list_questions("1")).unwrap()

        assert [q.id for q in questions] == [second, first]
        assert questions[0].username == "alice1"
        assert questions[0].title == "Second one"
        assert set(questions[0].to_json()) == {"id", "title", "body", "createdAt", "username"}

    async def test_create_trims_and_validates(self, forum, categories, alice):
        result = await forum.create_question(alice, 1, "  ab  ", "What food?")
        assert result.error.message == "Title must be at least 3 chars"

        result = await forum.create_question(alice, 1, "Cat diet", "  x ")
        assert result.error.message == "Body must be at least 3 chars"

        result = await forum.create_question(alice, "nope", "Cat diet", "What food?")
        assert result.error.message == "categoryId is required"

        question_id = (await forum.create_question(alice, 1, "  Cat diet ", " What food? ")).unwrap()
        detail = (await forum.get_question(question_id)).unwrap()
        assert detail.title == "Cat diet"
        assert detail.body == "What food?"

    async def test_create_unknown_category(self, forum, categories, alice):
        result = await forum.create_question(alice, 999, "Cat diet", "What food?")
        assert result.error.kind is ErrorKind.VALIDATION
        assert result.error.message == "Unknown category"


class TestQuestionDetail:
    async def test_invalid_id(self, forum):
        result = await forum.get_question("x")
        assert result.error.kind is ErrorKind.VALIDATION
        assert result.error.message == "Invalid id"

    async def test_unknown_id(self, forum):
        result = await forum.get_question(12345)
        assert result.error.kind is ErrorKind.NOT_FOUND

    async def test_answers_oldest_first(self, forum, db, categories, alice):
        question_id = (await forum.create_question(alice, 1, "Cat diet", "What food?")).unwrap()
        base = datetime(2024, 1, 1, 12, 0, 0)
        db.add_all(
            [
                Answer(question_id=question_id, author_id=alice.id, body="third",
                       created_at=base + timedelta(minutes=2)),
                Answer(question_id=question_id, author_id=alice.id, body="first",
                       created_at=base),
                Answer(question_id=question_id, author_id=alice.id, body="second",
                       created_at=base + timedelta(minutes=1)),
            ]
        )
        await db.commit()
        db.expire_all()

        detail = (await forum.get_question(question_id)).unwrap()

        assert [a.body for a in detail.answers] == ["first", "second", "third"]
        assert detail.to_json()["categoryId"] == 1
        assert detail.username == "alice1"


class TestAnswers:
    async def test_requires_author(self, forum, categories, alice):
        question_id = (await forum.create_question(alice, 1, "Cat diet", "What food?")).unwrap()
        result = await forum.add_answer(None, question_id, "Try wet food")
        assert result.error.kind is ErrorKind.AUTH

    async def test_validation(self, forum, alice):
        result = await forum.add_answer(alice, "zero", "Try wet food")
        assert result.error.message == "Invalid id"

        result = await forum.add_answer(alice, 1, "   ")
        assert result.error.kind is ErrorKind.VALIDATION
        assert result.error.message == "Answer body required"

    async def test_unknown_question(self, forum, alice):
        result = await forum.add_answer(alice, 777, "Try wet food")
        assert result.error.kind is ErrorKind.NOT_FOUND
        assert result.error.message == "Not found"

    async def test_add_answer(self, forum, categories, alice):
        question_id = (await forum.create_question(alice, 1, "Cat diet", "What food?")).unwrap()

        answer_id = (await forum.add_answer(alice, question_id, "  Try wet food ")).unwrap()

        detail = (await forum.get_question(question_id)).unwrap()
        assert [(a.id, a.body, a.username) for a in detail.answers] == [
            (answer_id, "Try wet food", "alice1")
        ]

    async def test_question_rows_reference_author(self, forum, db, categories, alice):
        question_id = (await forum.create_question(alice, 2, "Dog walks", "How often?")).unwrap()
        question = await db.get(Question, question_id)
        assert question.author_id == alice.id
        assert question.category_id == 2


class TestIdsBeyondKeyRange:
    HUGE = "99999999999999999999"

    async def test_list_questions_is_empty(self, forum, categories):
        assert (await forum.list_questions(self.HUGE)).unwrap() == []

    async def test_get_question_not_found(self, forum):
        result = await forum.get_question(self.HUGE)
        assert result.error.kind is ErrorKind.NOT_FOUND

    async def test_add_answer_not_found(self, forum, alice):
        result = await forum.add_answer(alice, self.HUGE, "Try wet food")
        assert result.error.kind is ErrorKind.NOT_FOUND

    async def test_create_question_unknown_category(self, forum, categories, alice):
        result = await forum.create_question(alice, 10**20, "Cat diet", "What food?")
        assert result.error.kind is ErrorKind.VALIDATION
        assert result.error.message == "Unknown category"
