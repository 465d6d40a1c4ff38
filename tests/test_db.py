"""Tests for the lesson store."""

import os
import tempfile

import pytest

from tutorchat.store.db import Database
from tutorchat.tutor.lesson import MCQ, KeyTerm, Lesson, Slide


@pytest.fixture
async def db():
    with tempfile.TemporaryDirectory() as tmpdir:
        db = Database(os.path.join(tmpdir, "test.sqlite"))
        await db.connect()
        yield db
        await db.close()


def _lesson(topic="Photosynthesis"):
    return Lesson(
        topic=topic,
        subject="Science",
        grade_level=7,
        slides=[Slide("Intro", "Plants make food.", [KeyTerm("Leaf", "Plant organ")], "a leaf")],
        mcqs=[MCQ("Which gas?", ["O2", "CO2"], 1, "CO2 is absorbed.")],
    )


class TestDatabase:
    @pytest.mark.asyncio
    async def test_connect_creates_tables(self, db):
        cursor = await db.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        )
        tables = {row[0] for row in await cursor.fetchall()}
        assert "lessons" in tables

    @pytest.mark.asyncio
    async def test_save_and_get_lesson(self, db):
        lesson_id = await db.save_lesson(_lesson())
        lesson = await db.get_lesson(lesson_id)
        assert lesson is not None
        assert lesson.id == lesson_id
        assert lesson.topic == "Photosynthesis"
        assert lesson.slides[0].key_terms[0].definition == "Plant organ"
        assert lesson.mcqs[0].correct_index == 1
        assert lesson.created_at is not None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db):
        first = await db.save_lesson(_lesson("Atoms"))
        second = await db.save_lesson(_lesson("Gravity"))
        lessons = await db.list_lessons()
        assert [lesson.id for lesson in lessons] == [second, first]

    @pytest.mark.asyncio
    async def test_list_limit(self, db):
        for topic in ("a", "b", "c"):
            await db.save_lesson(_lesson(topic))
        assert len(await db.list_lessons(limit=2)) == 2

    @pytest.mark.asyncio
    async def test_delete_lesson(self, db):
        lesson_id = await db.save_lesson(_lesson())
        assert await db.delete_lesson(lesson_id)
        assert await db.get_lesson(lesson_id) is None

    @pytest.mark.asyncio
    async def test_delete_nonexistent(self, db):
        assert not await db.delete_lesson("nonexistent")

    @pytest.mark.asyncio
    async def test_get_nonexistent_lesson(self, db):
        assert await db.get_lesson("nonexistent") is None

    @pytest.mark.asyncio
    async def test_in_memory_path(self):
        db = Database(":memory:")
        await db.connect()
        try:
            lesson_id = await db.save_lesson(_lesson())
            assert await db.get_lesson(lesson_id) is not None
        finally:
            await db.close()

    @pytest.mark.asyncio
    async def test_requires_connection(self):
        with pytest.raises(RuntimeError):
            Database(":memory:").conn
