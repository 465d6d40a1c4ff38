"""SQLite lesson store via aiosqlite."""

from __future__ import annotations

import json
import os
import time
import uuid

import aiosqlite
import structlog

from tutorchat.tutor.lesson import Lesson

from .models import SCHEMA_SQL, LessonRow

log = structlog.get_logger()


class Database:
    """Async SQLite store for generated lessons, keyed by lesson id."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open database connection and initialize schema."""
        if self._db_path != ":memory:":
            os.makedirs(os.path.dirname(self._db_path) or ".", exist_ok=True)
        self._conn = await aiosqlite.connect(self._db_path)
        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()
        log.info("db_connected", path=self._db_path)

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Database not connected")
        return self._conn

    async def save_lesson(self, lesson: Lesson) -> str:
        """Insert a lesson, assigning its id and creation time. Returns the id."""
        lesson_id = lesson.id or uuid.uuid4().hex
        now = time.time()
        await self.conn.execute(
            """
            INSERT INTO lessons
                (id, topic, subject, grade_level, slides_json, mcqs_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                lesson_id,
                lesson.topic,
                lesson.subject,
                lesson.grade_level,
                json.dumps([s.to_dict() for s in lesson.slides]),
                json.dumps([q.to_dict() for q in lesson.mcqs]),
                now,
            ),
        )
        await self.conn.commit()
        log.info("lesson_saved", lesson_id=lesson_id, topic=lesson.topic)
        return lesson_id

    async def get_lesson(self, lesson_id: str) -> Lesson | None:
        """Fetch a lesson by id."""
        cursor = await self.conn.execute(
            "SELECT * FROM lessons WHERE id = ?", (lesson_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return LessonRow(*row).to_lesson()

    async def list_lessons(self, limit: int = 20) -> list[Lesson]:
        """Most recent lessons first."""
        cursor = await self.conn.execute(
            "SELECT * FROM lessons ORDER BY created_at DESC, rowid DESC LIMIT ?", (limit,),
        )
        rows = await cursor.fetchall()
        return [LessonRow(*r).to_lesson() for r in rows]

    async def delete_lesson(self, lesson_id: str) -> bool:
        """Delete a lesson. Returns False if it did not exist."""
        cursor = await self.conn.execute(
            "DELETE FROM lessons WHERE id = ?", (lesson_id,),
        )
        await self.conn.commit()
        deleted = cursor.rowcount > 0
        if deleted:
            log.info("lesson_deleted", lesson_id=lesson_id)
        return deleted
