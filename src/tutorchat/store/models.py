"""Database table definitions and dataclass row types."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone

from tutorchat.tutor.lesson import MCQ, Lesson, Slide

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS lessons (
    id TEXT PRIMARY KEY,
    topic TEXT NOT NULL,
    subject TEXT NOT NULL DEFAULT 'General',
    grade_level INTEGER NOT NULL,
    slides_json TEXT NOT NULL,
    mcqs_json TEXT NOT NULL,
    created_at REAL NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_lessons_created_at
    ON lessons(created_at);
"""


@dataclass
class LessonRow:
    id: str
    topic: str
    subject: str
    grade_level: int
    slides_json: str
    mcqs_json: str
    created_at: float

    def to_lesson(self) -> Lesson:
        return Lesson(
            id=self.id,
            topic=self.topic,
            subject=self.subject,
            grade_level=self.grade_level,
            slides=[Slide.from_dict(s) for s in json.loads(self.slides_json)],
            mcqs=[MCQ.from_dict(q) for q in json.loads(self.mcqs_json)],
            created_at=datetime.fromtimestamp(self.created_at, tz=timezone.utc).isoformat(),
        )
