"""Lesson data types and parsing of model-generated lesson JSON."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

_CODE_FENCE = re.compile(r"```(?:json)?\s*")


class LessonFormatError(ValueError):
    """Raised when generated lesson content is not usable lesson JSON."""


@dataclass
class KeyTerm:
    term: str
    definition: str

    def to_dict(self) -> dict[str, Any]:
        return {"term": self.term, "definition": self.definition}


@dataclass
class Slide:
    heading: str
    body: str
    key_terms: list[KeyTerm] = field(default_factory=list)
    visual_prompt: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Slide:
        return cls(
            heading=str(data.get("heading", "")),
            body=str(data.get("body", "")),
            key_terms=[
                KeyTerm(str(kt.get("term", "")), str(kt.get("definition", "")))
                for kt in data.get("keyTerms") or []
                if isinstance(kt, dict)
            ],
            visual_prompt=str(data.get("visualPrompt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "heading": self.heading,
            "body": self.body,
            "keyTerms": [kt.to_dict() for kt in self.key_terms],
            "visualPrompt": self.visual_prompt,
        }


@dataclass
class MCQ:
    question: str
    options: list[str]
    correct_index: int
    explanation: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MCQ:
        return cls(
            question=str(data.get("question", "")),
            options=[str(o) for o in data.get("options") or []],
            correct_index=int(data.get("correctIndex", 0)),
            explanation=str(data.get("explanation", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "options": self.options,
            "correctIndex": self.correct_index,
            "explanation": self.explanation,
        }


@dataclass
class Lesson:
    topic: str
    subject: str
    grade_level: int
    slides: list[Slide]
    mcqs: list[MCQ]
    id: str | None = None
    created_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Lesson:
        return cls(
            topic=str(data.get("topic", "")),
            subject=str(data.get("subject") or "General"),
            grade_level=int(data.get("grade_level", 8)),
            slides=[Slide.from_dict(s) for s in data.get("slides") or []],
            mcqs=[MCQ.from_dict(q) for q in data.get("mcqs") or []],
            id=data.get("id"),
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "topic": self.topic,
            "subject": self.subject,
            "grade_level": self.grade_level,
            "slides": [s.to_dict() for s in self.slides],
            "mcqs": [q.to_dict() for q in self.mcqs],
            "created_at": self.created_at,
        }


def parse_lesson_content(content: str, topic: str, grade_level: int) -> Lesson:
    """Build a Lesson from the model's reply text.

    Models sometimes wrap the JSON in markdown fences despite being told not
    to; those are stripped before parsing.
    """
    text = _CODE_FENCE.sub("", content).strip()
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError) as exc:
        raise LessonFormatError(f"Lesson content is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise LessonFormatError("Lesson content must be a JSON object")

    try:
        lesson = Lesson.from_dict(
            {
                "topic": topic,
                "subject": data.get("subject"),
                "grade_level": grade_level,
                "slides": data.get("slides"),
                "mcqs": data.get("mcqs"),
            }
        )
    except (AttributeError, TypeError, ValueError) as exc:
        raise LessonFormatError(f"Malformed lesson structure: {exc}") from exc

    if not lesson.slides:
        raise LessonFormatError("Lesson has no slides")
    return lesson


def score_assessment(mcqs: list[MCQ], answers: list[int | None]) -> int:
    """Number of answers matching the correct option. Unanswered is None."""
    return sum(
        1
        for mcq, answer in zip(mcqs, answers)
        if answer is not None and answer == mcq.correct_index
    )
