"""Lesson generation and lesson record endpoints."""

from __future__ import annotations

import structlog
from aiohttp import web

from tutorchat.config import TutorConfig
from tutorchat.store.db import Database
from tutorchat.tutor.gateway import GatewayClient, GatewayError
from tutorchat.tutor.lesson import LessonFormatError, parse_lesson_content
from tutorchat.tutor.prompts import build_lesson_messages

from .common import BadRequest, grade_level_from, json_error, read_json_object

log = structlog.get_logger()

MAX_LIST_LIMIT = 100


class LessonHandler:
    """Generates lessons through the gateway and serves the lesson store."""

    def __init__(self, config: TutorConfig, gateway: GatewayClient, db: Database) -> None:
        self.config = config
        self.gateway = gateway
        self.db = db

    async def generate(self, request: web.Request) -> web.Response:
        """POST /functions/v1/generate-lesson"""
        body = await read_json_object(request)
        topic = str(body.get("topic") or "").strip()
        if not topic:
            raise BadRequest("Topic is required")
        grade_level = grade_level_from(body, self.config.default_grade_level)

        log.info("lesson_generation_started", topic=topic, grade_level=grade_level)
        try:
            content = await self.gateway.complete(build_lesson_messages(topic, grade_level))
        except GatewayError as exc:
            return json_error(exc.client_status, exc.message)

        try:
            lesson = parse_lesson_content(content, topic, grade_level)
        except LessonFormatError as exc:
            log.error("lesson_parse_failed", topic=topic, error=str(exc))
            return json_error(502, str(exc))

        lesson_id = await self.db.save_lesson(lesson)
        saved = await self.db.get_lesson(lesson_id) or lesson
        log.info(
            "lesson_generated",
            lesson_id=lesson_id,
            slides=len(saved.slides),
            mcqs=len(saved.mcqs),
        )
        return web.json_response(saved.to_dict())

    async def list_lessons(self, request: web.Request) -> web.Response:
        """GET /lessons?limit=N"""
        raw = request.query.get("limit")
        try:
            limit = int(raw) if raw is not None else self.config.recent_lessons_limit
        except ValueError as exc:
            raise BadRequest(f"Invalid limit: {raw!r}") from exc
        limit = max(1, min(limit, MAX_LIST_LIMIT))
        lessons = await self.db.list_lessons(limit)
        return web.json_response([lesson.to_dict() for lesson in lessons])

    async def get_lesson(self, request: web.Request) -> web.Response:
        """GET /lessons/{id}"""
        lesson = await self.db.get_lesson(request.match_info["id"])
        if lesson is None:
            return json_error(404, "lesson not found")
        return web.json_response(lesson.to_dict())

    async def delete_lesson(self, request: web.Request) -> web.Response:
        """DELETE /lessons/{id}"""
        lesson_id = request.match_info["id"]
        if not await self.db.delete_lesson(lesson_id):
            return json_error(404, "lesson not found")
        return web.json_response({"status": "deleted", "id": lesson_id})
