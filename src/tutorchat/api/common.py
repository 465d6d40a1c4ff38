"""Helpers shared by the HTTP handlers."""

from __future__ import annotations

import json
from typing import Any

from aiohttp import web

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
}


class BadRequest(Exception):
    """Request body failed validation; reported as 400."""


def json_error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def read_json_object(request: web.Request) -> dict[str, Any]:
    """Parse the request body as a JSON object, raising BadRequest otherwise."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, ValueError) as exc:
        raise BadRequest(f"Invalid JSON body: {exc}") from exc
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    return body


def grade_level_from(body: dict[str, Any], default: int) -> int:
    value = body.get("gradeLevel", default)
    # bool is an int subclass, and int() would truncate 8.7
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise BadRequest(f"Invalid gradeLevel: {value!r}")
    try:
        grade = int(value)
    except (TypeError, ValueError) as exc:
        raise BadRequest(f"Invalid gradeLevel: {value!r}") from exc
    if grade < 1:
        raise BadRequest(f"Invalid gradeLevel: {value!r}")
    return grade


@web.middleware
async def cors_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
    """Answer preflight requests and stamp CORS headers on every response.

    Router errors (404, 405) are raised as ``web.HTTPException``; they get the
    headers too before propagating.
    """
    if request.method == "OPTIONS":
        return web.Response(headers=CORS_HEADERS)
    try:
        response = await handler(request)
    except BadRequest as exc:
        response = json_error(400, str(exc))
    except web.HTTPException as exc:
        exc.headers.update(CORS_HEADERS)
        raise
    if not response.prepared:
        response.headers.update(CORS_HEADERS)
    return response
