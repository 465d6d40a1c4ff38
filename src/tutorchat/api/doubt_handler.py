"""POST /functions/v1/ask-doubt — Socratic doubt answering over a relayed SSE stream."""

from __future__ import annotations

import httpx
import structlog
from aiohttp import web

from tutorchat.config import TutorConfig
from tutorchat.tutor.gateway import GatewayClient, GatewayError
from tutorchat.tutor.prompts import build_doubt_messages, detect_struggle

from .common import CORS_HEADERS, BadRequest, grade_level_from, json_error, read_json_object

log = structlog.get_logger()


class DoubtHandler:
    """Builds the tutor prompt and pipes the gateway's token stream to the client."""

    def __init__(self, config: TutorConfig, gateway: GatewayClient) -> None:
        self.config = config
        self.gateway = gateway

    async def handle(self, request: web.Request) -> web.StreamResponse:
        body = await read_json_object(request)
        question = str(body.get("question") or "").strip()
        if not question:
            raise BadRequest("Question is required")
        grade_level = grade_level_from(body, self.config.default_grade_level)

        slide = body.get("slideContent")
        if not isinstance(slide, dict):
            slide = None
        history = [
            m for m in body.get("chatHistory") or []
            if isinstance(m, dict) and m.get("role") in ("user", "assistant")
        ]
        messages = build_doubt_messages(question, slide, grade_level, history)

        log.info(
            "doubt_received",
            grade_level=grade_level,
            heading=(slide or {}).get("heading"),
            history_len=len(history),
            struggling=detect_struggle(history),
        )

        try:
            async with self.gateway.stream(messages) as upstream:
                client_response = web.StreamResponse(
                    status=200,
                    headers={
                        **CORS_HEADERS,
                        "content-type": "text/event-stream",
                        "cache-control": "no-cache",
                    },
                )
                await client_response.prepare(request)
                await self._relay(upstream, client_response)
        except GatewayError as exc:
            return json_error(exc.client_status, exc.message)

        await client_response.write_eof()
        return client_response

    async def _relay(
        self,
        upstream: httpx.Response,
        client_response: web.StreamResponse,
    ) -> None:
        """Copy upstream bytes to the client as they arrive.

        Once headers are sent an error can no longer become a JSON reply; the
        stream is cut short instead and the client treats it as exhausted.
        """
        total_bytes = 0
        try:
            async for chunk in upstream.aiter_bytes():
                total_bytes += len(chunk)
                if total_bytes > self.config.max_stream_bytes:
                    log.error("doubt_stream_overflow", total_bytes=total_bytes)
                    return
                await client_response.write(chunk)
        except httpx.HTTPError as exc:
            log.error("doubt_stream_interrupted", total_bytes=total_bytes, error=str(exc))
            return
        except ConnectionResetError:
            log.info("doubt_client_disconnected", total_bytes=total_bytes)
            return

        log.debug("doubt_stream_complete", total_bytes=total_bytes)
