"""aiohttp application factory, routes, and lifecycle."""

from __future__ import annotations

import asyncio

import httpx
import structlog
from aiohttp import web

from .api.common import cors_middleware
from .api.doubt_handler import DoubtHandler
from .api.lesson_handler import LessonHandler
from .config import TutorConfig
from .store.db import Database
from .tutor.gateway import GatewayClient

log = structlog.get_logger()


async def create_app(
    config: TutorConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> web.Application:
    """Create and configure the aiohttp application.

    Args:
        config: Tutor configuration. Defaults to TutorConfig().
        http_client: Optional pre-configured httpx client for the gateway
            (for testing). Must carry the gateway base URL.
    """
    if config is None:
        config = TutorConfig()

    app = web.Application(middlewares=[cors_middleware])
    app["config"] = config

    if http_client is None:
        http_client = httpx.AsyncClient(
            base_url=config.gateway_url,
            http2=True,
            follow_redirects=True,
        )
    app["http_client"] = http_client

    gateway = GatewayClient(
        http_client,
        api_key=config.gateway_api_key,
        model=config.model,
        timeout=config.request_timeout,
    )
    app["gateway"] = gateway

    db = Database(config.db_path)
    app["db"] = db

    doubts = DoubtHandler(config, gateway)
    lessons = LessonHandler(config, gateway, db)

    app.router.add_post("/functions/v1/ask-doubt", doubts.handle)
    app.router.add_post("/functions/v1/generate-lesson", lessons.generate)
    app.router.add_get("/lessons", lessons.list_lessons)
    app.router.add_get("/lessons/{id}", lessons.get_lesson)
    app.router.add_delete("/lessons/{id}", lessons.delete_lesson)
    app.router.add_get("/health", handle_health)

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    return app


async def on_startup(app: web.Application) -> None:
    """Initialize resources on startup."""
    db: Database = app["db"]
    await db.connect()
    config: TutorConfig = app["config"]
    log.info(
        "server_started",
        config=config.model_dump(exclude={"gateway_api_key"}),
        gateway_key_configured=bool(config.gateway_api_key),
    )


async def on_cleanup(app: web.Application) -> None:
    """Clean up resources on shutdown."""
    await app["http_client"].aclose()
    db: Database = app["db"]
    await db.close()
    log.info("server_stopped")


async def handle_health(request: web.Request) -> web.Response:
    """GET /health — health check endpoint."""
    config: TutorConfig = request.app["config"]
    return web.json_response({
        "status": "ok",
        "model": config.model,
        "gateway_key_configured": bool(config.gateway_api_key),
    })


def run_server(config: TutorConfig | None = None) -> None:
    """Run the tutor API server (blocking)."""
    if config is None:
        config = TutorConfig()

    async def _run() -> None:
        app = await create_app(config)
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, host=config.host, port=config.port)
        await site.start()
        log.info("server_listening", host=config.host, port=config.port)

        try:
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()

    asyncio.run(_run())
