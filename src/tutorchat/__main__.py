"""Entry point: python -m tutorchat [serve|ask]"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TextIO

import httpx

from .config import TutorConfig
from .logging_config import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Socratic tutor backend and chat client")
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the tutor API server (default)")
    serve.add_argument("--host", default=None, help="Bind host (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: 8080)")

    ask = sub.add_parser("ask", help="Ask doubt questions against a running backend")
    ask.add_argument("questions", nargs="+", help="Questions, asked in order as one chat")
    ask.add_argument("--heading", default="", help="Heading of the slide being studied")
    ask.add_argument("--body", default="", help="Body text of the slide")
    ask.add_argument("--grade", type=int, default=None, help="Grade level (default: 8)")
    ask.add_argument("--backend", default=None, help="Backend base URL")
    args = parser.parse_args()

    config = TutorConfig()
    if args.log_level:
        config.log_level = args.log_level

    if args.command == "ask":
        if args.backend:
            config.backend_url = args.backend
        setup_logging(config.log_dir, config.log_level, echo_stderr=False)
        slide = {"heading": args.heading, "body": args.body, "keyTerms": [], "visualPrompt": ""}
        grade = args.grade if args.grade is not None else config.default_grade_level
        ok = asyncio.run(_ask(config, args.questions, slide, grade))
        sys.exit(0 if ok else 1)

    if getattr(args, "host", None):
        config.host = args.host
    if getattr(args, "port", None):
        config.port = args.port
    setup_logging(config.log_dir, config.log_level)

    from .server import run_server
    run_server(config)


async def _ask(
    config: TutorConfig,
    questions: list[str],
    slide: dict,
    grade_level: int,
    out: TextIO | None = None,
) -> bool:
    """Run one chat turn per question, rendering the stream to ``out`` (stdout)."""
    from .chat.session import ChatSession
    from .chat.terminal import TerminalRenderer

    async with httpx.AsyncClient() as client:
        session = ChatSession(
            client,
            config.ask_doubt_url,
            grade_level=grade_level,
            slide=slide,
            timeout=config.request_timeout,
        )
        queue = session.accumulator.subscribe()
        renderer = TerminalRenderer(out or sys.stdout)
        render_task = asyncio.create_task(renderer.run(queue))
        try:
            for question in questions:
                if not await session.submit(question):
                    return False
                await queue.join()
        finally:
            render_task.cancel()
            renderer.close()
    return True


if __name__ == "__main__":
    main()
