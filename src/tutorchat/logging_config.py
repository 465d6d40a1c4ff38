"""structlog setup shared by the API server and the terminal chat client."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import TextIO

import structlog

LOG_FILENAME = "tutorchat.jsonl"


class _TeeWriter:
    """File-like sink for structlog's WriteLogger.

    Every JSON line lands in the log file; ``mirror`` (usually stderr) gets a
    copy when set.
    """

    def __init__(self, log_file: TextIO, mirror: TextIO | None = None) -> None:
        self.log_file = log_file
        self.mirror = mirror

    def write(self, message: str) -> None:
        self.log_file.write(message)
        self.log_file.flush()
        if self.mirror is not None:
            self.mirror.write(message)

    def flush(self) -> None:
        self.log_file.flush()
        if self.mirror is not None:
            self.mirror.flush()


def setup_logging(
    log_dir: str = "logs",
    log_level: str = "INFO",
    echo_stderr: bool = True,
) -> None:
    """Send structlog events as JSON lines to ``<log_dir>/tutorchat.jsonl``.

    The server keeps ``echo_stderr`` on. ``tutorchat ask`` turns it off so
    turn and gateway events stay out of the streamed answer on the terminal.
    """
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, LOG_FILENAME)

    # aiohttp.access and httpx log through stdlib logging; rotate hourly, keep 3 days
    rotating = TimedRotatingFileHandler(
        filename=log_path, when="H", interval=1, backupCount=72, utc=True,
    )
    handlers: list[logging.Handler] = [rotating]
    if echo_stderr:
        handlers.append(logging.StreamHandler())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in handlers:
        handler.setLevel(log_level)
        root_logger.addHandler(handler)

    sink = _TeeWriter(
        open(log_path, "a"),  # noqa: SIM115
        sys.stderr if echo_stderr else None,
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level)
        ),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sink),
        cache_logger_on_first_use=True,
    )
