"""Loguru configuration shared by the API and the CLI."""

from __future__ import annotations

import sys

from fastapi import Request
from loguru import logger

from testgen.config.settings import settings


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> | {extra}"
)


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with a single stderr sink."""
    logger.remove()
    logger.add(sys.stderr, level=(level or settings.log_level).upper(), format=LOG_FORMAT)


configure_logging()

app_logger = logger.bind(component="api")


def log_request_start(request: Request) -> None:
    client = request.client.host if request.client else None
    app_logger.bind(client=client).info(f"Request started: {request.method} {request.url.path}")


def log_request_end(request: Request, status_code: int, process_time: float) -> None:
    app_logger.info(
        f"Request completed: {request.method} {request.url.path} | status={status_code} | time={process_time:.3f}s"
    )


def log_request_error(request: Request, error: Exception, process_time: float) -> None:
    app_logger.error(
        f"Request failed: {request.method} {request.url.path} | error={error!r} | time={process_time:.3f}s"
    )
