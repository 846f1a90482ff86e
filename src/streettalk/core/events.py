"""App startup/shutdown lifecycle events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from streettalk.core.config import Settings, get_settings
from streettalk.core.context import AppContext
from streettalk.core.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    setup_logging(settings.log_level, settings.app_log_path)
    logger.info("StreetTalk starting up (db=%s)", settings.db_path)

    ctx: AppContext | None = getattr(app.state, "ctx", None)
    if ctx is None:
        ctx = AppContext.build(settings)
        app.state.ctx = ctx

    # Posts render in degraded mode until the sanitizer is ready
    sanitizer_task = asyncio.create_task(ctx.renderer.sanitizer.load())

    yield

    if not sanitizer_task.done():
        sanitizer_task.cancel()
    ctx.store.close()
    logger.info("StreetTalk shutting down")
