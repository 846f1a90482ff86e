"""FastAPI app factory."""

from __future__ import annotations

from fastapi import FastAPI

from streettalk.api.routes import feed_router, router
from streettalk.core.config import Settings
from streettalk.core.context import AppContext
from streettalk.core.events import lifespan


def create_app(settings: Settings | None = None, ctx: AppContext | None = None) -> FastAPI:
    app = FastAPI(
        title="StreetTalk",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = ctx.settings if ctx is not None else settings
    app.state.ctx = ctx
    app.include_router(router)
    app.include_router(feed_router)
    return app
