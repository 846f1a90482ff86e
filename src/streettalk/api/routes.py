"""Feed API routes: posting, replies, votes, emoji and previews."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request

from streettalk.api.schemas import (
    CreatePostBody,
    CreateReplyBody,
    EmojiSuggestion,
    HealthResponse,
    PreviewBody,
    RenderedResponse,
    VoteBody,
    VoteResponse,
)
from streettalk.core.context import AppContext
from streettalk.core.errors import MediaError, MutationConflict
from streettalk.feed.thread import SORT_MODES, sort_posts, toggle_vote, vote_path

logger = logging.getLogger(__name__)

router = APIRouter()
feed_router = APIRouter(prefix="/feed", tags=["feed"])


def _ctx(request: Request) -> AppContext:
    return request.app.state.ctx


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    ctx = _ctx(request)
    return HealthResponse(
        sanitizer_ready=ctx.renderer.sanitizer.ready,
        emoji_count=len(ctx.emoji_index),
    )


# -- Posts -------------------------------------------------------------------

@feed_router.get("/posts")
async def get_posts(request: Request, sort: str = "new", limit: int | None = None):
    ctx = _ctx(request)
    if sort not in SORT_MODES:
        raise HTTPException(status_code=400, detail=f"Unknown sort '{sort}'")
    posts = ctx.store.snapshot(ctx.topic, limit=limit or ctx.settings.feed_limit)
    return [p.to_dict() for p in sort_posts(posts, sort)]


@feed_router.post("/posts")
async def create_post(request: Request, body: CreatePostBody):
    ctx = _ctx(request)
    raw = body.content.strip()
    if not raw and not body.media:
        raise HTTPException(status_code=400, detail="Post is empty")

    rendered = ctx.renderer.render_sanitized(raw)
    if not rendered.trusted:
        logger.info("Storing post rendered without sanitizer")
    key = ctx.store.append(
        ctx.topic,
        {
            "user_id": body.user_id,
            "user": body.user or "Stranger",
            "user_avatar": body.user_avatar,
            "content": rendered.raw_text,
            "rendered_html": rendered.sanitized_html,
            "media": [m.model_dump() for m in body.media],
        },
    )
    return ctx.store.get_post(key).to_dict()


@feed_router.post("/posts/{key}/replies")
async def create_reply(request: Request, key: str, body: CreateReplyBody):
    ctx = _ctx(request)
    raw = body.content.strip()
    if not raw:
        raise HTTPException(status_code=400, detail="Reply is empty")
    if ctx.store.get_post(key) is None:
        raise HTTPException(status_code=404, detail=f"Post '{key}' not found")

    rendered = ctx.renderer.render_sanitized(raw)
    reply_key = ctx.store.append(
        ctx.topic,
        {
            "parent": key,
            "user_id": body.user_id,
            "user": body.user or "Stranger",
            "user_avatar": body.user_avatar,
            "content": rendered.raw_text,
            "rendered_html": rendered.sanitized_html,
        },
    )
    return ctx.store.get_post(reply_key).to_dict()


@feed_router.post("/posts/{key}/vote", response_model=VoteResponse)
async def toggle_post_vote(request: Request, key: str, body: VoteBody) -> VoteResponse:
    ctx = _ctx(request)
    located = ctx.store.key_path(key)
    if located is None or located[0] != ctx.topic:
        raise HTTPException(status_code=404, detail=f"Post '{key}' not found")
    topic, chain = located
    try:
        votes = ctx.store.atomic_mutate(vote_path(topic, chain), toggle_vote(body.user_id))
    except MutationConflict as e:
        logger.warning("Vote toggle on %s failed: %s", key, e)
        raise HTTPException(status_code=409, detail=str(e)) from e
    return VoteResponse(key=key, vote_count=len(votes), voted=body.user_id in votes)


# -- Media -------------------------------------------------------------------

async def _read_limited(request: Request, max_bytes: int) -> bytes:
    """Read the body, stopping as soon as it exceeds ``max_bytes``."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise HTTPException(status_code=400, detail=f"Attachment too large (max {max_bytes} bytes)")
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise HTTPException(status_code=400, detail=f"Attachment too large (max {max_bytes} bytes)")
    return bytes(body)


@feed_router.post("/media")
async def upload_media(request: Request):
    """Accept a raw upload body; the Content-Type header names the media type."""
    ctx = _ctx(request)
    data = await _read_limited(request, ctx.settings.max_media_size_mb * 1024 * 1024)
    try:
        item = ctx.media.load_attachment(data, request.headers.get("content-type", ""))
    except MediaError as e:
        # Only this attachment is rejected; the composer keeps the rest
        raise HTTPException(status_code=400, detail=str(e)) from e
    return item.to_dict()


# -- Emoji / preview ---------------------------------------------------------

@feed_router.get("/emoji", response_model=list[EmojiSuggestion])
async def suggest_emoji(request: Request, q: str = "", limit: int | None = None):
    ctx = _ctx(request)
    entries = ctx.emoji_index.match(q, ctx.settings.suggestion_limit if limit is None else limit)
    return [
        EmojiSuggestion(shortcode=e.shortcode, glyph=e.glyph, display_name=e.display_name)
        for e in entries
    ]


@feed_router.post("/preview", response_model=RenderedResponse)
async def preview(request: Request, body: PreviewBody) -> RenderedResponse:
    rendered = _ctx(request).renderer.render_sanitized(body.content)
    return RenderedResponse(
        raw_text=rendered.raw_text,
        sanitized_html=rendered.sanitized_html,
        trusted=rendered.trusted,
    )
