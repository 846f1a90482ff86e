"""Pydantic request/response models for the API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    sanitizer_ready: bool = False
    emoji_count: int = 0


# base64 of a 10 MB attachment plus the data URL header
MAX_DATA_URL_LENGTH = 14 * 1024 * 1024


class MediaItemBody(BaseModel):
    kind: str = Field(..., pattern="^(image|video)$")
    data: str = Field(
        ..., max_length=MAX_DATA_URL_LENGTH, pattern=r"^data:(image|video)/[\w.+-]+;base64,"
    )


class CreatePostBody(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=100)
    user: str = Field(default="Stranger", max_length=100)
    user_avatar: str = ""
    content: str = Field(default="", max_length=10_000)
    media: list[MediaItemBody] = Field(default_factory=list)


class CreateReplyBody(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=100)
    user: str = Field(default="Stranger", max_length=100)
    user_avatar: str = ""
    content: str = Field(..., max_length=10_000)


class VoteBody(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=100)


class VoteResponse(BaseModel):
    key: str
    vote_count: int
    voted: bool


class PreviewBody(BaseModel):
    content: str = Field(default="", max_length=10_000)


class RenderedResponse(BaseModel):
    raw_text: str
    sanitized_html: str
    trusted: bool


class EmojiSuggestion(BaseModel):
    shortcode: str
    glyph: str
    display_name: str
