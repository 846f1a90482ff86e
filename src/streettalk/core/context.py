"""Process-wide collaborators, built once at startup and passed explicitly."""

from __future__ import annotations

from dataclasses import dataclass

from streettalk.core.config import Settings
from streettalk.emoji.dataset import default_index
from streettalk.emoji.index import EmojiIndex
from streettalk.feed.media import MediaHandler
from streettalk.feed.store import FeedStore
from streettalk.render.pipeline import ContentRenderer
from streettalk.render.sanitizer import SanitizerLoader

FEED_TOPIC = "shouts"


@dataclass(frozen=True)
class AppContext:
    settings: Settings
    emoji_index: EmojiIndex
    renderer: ContentRenderer
    store: FeedStore
    media: MediaHandler
    topic: str = FEED_TOPIC

    @classmethod
    def build(cls, settings: Settings, emoji_index: EmojiIndex | None = None) -> AppContext:
        index = emoji_index if emoji_index is not None else default_index(settings)
        return cls(
            settings=settings,
            emoji_index=index,
            renderer=ContentRenderer(index, SanitizerLoader(enabled=settings.sanitizer_enabled)),
            store=FeedStore(settings.db_path, max_retries=settings.mutate_max_retries),
            media=MediaHandler(
                max_size_mb=settings.max_media_size_mb,
                max_width=settings.image_max_width,
                quality=settings.image_quality,
            ),
        )
