"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from streettalk.core.config import Settings
from streettalk.core.context import AppContext
from streettalk.emoji.index import EmojiIndex, build_index
from streettalk.feed.store import FeedStore
from streettalk.render.pipeline import ContentRenderer
from streettalk.render.sanitizer import SanitizerLoader

DATASET = [
    {"char": "🔥", "slug": "fire"},
    {"char": "😀", "slug": "smile", "short_names": ["happy"]},
    {"char": "🚒", "slug": "fire_engine", "name": "Fire Engine"},
    {"char": "🎆", "slug": "fireworks"},
    {"char": "🙂", "slug": "slightly smiling face"},
    {"char": "🐈", "slug": "cat", "name": "Kitty Cat"},
    {"char": "👍", "slug": "thumbs_up", "short_names": ["+1", "thumbsup"]},
]


@pytest.fixture
def emoji_index() -> EmojiIndex:
    return build_index(DATASET)


@pytest.fixture
def renderer(emoji_index: EmojiIndex) -> ContentRenderer:
    sanitizer = SanitizerLoader()
    sanitizer.load_now()
    return ContentRenderer(emoji_index, sanitizer)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Create Settings pointing at a temp data directory."""
    return Settings(data_dir=tmp_path, log_level="DEBUG", _env_file=None)


@pytest.fixture
def store(tmp_path: Path):
    s = FeedStore(tmp_path / "db" / "feed.db")
    yield s
    s.close()


@pytest.fixture
def ctx(settings: Settings, emoji_index: EmojiIndex) -> AppContext:
    context = AppContext.build(settings, emoji_index=emoji_index)
    context.renderer.sanitizer.load_now()
    return context
