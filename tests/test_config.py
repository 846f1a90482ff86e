"""Tests for configuration and the application context."""

import logging
from pathlib import Path

from streettalk.core.config import Settings
from streettalk.core.context import FEED_TOPIC, AppContext
from streettalk.core.logging import setup_logging
from streettalk.emoji.index import EmojiIndex
from streettalk.feed.models import UserIdentity


def test_settings_defaults():
    s = Settings(_env_file=None)
    assert s.host == "127.0.0.1"
    assert s.port == 51440
    assert s.suggestion_limit == 12
    assert s.feed_limit == 50
    assert s.image_max_width == 1024
    assert s.image_quality == 80
    assert s.sanitizer_enabled is True
    assert s.emoji_dataset_path is None


def test_settings_paths():
    s = Settings(_env_file=None)
    assert s.db_path == s.data_dir / "db" / "streettalk.db"
    assert s.app_log_path == s.data_dir / "logs" / "app.log"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("STREETTALK_PORT", "9000")
    monkeypatch.setenv("STREETTALK_SUGGESTION_LIMIT", "5")
    monkeypatch.setenv("STREETTALK_SANITIZER_ENABLED", "false")
    s = Settings(_env_file=None)
    assert s.port == 9000
    assert s.suggestion_limit == 5
    assert s.sanitizer_enabled is False


def test_context_build(settings: Settings, emoji_index: EmojiIndex):
    ctx = AppContext.build(settings, emoji_index=emoji_index)
    assert ctx.emoji_index is emoji_index
    assert ctx.topic == FEED_TOPIC
    assert ctx.settings.db_path.exists()
    assert not ctx.renderer.sanitizer.ready
    ctx.store.close()


def test_context_uses_dataset_file(tmp_path: Path):
    dataset = tmp_path / "emoji.json"
    dataset.write_text('[{"char": "🦄", "slug": "unicorn"}]', encoding="utf-8")
    s = Settings(data_dir=tmp_path, emoji_dataset_path=dataset, _env_file=None)
    ctx = AppContext.build(s)
    assert [e.shortcode for e in ctx.emoji_index] == ["unicorn"]
    ctx.store.close()


def test_user_identity_defaults():
    user = UserIdentity.new()
    assert user.id.startswith("U")
    assert user.id[1:].isdigit()
    assert user.name == "Stranger"
    assert UserIdentity.new(name="Sam").name == "Sam"


def test_setup_logging_writes_file_and_quiets_parsers(tmp_path: Path):
    log_path = tmp_path / "logs" / "app.log"
    setup_logging("debug", log_path)
    logging.getLogger("streettalk.test").debug("hello log")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("markdown_it").level == logging.WARNING
    assert "hello log" in log_path.read_text(encoding="utf-8")


def test_setup_logging_unknown_level_falls_back_to_info():
    setup_logging("chatty")
    assert logging.getLogger().level == logging.INFO
