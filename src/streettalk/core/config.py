"""Application configuration via environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "STREETTALK_", "env_file": ".env", "extra": "ignore"}

    # Server
    host: str = "127.0.0.1"
    port: int = 51440

    # Paths
    data_dir: Path = Path("./data")

    # Logging
    log_level: str = "INFO"

    # Emoji; empty path means the table bundled with the `emoji` package
    emoji_dataset_path: Path | None = None
    suggestion_limit: int = 12

    # Feed
    feed_limit: int = 50
    max_reply_depth: int = 32
    mutate_max_retries: int = 25

    # Media
    max_media_size_mb: int = 10
    image_max_width: int = 1024
    image_quality: int = 80

    # Rendering
    sanitizer_enabled: bool = True

    @property
    def db_path(self) -> Path:
        return self.data_dir / "db" / "streettalk.db"

    @property
    def app_log_path(self) -> Path:
        return self.data_dir / "logs" / "app.log"


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
