"""Raw emoji datasets: JSON files and the table bundled with ``emoji``."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import emoji

from streettalk.core.config import Settings
from streettalk.emoji.index import EmojiIndex, build_index

logger = logging.getLogger(__name__)


def load_dataset(path: Path) -> list[Any]:
    """Load an emoji.json-style array of records. Returns [] on any failure."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Failed to load emoji dataset %s: %s", path, e)
        return []
    if not isinstance(data, list):
        logger.warning("Emoji dataset %s is not a JSON array", path)
        return []
    return data


def _strip_colons(code: str) -> str:
    return code.strip(":")


def bundled_dataset() -> list[dict[str, Any]]:
    """Convert ``emoji.EMOJI_DATA`` into dataset records.

    Only fully-qualified sequences are kept so each name maps to the glyph
    a keyboard would produce.
    """
    fully_qualified = emoji.STATUS["fully_qualified"]
    records: list[dict[str, Any]] = []
    for glyph, data in emoji.EMOJI_DATA.items():
        if data.get("status") != fully_qualified:
            continue
        en = data.get("en")
        if not en:
            continue
        slug = _strip_colons(en)
        records.append(
            {
                "char": glyph,
                "slug": slug,
                "name": slug.replace("_", " "),
                "short_names": [_strip_colons(a) for a in data.get("alias", [])],
            }
        )
    return records


def default_index(settings: Settings) -> EmojiIndex:
    """Build the process-wide index from the configured source."""
    if settings.emoji_dataset_path:
        logger.info("Loading emoji dataset from %s", settings.emoji_dataset_path)
        return build_index(load_dataset(settings.emoji_dataset_path))
    return build_index(bundled_dataset())
