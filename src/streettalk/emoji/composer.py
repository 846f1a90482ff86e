"""Caret-aware emoji autocomplete for the post composer."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from streettalk.emoji.index import EmojiEntry, EmojiIndex

_CARET_QUERY_RE = re.compile(r":([a-z0-9_+-]+)$", re.IGNORECASE)


def active_query(text: str, caret: int | None = None) -> str | None:
    """Return the partial shortcode typed immediately before the caret."""
    if caret is None:
        caret = len(text)
    m = _CARET_QUERY_RE.search(text[: max(caret, 0)])
    return m.group(1) if m else None


def insert_glyph(text: str, start: int, end: int, glyph: str) -> tuple[str, int]:
    """Replace the active ``:query`` (or the selection) with ``glyph``.

    Returns the new text and the caret position just after the glyph.
    """
    replace_from = start
    query = active_query(text, start)
    if query is not None:
        replace_from = start - len(query) - 1
    new_text = text[:replace_from] + glyph + text[end:]
    return new_text, replace_from + len(glyph)


@dataclass
class SuggestionList:
    """Suggestions shown under the composer, with a highlighted row."""

    entries: list[EmojiEntry] = field(default_factory=list)
    highlighted: int = 0

    @classmethod
    def for_caret(
        cls, index: EmojiIndex, text: str, caret: int | None = None, limit: int = 12
    ) -> SuggestionList:
        query = active_query(text, caret)
        if query is None:
            return cls()
        return cls(entries=index.match(query, limit))

    @property
    def visible(self) -> bool:
        return bool(self.entries)

    @property
    def selected(self) -> EmojiEntry | None:
        if not self.entries:
            return None
        return self.entries[self.highlighted]

    def move(self, step: int) -> None:
        if not self.entries:
            return
        self.highlighted = min(max(self.highlighted + step, 0), len(self.entries) - 1)
