"""Emoji shortcode index, autocomplete matcher and shortcode expansion."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from streettalk.core.errors import MalformedDatasetRecord

logger = logging.getLogger(__name__)

# Candidate fields, in priority order, across the emoji.json / emoji-mart shapes
GLYPH_FIELDS = ("char", "emoji", "native")
NAME_FIELDS = ("slug", "short_name", "name")
ALIAS_FIELD = "short_names"

_WHITESPACE_RE = re.compile(r"\s+")
SHORTCODE_RE = re.compile(r":([a-z0-9_+-]+):?", re.IGNORECASE)


@dataclass(frozen=True)
class EmojiEntry:
    shortcode: str
    glyph: str
    display_name: str


def normalize_shortcode(name: str) -> str:
    """Trim, collapse whitespace runs to ``_`` and lowercase."""
    return _WHITESPACE_RE.sub("_", name.strip()).lower()


def _first_populated(record: Mapping[str, Any], fields: Iterable[str]) -> str | None:
    for name in fields:
        value = record.get(name)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _entries_for(record: Any) -> list[EmojiEntry]:
    if not isinstance(record, Mapping):
        raise MalformedDatasetRecord(f"record is not a mapping: {type(record).__name__}")
    glyph = _first_populated(record, GLYPH_FIELDS)
    if glyph is None:
        raise MalformedDatasetRecord("record has no glyph")
    short = _first_populated(record, NAME_FIELDS)
    if short is None:
        raise MalformedDatasetRecord(f"record {glyph!r} has no name")

    shortcode = normalize_shortcode(short)
    if not shortcode:
        raise MalformedDatasetRecord(f"record {glyph!r} has a blank name")
    display = record.get("name")
    entries = [
        EmojiEntry(
            shortcode=shortcode,
            glyph=glyph,
            display_name=display if isinstance(display, str) and display else short,
        )
    ]

    aliases = record.get(ALIAS_FIELD)
    if isinstance(aliases, (list, tuple)):
        for alias in aliases:
            if not isinstance(alias, str):
                continue
            code = normalize_shortcode(alias)
            if code:
                entries.append(EmojiEntry(shortcode=code, glyph=glyph, display_name=alias))
    return entries


class EmojiIndex:
    """Immutable, order-preserving shortcode table.

    Iteration order is first-seen dataset order. Lookups by shortcode go
    through a dict so :meth:`expand` stays linear in the text length.
    """

    __slots__ = ("_entries", "_by_code")

    def __init__(self, entries: Iterable[EmojiEntry] = ()) -> None:
        by_code: dict[str, EmojiEntry] = {}
        for entry in entries:
            by_code.setdefault(entry.shortcode, entry)
        self._by_code = by_code
        self._entries = tuple(by_code.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[EmojiEntry]:
        return iter(self._entries)

    def __contains__(self, shortcode: object) -> bool:
        return shortcode in self._by_code

    def __repr__(self) -> str:
        return f"EmojiIndex({len(self._entries)} entries)"

    @property
    def entries(self) -> tuple[EmojiEntry, ...]:
        return self._entries

    def get(self, shortcode: str) -> EmojiEntry | None:
        return self._by_code.get(shortcode.lower())

    def match(self, query: str, limit: int = 12) -> list[EmojiEntry]:
        """Rank entries for an autocomplete query.

        Entries whose shortcode starts with the query come first, followed by
        entries whose shortcode or display name merely contains it. Both
        buckets keep index order and the result is cut to ``limit``.
        """
        if not query or limit <= 0:
            return []
        q = query.lower()
        starts: list[EmojiEntry] = []
        contains: list[EmojiEntry] = []
        for entry in self._entries:
            if entry.shortcode.startswith(q):
                starts.append(entry)
            elif q in entry.shortcode or q in entry.display_name.lower():
                contains.append(entry)
        return (starts + contains)[:limit]

    def expand(self, text: str) -> str:
        """Replace ``:shortcode:`` tokens with glyphs, leaving unknown ones as-is."""
        if not text:
            return text

        def _replace(m: re.Match[str]) -> str:
            found = self._by_code.get(m.group(1).lower())
            return found.glyph if found else m.group(0)

        return SHORTCODE_RE.sub(_replace, text)


def build_index(dataset: Iterable[Any] | None) -> EmojiIndex:
    """Build an :class:`EmojiIndex` from raw dataset records.

    Malformed records are skipped; the first record to claim a shortcode
    keeps it.
    """
    if not dataset:
        return EmojiIndex()

    entries: list[EmojiEntry] = []
    skipped = 0
    for position, record in enumerate(dataset):
        try:
            entries.extend(_entries_for(record))
        except MalformedDatasetRecord as e:
            skipped += 1
            logger.debug("Skipping emoji record %d: %s", position, e)

    index = EmojiIndex(entries)
    logger.info(
        "Built emoji index: %d shortcodes (%d records skipped)", len(index), skipped
    )
    return index


def match(index: EmojiIndex, query: str, limit: int = 12) -> list[EmojiEntry]:
    return index.match(query, limit)


def expand(index: EmojiIndex, text: str) -> str:
    return index.expand(text)
