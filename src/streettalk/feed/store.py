"""SQLite store for the realtime feed.

Posts and replies share one table; a reply points at its parent by key.
Writers notify in-process subscribers so feeds re-render from fresh
snapshots. Vote sets change only through :meth:`FeedStore.atomic_mutate`,
which retries the caller's pure mutation on version conflicts.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import uuid
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

import sqlite_utils

from streettalk.core.errors import MutationConflict
from streettalk.feed.models import MediaItem, Post, now_ms
from streettalk.feed.thread import VoteMap, build_tree

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = ("votes",)


def _rows_to_dicts(cursor) -> list[dict]:
    """Convert raw cursor rows to list of dicts."""
    cols = [d[0] for d in cursor.description]
    return [dict(zip(cols, row)) for row in cursor.fetchall()]


def _decode(row: dict[str, Any]) -> dict[str, Any]:
    row["media"] = json.loads(row.get("media") or "[]")
    row["votes"] = json.loads(row.get("votes") or "{}")
    return row


def parse_path(path: str) -> tuple[str, str, str]:
    """Split ``topic/key(/replies/key)*/field`` into (topic, key, field)."""
    parts = [p for p in path.strip("/").split("/") if p]
    if len(parts) < 3 or len(parts) % 2 == 0:
        raise ValueError(f"Malformed path: {path!r}")
    topic, keys, field = parts[0], parts[1:-1], parts[-1]
    if any(sep != "replies" for sep in keys[1::2]):
        raise ValueError(f"Malformed path: {path!r}")
    if field not in MUTABLE_FIELDS:
        raise ValueError(f"Field {field!r} cannot be mutated")
    return topic, keys[-1], field


class FeedStore:
    """Persistent feed backed by SQLite."""

    def __init__(self, db_path: Path, max_retries: int = 25) -> None:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = sqlite_utils.Database(sqlite3.connect(str(db_path), check_same_thread=False))
        self._max_retries = max_retries
        self._listeners: dict[str, set[asyncio.Queue[None]]] = {}
        self._ensure_table()

    def _ensure_table(self) -> None:
        if "posts" not in self._db.table_names():
            self._db["posts"].create(
                {
                    "key": str,
                    "topic": str,
                    "parent": str,
                    "user_id": str,
                    "user": str,
                    "user_avatar": str,
                    "content": str,
                    "rendered_html": str,
                    "media": str,
                    "timestamp": int,
                    "votes": str,
                    "version": int,
                },
                pk="key",
                not_null={"topic", "content", "timestamp"},
            )
            self._db.execute(
                "CREATE INDEX IF NOT EXISTS idx_posts_topic_ts ON posts(topic, timestamp)"
            )

    def close(self) -> None:
        self._db.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def append(self, topic: str, record: dict[str, Any]) -> str:
        """Insert a post (or a reply when ``record["parent"]`` is set).

        Returns the newly assigned key. Raises KeyError if the parent does
        not exist in ``topic``.
        """
        parent = record.get("parent")
        if parent is not None and self._topic_of(parent) != topic:
            raise KeyError(parent)

        media = [
            m.to_dict() if isinstance(m, MediaItem) else dict(m)
            for m in record.get("media") or []
        ]
        key = uuid.uuid4().hex
        row = {
            "key": key,
            "topic": topic,
            "parent": parent,
            "user_id": record.get("user_id", ""),
            "user": record.get("user", ""),
            "user_avatar": record.get("user_avatar", ""),
            "content": record.get("content", ""),
            "rendered_html": record.get("rendered_html", ""),
            "media": json.dumps(media),
            "timestamp": record.get("timestamp") or now_ms(),
            "votes": "{}",
            "version": 0,
        }
        self._db["posts"].insert(row)
        logger.debug("Appended %s to %s (parent=%s)", key, topic, parent)
        self._notify(topic)
        return key

    def atomic_mutate(
        self, path: str, fn: Callable[[VoteMap | None], VoteMap | None]
    ) -> VoteMap:
        """Apply ``fn`` to the value at ``path`` with compare-and-swap.

        ``fn`` gets a fresh copy of the current value (None when empty) and
        may be called several times if other writers get in first. Returns
        the value that was written.
        """
        topic, key, field = parse_path(path)
        for attempt in range(1, self._max_retries + 1):
            rows = _rows_to_dicts(
                self._db.execute(
                    f"SELECT {field}, version FROM posts WHERE key = ? AND topic = ?",
                    [key, topic],
                )
            )
            if not rows:
                raise KeyError(key)
            current = json.loads(rows[0][field] or "{}") or None
            updated = fn(current) or {}
            with self._db.conn:
                cursor = self._db.execute(
                    f"UPDATE posts SET {field} = ?, version = version + 1 "
                    "WHERE key = ? AND version = ?",
                    [json.dumps(updated), key, rows[0]["version"]],
                )
            if cursor.rowcount == 1:
                self._notify(topic)
                return updated
            logger.debug("Conflict on %s (attempt %d), retrying", path, attempt)
        raise MutationConflict(f"Gave up on {path} after {self._max_retries} attempts")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _topic_of(self, key: str) -> str | None:
        row = self._db.execute("SELECT topic FROM posts WHERE key = ?", [key]).fetchone()
        return row[0] if row else None

    def get_post(self, key: str) -> Post | None:
        """Return a single post (without replies) by key, or None."""
        rows = _rows_to_dicts(self._db.execute("SELECT * FROM posts WHERE key = ?", [key]))
        if not rows:
            return None
        row = _decode(rows[0])
        row["parent"] = None
        return build_tree([row])[0]

    def key_path(self, key: str) -> tuple[str, list[str]] | None:
        """Return ``(topic, [root_key, ..., key])`` for a post, or None."""
        chain: list[str] = []
        topic = None
        current: str | None = key
        while current is not None:
            row = self._db.execute(
                "SELECT topic, parent FROM posts WHERE key = ?", [current]
            ).fetchone()
            if row is None:
                return None
            chain.append(current)
            topic, current = row[0], row[1]
        chain.reverse()
        return topic, chain

    def snapshot(self, topic: str, limit: int = 50) -> list[Post]:
        """Return the last ``limit`` root posts of ``topic`` with their replies.

        Roots come back oldest first, like the underlying query.
        """
        rows = _rows_to_dicts(
            self._db.execute(
                "SELECT * FROM posts WHERE topic = ? ORDER BY timestamp ASC, rowid ASC",
                [topic],
            )
        )
        roots = build_tree(_decode(r) for r in rows)
        return roots[-limit:] if limit > 0 else []

    async def subscribe(self, topic: str, limit: int = 50) -> AsyncIterator[list[Post]]:
        """Yield the current snapshot, then a fresh one after every change."""
        queue: asyncio.Queue[None] = asyncio.Queue()
        self._listeners.setdefault(topic, set()).add(queue)
        try:
            yield self.snapshot(topic, limit)
            while True:
                await queue.get()
                # Collapse bursts of writes into one snapshot
                while not queue.empty():
                    queue.get_nowait()
                yield self.snapshot(topic, limit)
        finally:
            self._listeners[topic].discard(queue)

    def _notify(self, topic: str) -> None:
        for queue in self._listeners.get(topic, ()):
            queue.put_nowait(None)
