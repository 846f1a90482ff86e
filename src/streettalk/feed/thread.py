"""Reply trees: assembly, ordering, traversal and vote toggling."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any

from streettalk.feed.models import MediaItem, Post

SORT_MODES = ("new", "top")

VoteMap = dict[str, bool]


def post_from_row(row: dict[str, Any]) -> Post:
    """Build a childless :class:`Post` from a ``posts`` table row."""
    return Post(
        key=row["key"],
        user_id=row.get("user_id") or "",
        user=row.get("user") or "Stranger",
        user_avatar=row.get("user_avatar") or "",
        content=row.get("content") or "",
        rendered_html=row.get("rendered_html") or "",
        timestamp=row.get("timestamp") or 0,
        media=[MediaItem.from_dict(m) for m in row.get("media") or []],
        votes=frozenset(k for k, v in (row.get("votes") or {}).items() if v),
    )


def build_tree(rows: Iterable[dict[str, Any]]) -> list[Post]:
    """Assemble flat rows into root posts with nested replies.

    Rows must carry ``key`` and ``parent`` (None for roots). Replies keep the
    order they appear in ``rows``; replies whose parent is missing are dropped.
    """
    posts: dict[str, Post] = {}
    parents: list[tuple[str, str | None]] = []
    for row in rows:
        post = post_from_row(row)
        posts[post.key] = post
        parents.append((post.key, row.get("parent")))

    roots: list[Post] = []
    for key, parent in parents:
        if parent is None:
            roots.append(posts[key])
        elif parent in posts:
            posts[parent].replies.append(posts[key])
    return roots


def sort_posts(posts: list[Post], mode: str = "new") -> list[Post]:
    """Order root posts; ``new`` = newest first, ``top`` = most votes first."""
    if mode == "top":
        return sorted(posts, key=lambda p: p.vote_count, reverse=True)
    if mode == "new":
        return sorted(posts, key=lambda p: p.timestamp, reverse=True)
    raise ValueError(f"Unknown sort mode: {mode!r} (expected one of {SORT_MODES})")


def walk(
    posts: list[Post], max_depth: int = 32
) -> Iterator[tuple[int, tuple[str, ...], Post]]:
    """Yield ``(depth, key_path, post)`` in display (pre-)order.

    Uses an explicit stack, so thread depth never touches the recursion
    limit. Replies deeper than ``max_depth`` are not visited.
    """
    stack: list[tuple[int, tuple[str, ...], Post]] = [
        (0, (p.key,), p) for p in reversed(posts)
    ]
    while stack:
        depth, path, post = stack.pop()
        yield depth, path, post
        if depth >= max_depth:
            continue
        for reply in reversed(post.replies):
            stack.append((depth + 1, path + (reply.key,), reply))


def vote_path(topic: str, key_path: Iterable[str]) -> str:
    """Storage path of a post's vote set, e.g. ``shouts/a/replies/b/votes``."""
    return f"{topic}/" + "/replies/".join(key_path) + "/votes"


def toggle_vote(voter_id: str) -> Callable[[VoteMap | None], VoteMap]:
    """Return a pure mutation that flips ``voter_id`` in a vote set.

    Safe to re-run on conflict: it never touches its input.
    """

    def _toggle(votes: VoteMap | None) -> VoteMap:
        updated = dict(votes or {})
        if updated.get(voter_id):
            del updated[voter_id]
        else:
            updated[voter_id] = True
        return updated

    return _toggle
