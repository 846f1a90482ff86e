"""Feed data types: posts, replies, media and the local identity."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class MediaItem:
    """An attachment; ``data`` is a data URL the UI can load directly."""

    kind: str  # "image" | "video"
    data: str

    @property
    def is_video(self) -> bool:
        return self.kind == "video"

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "data": self.data}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MediaItem:
        return cls(kind=data.get("kind", "image"), data=data.get("data", ""))


@dataclass
class Post:
    """A post or a reply. Replies have the same shape, recursively."""

    key: str
    user_id: str
    user: str
    content: str
    timestamp: int
    rendered_html: str = ""
    user_avatar: str = ""
    media: list[MediaItem] = field(default_factory=list)
    votes: frozenset[str] = frozenset()
    replies: list[Post] = field(default_factory=list)

    @property
    def vote_count(self) -> int:
        return len(self.votes)

    def has_voted(self, user_id: str) -> bool:
        return user_id in self.votes

    def to_dict(self) -> dict[str, Any]:
        """Serialize the whole subtree without recursing in Python."""
        root = self._shallow_dict()
        stack = [(self, root)]
        while stack:
            post, out = stack.pop()
            for reply in post.replies:
                child = reply._shallow_dict()
                out["replies"].append(child)
                stack.append((reply, child))
        return root

    def _shallow_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "user_id": self.user_id,
            "user": self.user,
            "user_avatar": self.user_avatar,
            "content": self.content,
            "rendered_html": self.rendered_html,
            "timestamp": self.timestamp,
            "media": [m.to_dict() for m in self.media],
            "votes": sorted(self.votes),
            "vote_count": self.vote_count,
            "replies": [],
        }


@dataclass(frozen=True)
class UserIdentity:
    """Who is posting from this client. Built once, passed explicitly."""

    id: str
    name: str = "Stranger"
    avatar: str = ""

    @classmethod
    def new(cls, name: str = "", avatar: str = "") -> UserIdentity:
        return cls(id=f"U{now_ms()}", name=name or "Stranger", avatar=avatar)

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
