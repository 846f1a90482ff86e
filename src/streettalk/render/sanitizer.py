"""HTML sanitizer stage, loaded once in the background."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from streettalk.core.errors import SanitizerUnavailable

if TYPE_CHECKING:
    from bleach.sanitizer import Cleaner

logger = logging.getLogger(__name__)

ALLOWED_TAGS = frozenset(
    {
        "p", "br", "hr",
        "strong", "b", "em", "i", "s", "del",
        "code", "pre", "blockquote",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "ul", "ol", "li",
        "a", "img",
        "table", "thead", "tbody", "tr", "th", "td",
    }
)
ALLOWED_ATTRIBUTES = {
    "a": ["href", "title", "target", "rel"],
    "img": ["src", "alt", "title"],
    "ol": ["start"],
    "code": ["class"],
}
ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto", "tel", "ftp"})


def build_cleaner() -> Cleaner:
    from bleach.sanitizer import Cleaner

    return Cleaner(
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )


class SanitizerLoader:
    """Holds the sanitizer once it is ready.

    :meth:`load` may be awaited any number of times; the cleaner is built
    off the event loop exactly once. Until it succeeds, :meth:`sanitize`
    raises :class:`SanitizerUnavailable`.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._cleaner: Cleaner | None = None
        self._pending: asyncio.Task[None] | None = None

    @property
    def ready(self) -> bool:
        return self._cleaner is not None

    async def load(self) -> bool:
        if self.ready or not self._enabled:
            return self.ready
        # A load cancelled at shutdown leaves a finished task behind
        if self._pending is None or self._pending.done():
            self._pending = asyncio.get_running_loop().create_task(self._build())
        await self._pending
        return self.ready

    async def _build(self) -> None:
        try:
            self._cleaner = await asyncio.to_thread(build_cleaner)
            logger.info("HTML sanitizer ready")
        except Exception:
            logger.exception("HTML sanitizer failed to load; rendering stays degraded")
        finally:
            self._pending = None

    def load_now(self) -> bool:
        """Build the sanitizer synchronously (CLI and tests)."""
        if self._enabled and not self.ready:
            self._cleaner = build_cleaner()
        return self.ready

    def sanitize(self, html: str) -> str:
        if self._cleaner is None:
            raise SanitizerUnavailable("sanitizer not loaded")
        return self._cleaner.clean(html)
