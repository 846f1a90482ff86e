"""Raw post text -> display-ready HTML.

Stages run in a fixed order: shortcode expansion, HTML escaping, Markdown
rendering (with the link policy), then sanitization. When the sanitizer is
not ready the last stage is skipped and the result is marked untrusted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from streettalk.core.errors import SanitizerUnavailable
from streettalk.emoji.index import EmojiIndex
from streettalk.render.markdown import escape_html, render_markdown
from streettalk.render.sanitizer import SanitizerLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedContent:
    raw_text: str
    sanitized_html: str
    trusted: bool = True


class ContentRenderer:
    def __init__(self, index: EmojiIndex, sanitizer: SanitizerLoader) -> None:
        self._index = index
        self._sanitizer = sanitizer

    @property
    def sanitizer(self) -> SanitizerLoader:
        return self._sanitizer

    def render_unsanitized(self, raw_text: str) -> str:
        """Run every stage except sanitization."""
        escaped = escape_html(self._index.expand(raw_text))
        try:
            return render_markdown(escaped)
        except Exception:
            logger.exception("Markdown rendering failed; showing escaped text")
            return f"<p>{escaped}</p>\n"

    def render_sanitized(self, raw_text: str) -> RenderedContent:
        html = self.render_unsanitized(raw_text)
        try:
            return RenderedContent(raw_text, self._sanitizer.sanitize(html))
        except SanitizerUnavailable:
            logger.debug("Sanitizer not ready; rendering in degraded mode")
        except Exception:
            logger.warning("Sanitizer failed; rendering in degraded mode", exc_info=True)
        return RenderedContent(raw_text, html, trusted=False)
