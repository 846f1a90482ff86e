"""Escaping, Markdown rendering and link policy for user posts."""

from __future__ import annotations

import logging
from functools import lru_cache

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

from streettalk.core.errors import UnsafeLink

logger = logging.getLogger(__name__)

SAFE_HREF_PREFIXES = (
    "http://",
    "https://",
    "mailto:",
    "tel:",
    "ftp:",
    "/",
    "./",
    "../",
)
LINK_TARGET = "_blank"
LINK_REL = "noopener noreferrer"


def escape_html(text: str) -> str:
    """Escape ``&``, ``<`` and ``>`` so no user-typed tag survives rendering."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def is_safe_href(href: str | None) -> bool:
    if not href:
        return False
    return href.strip().lower().startswith(SAFE_HREF_PREFIXES)


def check_href(href: str | None) -> str:
    """Return ``href`` if allowed, else raise :class:`UnsafeLink`."""
    if href is None or not is_safe_href(href):
        raise UnsafeLink(href or "")
    return href


def _apply_link_policy(state: StateCore) -> None:
    """Unwrap disallowed anchors and images to their text and harden the rest."""
    for token in state.tokens:
        if token.type != "inline" or not token.children:
            continue
        kept = []
        open_links: list[bool] = []
        for child in token.children:
            if child.type == "link_open":
                try:
                    check_href(str(child.attrGet("href") or ""))
                except UnsafeLink as e:
                    logger.debug("Dropping anchor: %s", e)
                    open_links.append(False)
                    continue
                child.attrSet("target", LINK_TARGET)
                child.attrSet("rel", LINK_REL)
                open_links.append(True)
            elif child.type == "image" and not is_safe_href(str(child.attrGet("src") or "")):
                logger.debug("Dropping image: %s", child.attrGet("src"))
                kept.append(Token("text", "", 0, content=child.content))
                continue
            elif child.type == "link_close":
                if open_links and not open_links.pop():
                    continue
            kept.append(child)
        token.children = kept


def _accept_destination(url: str) -> bool:
    return True


@lru_cache
def markdown_renderer() -> MarkdownIt:
    """Return the shared renderer: CommonMark + GFM extras, soft breaks on."""
    md = MarkdownIt("commonmark", {"html": False, "breaks": True, "linkify": True})
    md.enable(["table", "strikethrough", "linkify"])
    # Every destination must reach the link policy as a link token
    md.validateLink = _accept_destination
    md.core.ruler.push("link_policy", _apply_link_policy)
    return md


def render_markdown(text: str) -> str:
    """Render already-escaped text to HTML with the link policy applied."""
    return markdown_renderer().render(text)
