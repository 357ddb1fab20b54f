"""
Syntax-tree cleanup of converted Markdown.

The document is parsed with mistune into a token tree. Each level is
processed in two phases: every child is first cleaned and turned into a
decision (keep, replace, drop), then the child list is rebuilt from the
decisions. Nothing is spliced out of a list while it is being walked.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List

import mistune
import structlog
from mistune.renderers.markdown import MarkdownRenderer

from pagesift.config.config import MarkdownSettings

logger = structlog.get_logger(__name__)

Token = Dict[str, Any]

BARE_DOMAIN_PATTERN = re.compile(r"^https?://[^\s/]+$")
PUNCTUATION_ONLY = re.compile(r"^[,.;:!?\s\-–—]*$")
SPACE_RUN = re.compile(r"[ \t]{3,}")
NEWLINE_RUN = re.compile(r"\n{4,}")

HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&amp;", "&"),
)

TEXT_CONTAINERS = ("paragraph", "block_text")
NESTED_BLOCKS = ("list", "block_quote")
MIN_HEADING_CHARS = 3
MIN_LIST_ITEM_CHARS = 3


class _Renderer(MarkdownRenderer):
    """Markdown renderer that writes thematic breaks as ``---``."""

    def thematic_break(self, token: Token, state: Any) -> str:
        return "---\n\n"


def plain_text(tokens: List[Token]) -> str:
    """Concatenated raw text of a token list."""
    parts: List[str] = []
    for token in tokens:
        if "raw" in token and token["type"] in ("text", "codespan"):
            parts.append(token["raw"])
        elif token.get("children"):
            parts.append(plain_text(token["children"]))
    return "".join(parts)


class MarkdownArtifactCleaner:
    """Removes malformed links and images, empty headings and list items, and stray text."""

    def __init__(self, settings: MarkdownSettings):
        self.max_url_length = settings.max_link_url_length
        self._markdown = mistune.create_markdown(renderer=None)
        self.logger = logger.bind(component="artifact_cleaner")

    def clean(self, markdown: str) -> str:
        """Return the cleaned document, or the input unchanged if cleaning fails."""
        try:
            tokens, state = self._markdown.parse(markdown)
            cleaned = self._clean_children(tokens)
            rendered = _Renderer()(cleaned, state)
        except Exception as e:
            self.logger.warning("Markdown cleanup failed, keeping input", error=str(e))
            return markdown
        return NEWLINE_RUN.sub("\n\n\n", rendered).strip()

    # -- tree walk -------------------------------------------------------

    def _clean_children(self, tokens: List[Token]) -> List[Token]:
        decisions = [self._decide(token) for token in tokens]
        rebuilt: List[Token] = []
        last = len(decisions) - 1
        for index, replacement in enumerate(decisions):
            if replacement is None:
                # Keep words on either side of a dropped inline separator apart
                if 0 < index < last and tokens[index]["type"] == "text":
                    rebuilt.append({"type": "text", "raw": " "})
                continue
            rebuilt.extend(replacement)
        return rebuilt

    def _decide(self, token: Token) -> List[Token] | None:
        """Cleaned replacement tokens for ``token``, or None to drop it."""
        kind = token.get("type")
        if kind == "text":
            return self._decide_text(token)

        if "children" in token:
            token = {**token, "children": self._clean_children(token["children"])}

        if kind == "link":
            return self._decide_link(token)
        if kind == "image":
            return self._decide_image(token)
        if kind == "heading":
            return [token] if len(plain_text(token["children"]).strip()) >= MIN_HEADING_CHARS else None
        if kind == "list_item":
            return [token] if self._has_item_content(token) else None
        if kind == "list":
            return [token] if token["children"] else None
        if kind in TEXT_CONTAINERS and not token["children"]:
            return None
        return [token]

    def _decide_text(self, token: Token) -> List[Token] | None:
        value = token.get("raw", "")
        for entity, replacement in HTML_ENTITIES:
            value = value.replace(entity, replacement)
        value = SPACE_RUN.sub("  ", value)
        if not value.strip() or PUNCTUATION_ONLY.match(value):
            return None
        return [{**token, "raw": value}]

    def _is_bad_url(self, url: str) -> bool:
        return (
            not url
            or any(ch.isspace() for ch in url)
            or url.lower().startswith("javascript:")
            or url == "#"
            or bool(BARE_DOMAIN_PATTERN.match(url))
            or len(url) > self.max_url_length
        )

    def _decide_link(self, token: Token) -> List[Token] | None:
        url = token.get("attrs", {}).get("url", "") or ""
        if not self._is_bad_url(url):
            return [token]
        children = token.get("children", [])
        return children if plain_text(children).strip() else None

    @staticmethod
    def _decide_image(token: Token) -> List[Token] | None:
        url = token.get("attrs", {}).get("url", "") or ""
        alt = plain_text(token.get("children", []))
        if not url or any(ch.isspace() for ch in url) or url.lower().startswith("data:") or not alt.strip():
            return None
        return [token]

    @staticmethod
    def _has_item_content(token: Token) -> bool:
        for child in token.get("children", []):
            if child["type"] in TEXT_CONTAINERS and len(plain_text(child.get("children", [])).strip()) > MIN_LIST_ITEM_CHARS:
                return True
            if child["type"] in NESTED_BLOCKS:
                return True
        return False
