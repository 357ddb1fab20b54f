"""
DOM-level boilerplate removal.

A static deny-list of CSS selectors is applied destructively, in list order,
once on the whole document before content extraction and once more on the
extracted body.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)

BOILERPLATE_SELECTORS: tuple[str, ...] = (
    # Page chrome
    ".share",
    ".social",
    ".ad",
    ".promo",
    ".footer",
    ".related",
    ".tags",
    ".author-box",
    "nav",
    "form",
    "footer",
    "[hidden]",
    '[aria-hidden="true"]',
    # Cookie, privacy and consent
    '[class*="cookie"]',
    '[id*="cookie"]',
    '[class*="consent"]',
    '[class*="gdpr"]',
    '[class*="privacy"]',
    '[class*="banner"]',
    # Popups and modals
    '[class*="popup"]',
    '[class*="modal"]',
    '[class*="overlay"]',
    '[class*="lightbox"]',
    '[role="dialog"]',
    '[aria-modal="true"]',
    # Advertising
    '[class*="ad-"]',
    '[class*="ads"]',
    "[data-ad]",
    "[data-google-ad]",
    'iframe[src*="doubleclick"]',
    'iframe[src*="googlesyndication"]',
    # Engagement
    '[class*="follow"]',
    '[class*="subscribe"]',
    '[class*="newsletter"]',
    '[class*="signup"]',
    # Navigation widgets
    '[class*="breadcrumb"]',
    '[class*="pagination"]',
    '[class*="sidebar"]',
    '[class*="widget"]',
    "header",
    "aside",
    ".header",
    ".sidebar",
    # Comments
    '[class*="comment"]',
    '[class*="discuss"]',
)

# Never removed even when a selector matches them
PROTECTED_TAGS = frozenset({"html", "body", "[document]"})

SANITIZE_TAGS = ("style", "noscript", "template")

JSON_LD_TYPE = "application/ld+json"


def remove_boilerplate(root: BeautifulSoup | Tag, extra_selectors: Iterable[str] = ()) -> int:
    """
    Remove every element matching the deny-list from ``root``.

    Returns the number of removed subtrees.
    """
    selectors: Sequence[str] = BOILERPLATE_SELECTORS + tuple(extra_selectors)
    removed = 0
    for selector in selectors:
        for element in root.select(selector):
            # Already gone with an ancestor matched by an earlier selector
            if element.decomposed or element.name in PROTECTED_TAGS:
                continue
            element.decompose()
            removed += 1
    if removed:
        logger.debug("Removed boilerplate", elements=removed)
    return removed


def pre_sanitize(soup: BeautifulSoup | Tag, keep_json_ld: bool = True) -> None:
    """Drop scripts, styles and other non-content tags. JSON-LD survives unless ``keep_json_ld`` is off."""
    for script in soup.find_all("script"):
        if keep_json_ld and (script.get("type") or "").strip().lower() == JSON_LD_TYPE:
            continue
        script.decompose()
    for name in SANITIZE_TAGS:
        for element in soup.find_all(name):
            element.decompose()
