"""
Unit tests for the Markdown artifact cleaner.
"""

from unittest.mock import Mock

import pytest
from pagesift.config.config import MarkdownSettings
from pagesift.markdown.artifact_cleaner import MarkdownArtifactCleaner, plain_text


@pytest.fixture
def cleaner() -> MarkdownArtifactCleaner:
    return MarkdownArtifactCleaner(MarkdownSettings())


class TestLinksAndImages:
    def test_good_link_kept(self, cleaner):
        assert cleaner.clean("See [docs](https://example.com/docs) now.") == "See [docs](https://example.com/docs) now."

    @pytest.mark.parametrize(
        "url",
        ["javascript:alert(1)", "https://example.com", "#", "https://example.com/" + "x" * 160],
    )
    def test_bad_link_unwrapped(self, cleaner, url):
        assert cleaner.clean(f"Run [click]({url}) now.") == "Run click now."

    def test_image_without_alt_dropped(self, cleaner):
        markdown = "Intro text here.\n\n![](https://example.com/a.png)\n\nOutro text here."
        assert cleaner.clean(markdown) == "Intro text here.\n\nOutro text here."

    def test_image_with_alt_kept(self, cleaner):
        cleaned = cleaner.clean("![A chart](https://example.com/a.png)")
        assert "![A chart](https://example.com/a.png)" in cleaned


class TestBlocks:
    def test_short_heading_dropped(self, cleaner):
        assert cleaner.clean("## ab\n\nBody text stays.") == "Body text stays."

    def test_heading_kept(self, cleaner):
        assert cleaner.clean("## Real heading\n\nBody text stays.") == "## Real heading\n\nBody text stays."

    def test_empty_list_items_dropped(self, cleaner):
        cleaned = cleaner.clean("- ab\n- real item text")
        assert "real item text" in cleaned
        assert "ab" not in cleaned

    def test_thematic_break_kept(self, cleaner):
        cleaned = cleaner.clean("First paragraph.\n\n---\n\nSecond paragraph.")
        assert cleaned == "First paragraph.\n\n---\n\nSecond paragraph."


class TestFailure:
    def test_parse_failure_returns_input(self, cleaner):
        cleaner._markdown = Mock()
        cleaner._markdown.parse.side_effect = ValueError("broken")
        assert cleaner.clean("anything *at all*") == "anything *at all*"


def test_plain_text():
    tokens = [
        {"type": "text", "raw": "a "},
        {"type": "strong", "children": [{"type": "text", "raw": "b"}]},
        {"type": "codespan", "raw": "c"},
    ]
    assert plain_text(tokens) == "a bc"
