"""
Unit tests for page metadata and frontmatter rendering.
"""

from unittest.mock import patch

from bs4 import BeautifulSoup
from pagesift.extractor.metadata import extract_page_metadata, render_frontmatter
from pagesift.protocols import PageMetadata


class TestExtractPageMetadata:
    def test_fallback_to_title_and_lang(self):
        html = '<html lang="en"><head><title> Lakers Win </title></head><body><p>x</p></body></html>'
        soup = BeautifulSoup(html, "lxml")
        with patch("pagesift.extractor.metadata.trafilatura.extract_metadata", return_value=None):
            metadata = extract_page_metadata(html, soup, "https://example.com/a")
        assert metadata == PageMetadata(title="Lakers Win", published=None, language="en")

    def test_trafilatura_fields_preferred(self):
        class Meta:
            title = "From Trafilatura"
            date = "2025-01-02"
            language = None

        html = '<html lang="de"><head><title>Other</title></head><body></body></html>'
        soup = BeautifulSoup(html, "lxml")
        with patch("pagesift.extractor.metadata.trafilatura.extract_metadata", return_value=Meta()):
            metadata = extract_page_metadata(html, soup)
        assert metadata.title == "From Trafilatura"
        assert metadata.published == "2025-01-02"
        assert metadata.language == "de"

    def test_trafilatura_failure_logged_not_raised(self):
        html = "<html><head><title>Only title</title></head></html>"
        soup = BeautifulSoup(html, "lxml")
        with patch("pagesift.extractor.metadata.trafilatura.extract_metadata", side_effect=RuntimeError("bad")):
            metadata = extract_page_metadata(html, soup)
        assert metadata.title == "Only title"


class TestRenderFrontmatter:
    def test_layout_and_escaping(self):
        metadata = PageMetadata(title='Say "hi"\\now', published=None, language="en")
        rendered = render_frontmatter("# Body", "https://example.com/a", metadata)
        assert rendered == (
            "---\n"
            "source_url: https://example.com/a\n"
            'title: "Say \\"hi\\"\\\\now"\n'
            'published: ""\n'
            'lang: "en"\n'
            "---\n\n"
            "# Body"
        )
