"""
Unit tests for HTML to Markdown conversion rules.
"""

import pytest
from pagesift.config.config import MarkdownSettings
from pagesift.extractor.structured_data import TableData
from pagesift.markdown.converter import html_to_markdown, is_valid_href, link_label, render_table

SETTINGS = MarkdownSettings()


def _table_html(columns: int, rows: int) -> str:
    header = "".join(f"<th>Col {c}</th>" for c in range(columns))
    body = "".join("<tr>" + "".join(f"<td>r{r}c{c}</td>" for c in range(columns)) + "</tr>" for r in range(rows))
    return f"<table><tr>{header}</tr>{body}</table>"


class TestLinkRules:
    @pytest.mark.parametrize(
        "href,expected",
        [
            ("https://example.com/a", True),
            ("/docs/page", True),
            ("/a", False),
            ("javascript:alert(1)", False),
            ("mailto:someone@example.com", False),
            ("#", False),
            ("https://example.com", False),
            ("https://example.com/a b", False),
            ("ftp://example.com/file", False),
            (None, False),
        ],
    )
    def test_is_valid_href(self, href, expected):
        assert is_valid_href(href) is expected

    def test_link_label(self):
        assert link_label("https://www.example.com/a", None) == "example.com"
        assert link_label("https://example.com/a", "  Docs ") == "Docs"
        assert link_label("/relative/path", None) == "/relative/path"

    def test_javascript_link_is_plain_text(self):
        markdown = html_to_markdown('<p>Click <a href="javascript:alert(1)">here</a> now</p>', SETTINGS)
        assert markdown.strip() == "Click here now"

    def test_self_describing_link_gets_hostname_label(self):
        markdown = html_to_markdown('<p><a href="https://example.com/a">https://example.com/a</a></p>', SETTINGS)
        assert "[example.com](https://example.com/a)" in markdown

    def test_long_href_dropped(self):
        href = "https://example.com/" + "x" * 180
        markdown = html_to_markdown(f'<p><a href="{href}">meaningful text</a></p>', SETTINGS)
        assert markdown.strip() == "meaningful text"

    def test_regular_link_kept(self):
        markdown = html_to_markdown('<p>See <a href="https://example.com/docs">the docs</a>.</p>', SETTINGS)
        assert "[the docs](https://example.com/docs)" in markdown

    def test_links_can_be_disabled(self):
        markdown = html_to_markdown(
            '<p>See <a href="https://example.com/docs">the docs</a>.</p>', SETTINGS, preserve_links=False
        )
        assert "https://example.com/docs" not in markdown
        assert "the docs" in markdown


class TestTables:
    def test_small_table_rendered(self):
        markdown = html_to_markdown(_table_html(3, 5), SETTINGS)
        lines = [line for line in markdown.splitlines() if line.startswith("|")]
        assert lines[0] == "| Col 0 | Col 1 | Col 2 |"
        assert lines[1] == "| --- | --- | --- |"
        assert len(lines) == 7
        assert lines[2] == "| r0c0 | r0c1 | r0c2 |"

    def test_wide_table_summarized(self):
        markdown = html_to_markdown(_table_html(8, 2), SETTINGS)
        assert "**Table Data**: Columns: Col 0" in markdown
        assert "2 rows of data" in markdown
        assert "|" not in markdown.replace("Sample: r0c0 | r0c1 | r0c2", "")

    def test_render_table_pads_and_escapes(self):
        data = TableData(headers=["A", "B"], rows=[["x|y"], ["1", "2"]])
        assert render_table(data, SETTINGS).strip() == "| A | B |\n| --- | --- |\n| x\\|y |  |\n| 1 | 2 |"

    def test_long_header_summarized(self):
        data = TableData(headers=["A" * 40, "B"], rows=[["1", "2"]])
        assert render_table(data, SETTINGS).strip().startswith("**Table Data**")

    def test_empty_table(self):
        assert render_table(TableData(headers=["A"], rows=[]), SETTINGS) == ""


class TestHeadings:
    def test_heading_gets_rule_and_atx_marker(self):
        markdown = html_to_markdown("<h1>Lakers Win</h1><p>Body text.</p>", SETTINGS)
        assert "# Lakers Win" in markdown
        assert markdown.index("---") < markdown.index("# Lakers Win")

    def test_short_heading_dropped(self):
        markdown = html_to_markdown("<h2>Hi</h2><p>Body text.</p>", SETTINGS)
        assert "Hi" not in markdown
        assert "Body text." in markdown
