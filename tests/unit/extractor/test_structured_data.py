"""
Unit tests for structured data extraction.
"""

from bs4 import BeautifulSoup
from pagesift.extractor.structured_data import (
    TableData,
    extract_structured_data,
    extract_table_data,
    structured_context_line,
)
from pagesift.protocols import StructuredDataItem, StructuredDataType


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


class TestTableData:
    def test_extract_table(self):
        soup = _soup(
            "<table><caption>Standings</caption>"
            "<tr><th>Team</th><th>Wins</th></tr>"
            "<tr><td>Lakers</td><td>50</td></tr>"
            "<tr><td> </td><td></td></tr>"
            "<tr><td>Celtics</td><td>57</td></tr></table>"
        )
        data = extract_table_data(soup.find("table"))
        assert data.headers == ["Team", "Wins"]
        assert data.rows == [["Lakers", "50"], ["Celtics", "57"]]
        assert data.caption == "Standings"

    def test_table_without_rows(self):
        assert extract_table_data(_soup("<table></table>").find("table")) is None

    def test_summary(self):
        data = TableData(headers=["A", "B", "C"], rows=[["1", "2", "3"], ["4", "5", "6"]], caption="Totals")
        assert data.summary() == "Totals. Columns: A, B, C. 2 rows of data. Sample: 1 | 2 | 3."

    def test_summary_skips_long_sample(self):
        data = TableData(headers=["A"], rows=[["x" * 60]])
        assert data.summary(50) == "Columns: A. 1 rows of data."


class TestExtractStructuredData:
    def test_json_ld_with_graph(self):
        soup = _soup(
            '<html><head><script type="application/ld+json">'
            '{"@graph": [{"@type": "Article", "name": "Lakers Win"}, {"@type": "Person", "name": "LeBron"}]}'
            "</script></head><body></body></html>"
        )
        items = extract_structured_data(soup)
        schemas = [i for i in items if i.type is StructuredDataType.SCHEMA]
        assert [i.payload["name"] for i in schemas] == ["Lakers Win", "LeBron"]
        assert all(i.confidence == 0.9 for i in schemas)

    def test_invalid_json_ld_skipped(self):
        soup = _soup('<html><head><script type="application/ld+json">{not json</script></head></html>')
        assert extract_structured_data(soup) == []

    def test_microdata_tables_and_lists(self):
        soup = _soup(
            '<html><body><div itemscope itemtype="https://schema.org/Product">'
            '<span itemprop="name">Widget</span><span itemprop="price" content="9.99">$9.99</span></div>'
            "<table><tr><th>K</th></tr><tr><td>V</td></tr></table>"
            "<ul><li>one</li><li>two</li><li>three</li></ul>"
            "<ul><li>short</li></ul></body></html>"
        )
        items = extract_structured_data(soup)
        kinds = [i.type for i in items]
        assert kinds == [StructuredDataType.MICRODATA, StructuredDataType.TABLE, StructuredDataType.LIST]
        assert items[0].payload == {"@type": "https://schema.org/Product", "name": "Widget", "price": "9.99"}
        assert items[2].payload == ["one", "two", "three"]


class TestStructuredContextLine:
    def test_renders_schema_and_microdata(self):
        items = [
            StructuredDataItem(StructuredDataType.SCHEMA, {"name": "Lakers Win", "description": "Recap"}, 0.9),
            StructuredDataItem(StructuredDataType.SCHEMA, {"name": "No description"}, 0.9),
            StructuredDataItem(StructuredDataType.MICRODATA, {"@type": "Product"}, 0.7),
        ]
        assert structured_context_line(items) == (
            "*Structured Data: **Lakers Win**: Recap, **No description**: Structured data available, "
            "**Product**: Structured content*"
        )

    def test_caps_at_three(self):
        items = [StructuredDataItem(StructuredDataType.SCHEMA, {"name": f"n{i}"}, 0.9) for i in range(5)]
        assert structured_context_line(items).count("**n") == 3

    def test_empty_without_named_items(self):
        items = [StructuredDataItem(StructuredDataType.TABLE, TableData(["a"], [["b"]]), 0.6)]
        assert structured_context_line(items) == ""
