"""
Structured data found in a page: JSON-LD, microdata, tables and lists.

Extraction runs once per document, before sanitizing and boilerplate removal
touch the DOM.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import structlog
from bs4 import BeautifulSoup, Tag

from pagesift.protocols import StructuredDataItem, StructuredDataType

logger = structlog.get_logger(__name__)

_WS = re.compile(r"\s+")

MAX_CONTEXT_ITEMS = 3
MIN_LIST_ITEMS = 3
MAX_LIST_ITEMS = 10


@dataclass(slots=True)
class TableData:
    headers: List[str]
    rows: List[List[str]]
    caption: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def summary(self, max_sample_cell_length: int = 50) -> str:
        """One-line description used when a table is too complex to render."""
        if not self.rows:
            return "Empty table"
        parts: List[str] = []
        if self.caption:
            parts.append(self.caption)
        if self.headers:
            parts.append(f"Columns: {', '.join(self.headers)}")
        parts.append(f"{len(self.rows)} rows of data")
        if self.headers and len(self.rows[0]) == len(self.headers):
            sample = self.rows[0][:3]
            if all(0 < len(cell) < max_sample_cell_length for cell in sample):
                parts.append(f"Sample: {' | '.join(sample)}")
        return ". ".join(parts) + "."


def _cell_text(cell: Tag) -> str:
    return _WS.sub(" ", cell.get_text()).strip()


def extract_table_data(table: Tag) -> Optional[TableData]:
    """Headers from the first row, non-blank body rows and the caption, or None without rows."""
    rows = table.find_all("tr")
    if not rows:
        return None

    headers = [h for h in (_cell_text(c) for c in rows[0].find_all(["th", "td"])) if h]
    body = rows[1:] if headers else rows
    data_rows = [[_cell_text(c) for c in row.find_all(["td", "th"])] for row in body]
    data_rows = [row for row in data_rows if any(row)]

    caption_tag = table.find("caption")
    caption = _cell_text(caption_tag) if caption_tag else None
    return TableData(headers=headers, rows=data_rows, caption=caption or None)


def _json_ld_items(soup: BeautifulSoup) -> List[StructuredDataItem]:
    items: List[StructuredDataItem] = []
    for script in soup.find_all("script", attrs={"type": re.compile(r"application/ld\+json", re.I)}):
        raw = script.string or script.get_text()
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.debug("Skipping invalid JSON-LD block")
            continue
        nodes: List[Any] = data if isinstance(data, list) else [data]
        for node in nodes:
            if isinstance(node, dict) and isinstance(node.get("@graph"), list):
                nodes.extend(n for n in node["@graph"] if isinstance(n, dict))
                continue
            if isinstance(node, dict):
                items.append(StructuredDataItem(type=StructuredDataType.SCHEMA, payload=node, confidence=0.9))
    return items


def _microdata(element: Tag) -> Dict[str, str]:
    result: Dict[str, str] = {}
    itemtype = element.get("itemtype")
    if itemtype:
        result["@type"] = str(itemtype)
    for prop in element.select("[itemprop]"):
        name = prop.get("itemprop")
        if not name:
            continue
        value = prop.get("content") or prop.get_text().strip()
        if value:
            result[str(name)] = str(value)
    return result


def extract_structured_data(soup: BeautifulSoup) -> List[StructuredDataItem]:
    """Collect schema, microdata, table and list items in document order per kind."""
    items = _json_ld_items(soup)

    for element in soup.select("[itemscope]"):
        data = _microdata(element)
        if data:
            items.append(StructuredDataItem(type=StructuredDataType.MICRODATA, payload=data, confidence=0.7))

    for table in soup.find_all("table"):
        table_data = extract_table_data(table)
        if table_data and not table_data.is_empty:
            items.append(StructuredDataItem(type=StructuredDataType.TABLE, payload=table_data, confidence=0.6))

    for list_tag in soup.find_all(["ul", "ol"]):
        entries = [_cell_text(li) for li in list_tag.find_all("li", recursive=False)]
        entries = [e for e in entries if e]
        if len(entries) >= MIN_LIST_ITEMS:
            items.append(
                StructuredDataItem(type=StructuredDataType.LIST, payload=entries[:MAX_LIST_ITEMS], confidence=0.5)
            )

    if items:
        logger.info("Extracted structured data", items=len(items))
    return items


def structured_context_line(items: List[StructuredDataItem]) -> str:
    """
    Render up to three schema or microdata items as one emphasized line.

    Returns an empty string when no item carries a usable name or type.
    """
    parts: List[str] = []
    for item in items:
        if item.type is StructuredDataType.SCHEMA and item.payload.get("name"):
            description = item.payload.get("description") or "Structured data available"
            parts.append(f"**{_flatten(item.payload['name'])}**: {_flatten(description)}")
        elif item.type is StructuredDataType.MICRODATA and item.payload.get("@type"):
            parts.append(f"**{item.payload['@type']}**: Structured content")
        if len(parts) == MAX_CONTEXT_ITEMS:
            break
    if not parts:
        return ""
    return f"*Structured Data: {', '.join(parts)}*"


def _flatten(value: Any) -> str:
    if isinstance(value, str):
        return _WS.sub(" ", value).strip()
    return _WS.sub(" ", json.dumps(value, ensure_ascii=False)).strip()


__all__ = [
    "TableData",
    "extract_structured_data",
    "extract_table_data",
    "structured_context_line",
]