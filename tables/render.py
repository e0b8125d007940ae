from __future__ import annotations

from html import escape
from typing import List

from tables.parser import Table


def _pad(row: List[str], width: int) -> List[str]:
    return row + [""] * (width - len(row))


def to_html(table: Table) -> str:
    """Render the table as an HTML fragment, header row as <th>."""
    if table.is_empty:
        return "<table></table>"

    width = table.width
    parts = ["<table>"]
    for index, row in enumerate(table.rows):
        tag = "th" if index == 0 else "td"
        cells = "".join(f"<{tag}>{escape(cell)}</{tag}>" for cell in _pad(row, width))
        parts.append(f"<tr>{cells}</tr>")
    parts.append("</table>")
    return "".join(parts)
