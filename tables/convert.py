from __future__ import annotations

import json
from typing import Dict, List, Optional

from tables.parser import Table


def unique_headers(header: List[str]) -> List[str]:
    """Blank names become column_<n>; repeats get a _2, _3... suffix."""
    seen = set()
    keys: List[str] = []
    for index, name in enumerate(header, start=1):
        base = name or f"column_{index}"
        key = base
        suffix = 2
        while key in seen:
            key = f"{base}_{suffix}"
            suffix += 1
        seen.add(key)
        keys.append(key)
    return keys


def to_records(table: Table) -> List[Dict[str, Optional[str]]]:
    if table.is_empty:
        return []

    keys = unique_headers(table.header)
    records: List[Dict[str, Optional[str]]] = []
    for row in table.body:
        records.append({key: (row[i] if i < len(row) else None) for i, key in enumerate(keys)})
    return records


def to_json(table: Table) -> str:
    return json.dumps(to_records(table), indent=2, ensure_ascii=False)


def _md_cell(cell: str) -> str:
    return " ".join(cell.replace("|", "\\|").splitlines())


def _md_row(cells: List[str]) -> str:
    return "| " + " | ".join(_md_cell(c) for c in cells) + " |"


def to_markdown(table: Table) -> str:
    """GitHub-style pipe table; body rows are fitted to the header width."""
    if table.is_empty:
        return ""

    width = len(table.header)
    lines = [_md_row(table.header), _md_row(["---"] * width)]
    for row in table.body:
        fitted = (row + [""] * width)[:width]
        lines.append(_md_row(fitted))
    return "\n".join(lines)
