from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tables.convert import to_json, to_markdown
from tables.parser import BOM, Table, parse_csv
from tables.render import to_html


class ViewFormat(str, Enum):
    TABLE = "table"
    CSV = "csv"
    JSON = "json"
    MD = "md"


class NothingToExportError(LookupError):
    pass


@dataclass
class TableViews:
    """Every rendition of one extraction result."""

    csv: str
    table: Table
    html: str
    json: str
    markdown: str


@dataclass
class ExportFile:
    filename: str
    media_type: str
    content: str


def build_views(raw_csv: str) -> TableViews:
    table = parse_csv(raw_csv)
    return TableViews(
        csv=raw_csv,
        table=table,
        html=to_html(table),
        json=to_json(table),
        markdown=to_markdown(table),
    )


def _require_content(views: TableViews) -> None:
    if not views.csv:
        raise NothingToExportError("Nothing extracted yet")


def copy_content(views: TableViews, fmt: ViewFormat) -> str:
    """Text the active view puts on the clipboard."""
    _require_content(views)
    fmt = ViewFormat(fmt)
    if fmt is ViewFormat.JSON:
        return views.json
    if fmt is ViewFormat.MD:
        return views.markdown
    return views.csv


def download(views: TableViews, fmt: ViewFormat) -> ExportFile:
    _require_content(views)
    fmt = ViewFormat(fmt)
    if fmt is ViewFormat.JSON:
        return ExportFile("data.json", "application/json", views.json)
    if fmt is ViewFormat.MD:
        return ExportFile("data.md", "text/markdown", views.markdown)
    # BOM so Excel opens UTF-8 CSV without mangling non-ASCII text
    return ExportFile("data.csv", "text/csv", BOM + views.csv)
