from tables.convert import to_json, to_markdown, to_records
from tables.export import (
    ExportFile,
    NothingToExportError,
    TableViews,
    ViewFormat,
    build_views,
    copy_content,
    download,
)
from tables.parser import Table, TableParseError, parse_csv
from tables.render import to_html

__all__ = [
    "ExportFile",
    "NothingToExportError",
    "Table",
    "TableParseError",
    "TableViews",
    "ViewFormat",
    "build_views",
    "copy_content",
    "download",
    "parse_csv",
    "to_html",
    "to_json",
    "to_markdown",
    "to_records",
]
