from __future__ import annotations

import csv
import re
from dataclasses import dataclass, field
from typing import List


BOM = "\ufeff"
DELIMITER = ","
# Longest single cell accepted (the csv module default is 128 KiB)
FIELD_SIZE_LIMIT = 1024 * 1024

_LINE_END_RE = re.compile(r"(?<=\r\n)|(?<=\n)|(?<=\r)(?!\n)")

csv.field_size_limit(FIELD_SIZE_LIMIT)


class TableParseError(ValueError):
    pass


@dataclass
class Table:
    """Rows of trimmed cells; the first row is the header."""

    rows: List[List[str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def header(self) -> List[str]:
        return self.rows[0] if self.rows else []

    @property
    def body(self) -> List[List[str]]:
        return self.rows[1:]

    @property
    def width(self) -> int:
        return max((len(row) for row in self.rows), default=0)


def _split_lines(text: str) -> List[str]:
    # Only \r\n, \r and \n end a row; keep the endings for the csv reader
    return [line for line in _LINE_END_RE.split(text) if line.strip()]


def _unbalanced(line: str) -> bool:
    return line.count('"') % 2 == 1


def _split_loose(line: str) -> List[str]:
    cells = [cell.strip().strip('"').strip() for cell in line.rstrip("\r\n").split(DELIMITER)]
    if any(len(cell) > FIELD_SIZE_LIMIT for cell in cells):
        raise csv.Error(f"field larger than field limit ({FIELD_SIZE_LIMIT})")
    return cells


def _read(lines: List[str]) -> List[List[str]]:
    reader = csv.reader(lines, delimiter=DELIMITER, quotechar='"', skipinitialspace=True, strict=True)
    return list(reader)


def _read_per_line(lines: List[str]) -> List[List[str]]:
    records: List[List[str]] = []
    for line in lines:
        if _unbalanced(line):
            records.append(_split_loose(line))
        else:
            records.extend(csv.reader([line], delimiter=DELIMITER, quotechar='"', skipinitialspace=True))
    return records


def parse_csv(text: str) -> Table:
    """Split the model's CSV-ish reply into a Table.

    Lightweight on purpose: comma delimiter, optional double quotes around a
    cell (with ``""`` as an escaped quote), ``\\r\\n``/``\\r``/``\\n`` row breaks.
    Blank lines and rows with nothing but empty cells are skipped. Ragged rows
    are kept as-is.

    When the whole reply does not read as strict CSV (typically a stray quote
    that would swallow every following row), each physical line is read on
    its own instead, and lines with an unmatched quote are split on commas.
    """
    if not text:
        return Table()
    if text.startswith(BOM):
        text = text[len(BOM):]

    lines = _split_lines(text)
    if not lines:
        return Table()

    try:
        try:
            records = _read(lines)
        except csv.Error:
            records = _read_per_line(lines)
    except csv.Error as exc:
        raise TableParseError(f"Could not parse CSV: {exc}") from exc

    rows: List[List[str]] = []
    for record in records:
        cells = [cell.strip() for cell in record]
        if any(cells):
            rows.append(cells)
    return Table(rows=rows)
