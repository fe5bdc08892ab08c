"""
Header-driven schema for sheet-backed tables.

- resolve_headers(): read row 1, install the canonical header if it is blank
- to_record() / to_row(): map raw rows to Records and back, by header order
- filter_blank(): drop fully empty rows (trailing junk in the sheet)

The header row is re-read on every request; nothing here is cached.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence

from gspread.utils import rowcol_to_a1

from ..adapters.base import Grid, SheetsBackend
from .validation import safe_trim

logger = logging.getLogger(__name__)

# Row 1 is the header, so data row k (0-based) lives on sheet row k + 2.
HEADER_ROW_OFFSET = 2


@dataclass
class Record:
    """
    One data row viewed through the header.

    `row_index` is the 1-based sheet row the record was read from
    (0 for a record that has not been written yet). It is only used to
    address the exact row for a later update or delete.

    `raw` keeps the cells as read, one per header column. With duplicate
    header names `fields` only holds the last of them, so write-backs start
    from `raw`.
    """

    fields: Dict[str, Any] = field(default_factory=dict)
    row_index: int = 0
    raw: List[str] = field(default_factory=list)

    def get(self, name: str, default: Any = "") -> Any:
        return self.fields.get(name, default)

    def __getitem__(self, name: str) -> Any:
        return self.fields.get(name, "")

    def __setitem__(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    @property
    def id(self) -> str:
        return safe_trim(self.fields.get("id"))

    def copy(self) -> "Record":
        return Record(dict(self.fields), self.row_index, list(self.raw))


def last_column(width: int) -> str:
    """Column letter of the width-th column (1 -> A, 27 -> AA)."""
    return rowcol_to_a1(1, max(1, width))[:-1]


def row_range(table: str, row_index: int, width: int) -> str:
    return f"{table}!A{row_index}:{last_column(width)}{row_index}"


def header_index(headers: Sequence[str]) -> Dict[str, int]:
    """name -> 0-based column; on duplicate names the last column wins."""
    return {name: i for i, name in enumerate(headers)}


def resolve_headers(
    grid: Grid,
    table: str,
    default_header: Sequence[str],
    backend: SheetsBackend,
) -> List[str]:
    """
    Return the header names of `grid` (row 1, each cell trimmed).

    If row 1 is missing or blank, write `default_header` to row 1 of
    `table` and return it. An existing header is returned verbatim,
    including duplicate or empty names, and never triggers a write.
    """
    first = [safe_trim(h) for h in grid[0]] if grid else []
    if any(first):
        return first

    header = list(default_header)
    logger.info("Installing default header on '%s': %s", table, header)
    backend.update_range(f"{table}!A1:{last_column(len(header))}1", [header])
    return header


def to_record(row: Sequence[Any], headers: Sequence[str], position: int) -> Record:
    """`position` is the 0-based index among data rows (header excluded)."""
    cells = [(row[i] if i < len(row) and row[i] is not None else "") for i in range(len(headers))]
    values = {h: cells[i] for i, h in enumerate(headers)}
    return Record(values, position + HEADER_ROW_OFFSET, [cell_value(c) for c in cells])


def to_records(grid: Grid, headers: Sequence[str]) -> List[Record]:
    return [to_record(row, headers, pos) for pos, row in enumerate(grid[1:])]


def cell_value(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, bool):
        return "TRUE" if v else "FALSE"
    if isinstance(v, (list, dict)):
        return json.dumps(v, ensure_ascii=False)
    return str(v)


def to_row(record: Record | Dict[str, Any], headers: Sequence[str]) -> List[str]:
    """
    Order the record's values by `headers`. Fields not named in the header are
    dropped; header columns the record lacks are written as "".
    """
    fields = record.fields if isinstance(record, Record) else record
    return [cell_value(fields.get(h, "")) for h in headers]


def merge_row(record: Record, updates: Dict[str, Any], headers: Sequence[str]) -> List[str]:
    """
    Row to write back for `record` with `updates` applied. Only the columns
    named in `updates` change; every other cell keeps its stored value.
    """
    if record.raw:
        row = list(record.raw[: len(headers)])
        row += [""] * (len(headers) - len(row))
    else:
        row = to_row(record, headers)
    index = header_index(headers)
    for key, value in updates.items():
        if key in index:
            row[index[key]] = cell_value(value)
    return row


def filter_blank(records: Iterable[Record]) -> List[Record]:
    return [r for r in records if any(safe_trim(v) != "" for v in (r.raw or r.fields.values()))]
