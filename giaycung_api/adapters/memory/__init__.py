"""
In-memory spreadsheet backend.
Keeps every tab as a list of string rows for local runs and tests.
Not suitable for production (nothing is persisted, one process only).
"""
from __future__ import annotations

import re
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from ...core.errors import NotFound
from ..base import Grid

_A1 = re.compile(r"^([A-Za-z]+)?(\d+)?$")


def _col_index(letters: str) -> int:
    """'A' -> 0, 'Z' -> 25, 'AA' -> 26."""
    n = 0
    for ch in letters.upper():
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n - 1


def _parse_ref(range_ref: str) -> Tuple[str, int, Optional[int], int, Optional[int]]:
    """
    Split "tab!A5:J5" into (tab, start_col, start_row, end_col, end_row).
    Rows are 1-based and None when the reference is column-only ("A:Z").
    """
    if "!" in range_ref:
        tab, a1 = range_ref.rsplit("!", 1)
    else:
        tab, a1 = range_ref, "A:ZZZ"
    tab = tab.strip().strip("'")
    start, _, end = a1.partition(":")
    end = end or start

    def cell(part: str, default_col: int) -> Tuple[int, Optional[int]]:
        m = _A1.match(part.strip())
        if not m:
            raise ValueError(f"Unable to parse range: {range_ref}")
        letters, digits = m.groups()
        col = _col_index(letters) if letters else default_col
        row = int(digits) if digits else None
        return col, row

    start_col, start_row = cell(start, 0)
    end_col, end_row = cell(end, 18277)
    return tab, start_col, start_row, end_col, end_row


def _trim_row(row: List[str]) -> List[str]:
    out = list(row)
    while out and out[-1] == "":
        out.pop()
    return out


class InMemoryBackend:
    """
    SheetsBackend implementation over plain Python lists.

    `writes` records every mutating call as (operation, reference) so tests
    can assert that a request performed no remote write.
    """

    def __init__(self, tables: Optional[Dict[str, Grid]] = None) -> None:
        self._lock = threading.RLock()
        self.tables: Dict[str, Grid] = {}
        self.sheet_ids: Dict[str, int] = {}
        self.writes: List[Tuple[str, str]] = []
        for name, grid in (tables or {}).items():
            self.add_table(name, grid)

    def add_table(self, name: str, grid: Optional[Grid] = None) -> None:
        with self._lock:
            self.tables[name] = [[("" if c is None else str(c)) for c in row] for row in (grid or [])]
            self.sheet_ids.setdefault(name, 1000 + len(self.sheet_ids))

    def _grid(self, tab: str) -> Grid:
        if tab not in self.tables:
            self.add_table(tab)
        return self.tables[tab]

    # ========== SheetsBackend API ==========

    def read_range(self, range_ref: str) -> Grid:
        tab, start_col, start_row, end_col, end_row = _parse_ref(range_ref)
        with self._lock:
            grid = self.tables.get(tab, [])
            first = (start_row or 1) - 1
            last = end_row if end_row is not None else len(grid)
            rows = [_trim_row(r[start_col:end_col + 1]) for r in grid[first:last]]
        while rows and not rows[-1]:
            rows.pop()
        return rows

    def append_row(self, range_ref: str, row: Sequence[object]) -> None:
        tab = _parse_ref(range_ref)[0]
        with self._lock:
            grid = self._grid(tab)
            while grid and not any(c != "" for c in grid[-1]):
                grid.pop()
            grid.append(["" if c is None else str(c) for c in row])
            self.writes.append(("append", range_ref))

    def update_range(self, range_ref: str, rows: Sequence[Sequence[object]]) -> None:
        tab, start_col, start_row, _, _ = _parse_ref(range_ref)
        with self._lock:
            grid = self._grid(tab)
            r0 = (start_row or 1) - 1
            for offset, values in enumerate(rows):
                r = r0 + offset
                while len(grid) <= r:
                    grid.append([])
                target = grid[r]
                need = start_col + len(values)
                if len(target) < need:
                    target.extend([""] * (need - len(target)))
                for i, v in enumerate(values):
                    target[start_col + i] = "" if v is None else str(v)
            self.writes.append(("update", range_ref))

    def delete_rows(self, table_id: int, start_index: int, end_index: int) -> None:
        with self._lock:
            for name, sid in self.sheet_ids.items():
                if sid == table_id:
                    del self.tables[name][start_index:end_index]
                    self.writes.append(("delete", f"{name}!{start_index}:{end_index}"))
                    return
        raise NotFound(f"Sheet id not found: {table_id}")

    def get_table_id(self, table_name: str) -> int:
        with self._lock:
            if table_name not in self.tables:
                raise NotFound(f"Sheet tab not found: {table_name}")
            return self.sheet_ids[table_name]
