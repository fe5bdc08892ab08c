"""
Remote spreadsheet contract used by the row store.
Defines the five primitives every backend must implement.
"""

from typing import List, Protocol, Sequence

Grid = List[List[str]]


class SheetsBackend(Protocol):
    """
    Protocol for the spreadsheet service that stores every table.

    This allows swapping Google Sheets for the in-memory grid
    without changing the row store or the routers.

    Range references use A1 notation with the tab name, e.g.
    "service_orders!A:Z" or "service_orders!A5:J5".
    """

    def read_range(self, range_ref: str) -> Grid:
        """
        Read every populated row in the range.

        Returns:
            Row grid; [] if the range has no data. Rows may be shorter than
            the header (missing trailing cells).
        """
        ...

    def append_row(self, range_ref: str, row: Sequence[object]) -> None:
        """Append one row after the last populated row of the range."""
        ...

    def update_range(self, range_ref: str, rows: Sequence[Sequence[object]]) -> None:
        """Overwrite exactly the addressed cells."""
        ...

    def delete_rows(self, table_id: int, start_index: int, end_index: int) -> None:
        """
        Remove rows [start_index, end_index), 0-based, shifting later rows up.
        """
        ...

    def get_table_id(self, table_name: str) -> int:
        """
        Resolve a tab title to its numeric sheet id.

        Raises:
            NotFound: the tab does not exist.
        """
        ...
