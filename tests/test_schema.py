"""Tests for header resolution and row <-> record mapping."""

from giaycung_api.adapters.memory import InMemoryBackend
from giaycung_api.core.schema import (
    Record,
    filter_blank,
    last_column,
    merge_row,
    resolve_headers,
    row_range,
    to_record,
    to_records,
    to_row,
)

HEADER = ["id", "name", "price"]


class TestResolveHeaders:
    def test_existing_header_returned_trimmed(self):
        backend = InMemoryBackend()
        grid = [[" id ", "name", "price"], ["p1", "Kiwi", "10"]]
        assert resolve_headers(grid, "products", HEADER, backend) == HEADER
        assert backend.writes == []

    def test_duplicates_and_blanks_preserved(self):
        backend = InMemoryBackend()
        grid = [["id", "", "name", "name"]]
        assert resolve_headers(grid, "products", HEADER, backend) == ["id", "", "name", "name"]

    def test_missing_header_installed_once(self):
        """A blank sheet gets the default header; the next resolve never writes."""
        backend = InMemoryBackend({"products": []})
        assert resolve_headers([], "products", HEADER, backend) == HEADER
        assert backend.writes == [("update", "products!A1:C1")]

        grid = backend.read_range("products!A:Z")
        assert grid == [HEADER]
        assert resolve_headers(grid, "products", HEADER, backend) == HEADER
        assert resolve_headers(grid, "products", HEADER, backend) == HEADER
        assert len(backend.writes) == 1

    def test_all_blank_first_row_counts_as_missing(self):
        backend = InMemoryBackend()
        assert resolve_headers([["", "  "]], "products", HEADER, backend) == HEADER
        assert len(backend.writes) == 1


class TestRowMapping:
    def test_to_record_pads_missing_cells(self):
        record = to_record(["p1"], HEADER, 0)
        assert record.fields == {"id": "p1", "name": "", "price": ""}
        assert record.row_index == 2

    def test_row_index_accounts_for_header(self):
        records = to_records([HEADER, ["a"], ["b"], ["c"]], HEADER)
        assert [r.row_index for r in records] == [2, 3, 4]

    def test_round_trip_restricted_to_header(self):
        record = Record({"id": "p1", "name": "Kiwi", "price": "10", "colour": "black"})
        back = to_record(to_row(record, HEADER), HEADER, 0)
        assert back.fields == {"id": "p1", "name": "Kiwi", "price": "10"}

    def test_to_row_orders_by_header_and_fills_blanks(self):
        assert to_row({"price": 5, "id": "x"}, HEADER) == ["x", "", "5"]

    def test_to_row_serializes_lists(self):
        assert to_row({"id": "s", "name": ["a", "b"]}, HEADER) == ["s", '["a", "b"]', ""]

    def test_to_record_keeps_raw_cells_for_duplicate_names(self):
        record = to_record(["p1", "a", "b"], ["id", "note", "note"], 0)
        assert record.fields == {"id": "p1", "note": "b"}
        assert record.raw == ["p1", "a", "b"]

    def test_merge_row_only_touches_updated_columns(self):
        headers = ["id", "name", "note", "note"]
        record = to_record(["p1", "Kit", "first", "second"], headers, 0)
        assert merge_row(record, {"name": "Kit2"}, headers) == ["p1", "Kit2", "first", "second"]

    def test_merge_row_pads_short_rows_and_ignores_unknown_keys(self):
        record = to_record(["p1"], HEADER, 0)
        assert merge_row(record, {"price": 7, "colour": "red"}, HEADER) == ["p1", "", "7"]

    def test_filter_blank_drops_empty_rows(self):
        records = to_records([HEADER, ["p1", "Kiwi"], ["", " "], []], HEADER)
        kept = filter_blank(records)
        assert [r.id for r in kept] == ["p1"]


def test_ranges():
    assert last_column(1) == "A"
    assert last_column(10) == "J"
    assert last_column(27) == "AA"
    assert row_range("service_orders", 5, 10) == "service_orders!A5:J5"
