"""Tests for child collections: legacy JSON cell and joined table."""

import json

import pytest

from giaycung_api.adapters.memory import InMemoryBackend
from giaycung_api.core.errors import NotFound, ValidationError
from giaycung_api.core.nested import CellJsonChildren, JoinedChildren, parse_children, serialize_children
from giaycung_api.core.rowstore import RowStore
from giaycung_api.models.tables import HEADERS, SERVICE_ORDER_SHOES, SERVICE_ORDERS

PARENT = ["O1", "ORD-001", "Nguyen Van A", "0900000000", "2024-06-01", "50000", "pending", "", "", ""]


@pytest.fixture
def backend():
    return InMemoryBackend({"service_orders": [HEADERS["service_orders"], list(PARENT)]})


class TestParseChildren:
    @pytest.mark.parametrize("cell", ["", "   ", None, "not json", '{"id": 1}', "42"])
    def test_bad_cells_yield_empty_list(self, cell):
        assert parse_children(cell) == []

    def test_non_object_items_skipped(self):
        assert parse_children('[{"id": "a"}, "x", 3]') == [{"id": "a"}]

    def test_serialize_is_json_array(self):
        assert json.loads(serialize_children([{"id": "a", "name": "Nike"}])) == [{"id": "a", "name": "Nike"}]
        assert serialize_children([]) == "[]"


class TestCellJsonChildren:
    def _children(self, backend):
        parents = RowStore(backend, SERVICE_ORDERS)
        return CellJsonChildren(parents, "shoesJson", SERVICE_ORDER_SHOES, parent_key="orderId"), parents

    def test_add_then_read_back(self, backend):
        shoes, parents = self._children(backend)
        child = shoes.add("O1", {"name": "Nike Air", "service": "deep-clean"})

        stored = shoes.children_of(parents.get("O1"))
        assert len(stored) == 1
        assert stored[0]["id"] == child["id"]
        assert child["id"].startswith("SH-")
        assert stored[0]["name"] == "Nike Air"
        assert stored[0]["service"] == "deep-clean"
        assert stored[0]["status"] == "received"
        assert "orderId" not in stored[0]

    def test_add_rewrites_whole_parent_row(self, backend):
        shoes, _ = self._children(backend)
        shoes.add("O1", {"name": "Nike Air", "service": "deep-clean"})
        assert backend.writes == [("update", "service_orders!A2:J2")]
        assert backend.tables["service_orders"][1][5] == "50000"

    def test_add_requires_name_and_service(self, backend):
        shoes, _ = self._children(backend)
        with pytest.raises(ValidationError) as exc:
            shoes.add("O1", {"name": "Nike"})
        assert exc.value.fields == ["service"]
        assert backend.writes == []

    def test_update_and_remove(self, backend):
        shoes, parents = self._children(backend)
        child = shoes.add("O1", {"name": "Nike", "service": "clean", "images": ["a.jpg", " ", "b.jpg"]})
        assert child["images"] == ["a.jpg", "b.jpg"]

        updated = shoes.update("O1", child["id"], {"status": "completed", "notes": "done"})
        assert updated["status"] == "completed"
        assert updated["name"] == "Nike"

        shoes.remove("O1", child["id"])
        assert shoes.children_of(parents.get("O1")) == []

    def test_unknown_child(self, backend):
        shoes, _ = self._children(backend)
        with pytest.raises(NotFound):
            shoes.update("O1", "SH-NOPE", {"notes": "x"})
        with pytest.raises(NotFound):
            shoes.remove("O1", "SH-NOPE")

    def test_unknown_parent(self, backend):
        shoes, _ = self._children(backend)
        with pytest.raises(NotFound):
            shoes.add("O2", {"name": "Nike", "service": "clean"})

    def test_invalid_child_status(self, backend):
        shoes, _ = self._children(backend)
        child = shoes.add("O1", {"name": "Nike", "service": "clean"})
        with pytest.raises(ValidationError):
            shoes.update("O1", child["id"], {"status": "lost"})


class TestJoinedChildren:
    def _children(self, backend):
        return JoinedChildren(RowStore(backend, SERVICE_ORDER_SHOES), parent_key="orderId")

    def test_add_attaches_parent_id(self, backend):
        shoes = self._children(backend)
        record = shoes.add("O1", {"name": "Nike Air", "service": "deep-clean"})
        assert record.get("orderId") == "O1"
        assert record.id.startswith("SH-")
        assert [r.id for r in shoes.children_of("O1")] == [record.id]

    def test_group_by_parent(self, backend):
        shoes = self._children(backend)
        a = shoes.add("O1", {"name": "A", "service": "s"})
        b = shoes.add("O2", {"name": "B", "service": "s"})
        c = shoes.add("O1", {"name": "C", "service": "s"})

        buckets = shoes.group_by_parent()
        assert [r.id for r in buckets["O1"]] == [a.id, c.id]
        assert [r.id for r in buckets["O2"]] == [b.id]

    def test_update_checks_parent(self, backend):
        shoes = self._children(backend)
        record = shoes.add("O1", {"name": "A", "service": "s"})
        with pytest.raises(NotFound):
            shoes.update("O2", record.id, {"notes": "x"})
        assert shoes.update("O1", record.id, {"notes": "x", "orderId": "O2"}).get("orderId") == "O1"

    def test_remove_is_soft(self, backend):
        shoes = self._children(backend)
        record = shoes.add("O1", {"name": "A", "service": "s"})
        shoes.remove("O1", record.id)

        assert shoes.children_of("O1") == []
        raw = backend.tables["service_order_shoes"]
        assert raw[1][HEADERS["service_order_shoes"].index("deleted")] == "1"
