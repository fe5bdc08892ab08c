"""
One-to-many child collections under a parent row.

Two storage layouts are supported:
  - CellJsonChildren: children live as a JSON array in one cell of the parent
    row (legacy). Every child write rewrites the whole parent row.
  - JoinedChildren: children are rows of their own tab, keyed by a parent-id
    column and soft-deleted through a `deleted` flag.

Both expose add / update / remove / children_of with the same signatures.
"""
from __future__ import annotations

import json
import logging
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional

from .errors import NotFound
from .rowstore import RowStore, TableSpec, table_lock
from .schema import Record
from .validation import parse_json_list, require_fields, safe_trim

logger = logging.getLogger(__name__)


def parse_children(cell: Any) -> List[Dict[str, Any]]:
    """Blank, malformed or non-array cells yield []; non-object items are skipped."""
    return [c for c in parse_json_list(cell) if isinstance(c, dict)]


def serialize_children(children: List[Mapping[str, Any]]) -> str:
    return json.dumps(list(children), ensure_ascii=False)


class CellJsonChildren:
    """
    Children stored in `parent_store`'s `column` cell.

    `child_spec` supplies the child field set, required fields, enum checks and
    id factory; its tab is never touched. The parent-key and tombstone columns
    of the child spec are not stored inside the array.
    """

    def __init__(self, parent_store: RowStore, column: str, child_spec: TableSpec, parent_key: str) -> None:
        self.parent_store = parent_store
        self.column = column
        self.child_spec = child_spec
        self.parent_key = parent_key
        skip = {parent_key}
        if child_spec.tombstone:
            skip.add(child_spec.tombstone[0])
        self.fields = [h for h in child_spec.header if h not in skip]

    def _shape(self, child: Mapping[str, Any]) -> Dict[str, Any]:
        shaped = {}
        for name in self.fields:
            value = child.get(name, self.child_spec.defaults.get(name, ""))
            if name in self.child_spec.normalizers:
                value = self.child_spec.normalizers[name](value)
            shaped[name] = value
        return shaped

    def children_of(self, parent: Record) -> List[Dict[str, Any]]:
        return parse_children(parent.get(self.column))

    def _write(self, parent_id: str, children: List[Dict[str, Any]]) -> None:
        self.parent_store.replace_fields(parent_id, {self.column: serialize_children(children)})

    def add(self, parent_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        values = self.child_spec.normalize(fields, creating=True)
        for name, default in self.child_spec.defaults.items():
            if safe_trim(values.get(name)) == "":
                values[name] = default
        require_fields(values, [f for f in self.child_spec.required if f != self.parent_key])

        with table_lock(self.parent_store.spec.name):
            parent = self.parent_store.get(parent_id)
            children = self.children_of(parent)
            taken = {safe_trim(c.get("id")) for c in children}
            child_id = safe_trim(values.get("id")) or self.child_spec.id_factory()
            while child_id in taken:
                child_id = self.child_spec.id_factory()
            values["id"] = child_id
            child = self._shape(values)
            children.append(child)
            self._write(parent_id, children)
        logger.info("add child %s -> %s.%s", child_id, parent_id, self.column)
        return child

    def update(self, parent_id: str, child_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        updates = self.child_spec.normalize(fields)
        updates.pop(self.parent_key, None)

        with table_lock(self.parent_store.spec.name):
            parent = self.parent_store.get(parent_id)
            children = self.children_of(parent)
            for i, child in enumerate(children):
                if safe_trim(child.get("id")) == safe_trim(child_id):
                    merged = self._shape({**child, **updates})
                    children[i] = merged
                    if updates:
                        self._write(parent_id, children)
                    return merged
        raise NotFound(f"{self.child_spec.name}: '{child_id}' not found in '{parent_id}'")

    def remove(self, parent_id: str, child_id: str) -> Dict[str, Any]:
        with table_lock(self.parent_store.spec.name):
            parent = self.parent_store.get(parent_id)
            children = self.children_of(parent)
            keep = [c for c in children if safe_trim(c.get("id")) != safe_trim(child_id)]
            if len(keep) == len(children):
                raise NotFound(f"{self.child_spec.name}: '{child_id}' not found in '{parent_id}'")
            removed = next(c for c in children if safe_trim(c.get("id")) == safe_trim(child_id))
            self._write(parent_id, keep)
        logger.info("remove child %s from %s.%s", child_id, parent_id, self.column)
        return removed


class JoinedChildren:
    """Children stored as rows of `child_store`, linked through `parent_key`."""

    def __init__(self, child_store: RowStore, parent_key: str) -> None:
        self.child_store = child_store
        self.parent_key = parent_key

    def add(self, parent_id: str, fields: Mapping[str, Any]) -> Record:
        values = dict(fields)
        values[self.parent_key] = parent_id
        return self.child_store.create(values)

    def update(self, parent_id: str, child_id: str, fields: Mapping[str, Any]) -> Record:
        updates = {k: v for k, v in fields.items() if k != self.parent_key}
        return self.child_store.patch(child_id, updates, match={self.parent_key: parent_id})

    def remove(self, parent_id: str, child_id: str) -> Record:
        return self.child_store.delete(child_id, match={self.parent_key: parent_id})

    def children_of(self, parent_id: str) -> List[Record]:
        return self.group_by_parent().get(safe_trim(parent_id), [])

    def group_by_parent(self, records: Optional[List[Record]] = None) -> Dict[str, List[Record]]:
        """Read the child tab once and bucket live rows by parent id."""
        buckets: Dict[str, List[Record]] = defaultdict(list)
        for r in self.child_store.list() if records is None else records:
            buckets[safe_trim(r.get(self.parent_key))].append(r)
        return dict(buckets)
