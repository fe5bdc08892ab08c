"""
Generic CRUD over one sheet tab.

Every operation is a fresh read-modify-write against the backend:
  list / find_by_id  -> read the whole range, map, drop blanks and tombstones
  create             -> validate, derive id / sequence / timestamps, append
  patch              -> merge fields into the stored row, rewrite that one row
  delete             -> hard (remove the row, later rows shift up) or soft (tombstone)

Concurrency: create, patch and delete hold a per-table lock, which only
serializes writers inside this process. Separate processes or serverless
instances can still race (duplicate sequence numbers, full-row clobber,
stale row_index after a row shift). There are no transactions and no retries.
"""
from __future__ import annotations

import logging
import re
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..adapters.base import SheetsBackend
from .errors import NotFound, ValidationError
from .schema import (
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
from .validation import is_flag_set, require_fields, safe_trim, to_number, validate_choice

logger = logging.getLogger(__name__)

HARD = "hard"
SOFT = "soft"


# ========== id / timestamp factories ==========

def utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def utc_date() -> str:
    return time.strftime("%Y-%m-%d", time.gmtime())


def timestamp_id(prefix: str) -> Callable[[], str]:
    """`{prefix}_{epoch-ms}`, e.g. ord_1718000000000."""
    return lambda: f"{prefix}_{int(time.time() * 1000)}"


def hex_id(prefix: str) -> Callable[[], str]:
    """`{PREFIX}-{6 hex}`, e.g. SH-3FA9C1."""
    return lambda: f"{prefix}-{secrets.token_hex(3).upper()}"


def next_sequence(values: Iterable[str], prefix: str, width: int = 3) -> str:
    """
    1 + the largest integer found in values shaped like `PREFIX-<digits>`
    (or bare digits), zero padded: ORD-001, ORD-002, ...
    """
    pattern = re.compile(rf"^(?:{re.escape(prefix)}-)?(\d+)$", re.IGNORECASE)
    highest = 0
    for v in values:
        m = pattern.match(safe_trim(v))
        if m:
            highest = max(highest, int(m.group(1)))
    return f"{prefix}-{str(highest + 1).zfill(width)}"


# ========== table description ==========

@dataclass(frozen=True)
class SequenceRule:
    column: str
    prefix: str
    width: int = 3


@dataclass(frozen=True)
class TableSpec:
    """
    Everything the row store needs to know about one tab.

    header        canonical column order, installed when row 1 is blank
    required      fields that must be non-empty on create
    choices       enum fields; invalid values are rejected on create and patch
    defaults      values used on create when the field is blank
    numeric       fields coerced with to_number on create and patch
    normalizers   extra per-field coercions (applied after numeric/choices)
    timestamps    fields filled on create by a factory when blank
    tombstone     (field, value) marking a soft-deleted row; "1" means any truthy flag
    soft_delete   values written by a soft delete
    """

    name: str
    header: Tuple[str, ...]
    id_factory: Callable[[], str]
    required: Tuple[str, ...] = ()
    choices: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    defaults: Mapping[str, str] = field(default_factory=dict)
    numeric: Tuple[str, ...] = ()
    normalizers: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
    timestamps: Mapping[str, Callable[[], str]] = field(default_factory=dict)
    sequence: Optional[SequenceRule] = None
    delete_policy: str = HARD
    tombstone: Optional[Tuple[str, str]] = None
    soft_delete: Mapping[str, str] = field(default_factory=dict)
    immutable: Tuple[str, ...] = ("id",)

    @property
    def full_range(self) -> str:
        return f"{self.name}!A:{last_column(max(26, len(self.header)))}"

    def is_tombstone(self, record: Record) -> bool:
        if not self.tombstone:
            return False
        name, value = self.tombstone
        if value == "1":
            return is_flag_set(record.get(name))
        return safe_trim(record.get(name)) == value

    def normalize(self, fields: Mapping[str, Any], creating: bool = False) -> Dict[str, Any]:
        """
        Apply per-field coercion to the fields present in `fields`.

        Raises:
            ValidationError: an enum field holds a value outside its choices
        """
        known = set(self.header)
        out: Dict[str, Any] = {}
        for key, value in fields.items():
            if key not in known:
                continue
            if not creating and key in self.immutable:
                continue
            if creating and self.tombstone and key == self.tombstone[0] and key not in self.choices:
                continue
            if key in self.numeric:
                value = to_number(value)
            elif key in self.choices:
                if creating and safe_trim(value) == "" and key in self.defaults:
                    value = self.defaults[key]
                value = validate_choice(key, value, self.choices[key])
            elif isinstance(value, str):
                value = value.strip()
            if key in self.normalizers:
                value = self.normalizers[key](value)
            out[key] = value
        return out


_locks: Dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


def table_lock(name: str) -> threading.RLock:
    with _locks_guard:
        lock = _locks.get(name)
        if lock is None:
            lock = _locks[name] = threading.RLock()
        return lock


class RowStore:
    def __init__(self, backend: SheetsBackend, spec: TableSpec) -> None:
        self.backend = backend
        self.spec = spec

    # ========== reading ==========

    def _read(self) -> Tuple[List[str], List[Record]]:
        grid = self.backend.read_range(self.spec.full_range)
        headers = resolve_headers(grid, self.spec.name, self.spec.header, self.backend)
        records = filter_blank(to_records(grid, headers))
        logger.debug("read %s -> %d records", self.spec.name, len(records))
        return headers, records

    def list(self, include_deleted: bool = False) -> List[Record]:
        _, records = self._read()
        if include_deleted:
            return records
        return [r for r in records if not self.spec.is_tombstone(r)]

    def find_by(
        self,
        name: str,
        value: str,
        casefold: bool = False,
        records: Optional[List[Record]] = None,
    ) -> Optional[Record]:
        target = safe_trim(value)
        if casefold:
            target = target.casefold()
        for r in self.list() if records is None else records:
            current = safe_trim(r.get(name))
            if casefold:
                current = current.casefold()
            if current == target:
                return r
        return None

    def find_by_id(self, record_id: str, match: Optional[Mapping[str, str]] = None) -> Optional[Record]:
        """First live record whose trimmed id equals `record_id` (case-sensitive)."""
        _, records = self._read()
        return self._find_live(records, record_id, match)

    def get(self, record_id: str, match: Optional[Mapping[str, str]] = None) -> Record:
        found = self.find_by_id(record_id, match)
        if found is None:
            raise NotFound(f"{self.spec.name}: '{record_id}' not found")
        return found

    def _find_live(
        self, records: List[Record], record_id: str, match: Optional[Mapping[str, str]]
    ) -> Optional[Record]:
        target = safe_trim(record_id)
        for r in records:
            if self.spec.is_tombstone(r) or r.id != target:
                continue
            if match and any(safe_trim(r.get(k)) != safe_trim(v) for k, v in match.items()):
                continue
            return r
        return None

    # ========== writing ==========

    def create(self, fields: Mapping[str, Any]) -> Record:
        spec = self.spec
        values: Dict[str, Any] = {k: v for k, v in spec.defaults.items()}
        values.update({k: v for k, v in spec.normalize(fields, creating=True).items() if safe_trim(v) != ""})
        require_fields(values, spec.required)

        with table_lock(spec.name):
            headers, records = self._read()
            existing_ids = {r.id for r in records}

            record_id = safe_trim(values.get("id"))
            if record_id and record_id in existing_ids:
                raise ValidationError(f"id '{record_id}' already exists in {spec.name}", fields=["id"])
            if not record_id:
                record_id = spec.id_factory()
                while record_id in existing_ids:
                    record_id = f"{spec.id_factory()}{secrets.token_hex(1).upper()}"
            values["id"] = record_id

            if spec.sequence and not safe_trim(values.get(spec.sequence.column)):
                seq = spec.sequence
                seen = [r.get(seq.column) for r in records]
                seen += [r.id for r in records if r.id.upper().startswith(f"{seq.prefix}-")]
                values[seq.column] = next_sequence(seen, seq.prefix, seq.width)

            for name, factory in spec.timestamps.items():
                if not safe_trim(values.get(name)):
                    values[name] = factory()

            row = to_row(values, headers)
            self.backend.append_row(spec.full_range, row)
            logger.info("create %s id=%s", spec.name, record_id)

        return to_record(row, headers, -2)

    def patch(
        self,
        record_id: str,
        fields: Mapping[str, Any],
        match: Optional[Mapping[str, str]] = None,
    ) -> Record:
        """
        Overwrite the given fields of one live record; all other columns keep
        their stored values. An empty patch is a no-op that still returns the record.

        Raises:
            ValidationError: invalid enum value (nothing is written)
            NotFound: no live record with that id
        """
        updates = self.spec.normalize(fields)
        return self.replace_fields(record_id, updates, match)

    def replace_fields(
        self, record_id: str, updates: Mapping[str, Any], match: Optional[Mapping[str, str]] = None
    ) -> Record:
        """Merge `updates` as given (no normalization) into the live record and rewrite its row."""
        spec = self.spec
        with table_lock(spec.name):
            headers, records = self._read()
            found = self._find_live(records, record_id, match)
            if found is None:
                raise NotFound(f"{spec.name}: '{record_id}' not found")
            if not updates:
                return found

            row = merge_row(found, updates, headers)
            self.backend.update_range(row_range(spec.name, found.row_index, len(headers)), [row])
            logger.info("patch %s id=%s row=%d fields=%s", spec.name, record_id, found.row_index, sorted(updates))

        return to_record(row, headers, found.row_index - 2)

    def delete(self, record_id: str, match: Optional[Mapping[str, str]] = None) -> Record:
        """Soft or hard delete according to the table's delete_policy."""
        if self.spec.delete_policy == SOFT:
            return self.replace_fields(record_id, dict(self.spec.soft_delete), match)
        return self.hard_delete(record_id, match)

    def hard_delete(self, record_id: str, match: Optional[Mapping[str, str]] = None) -> Record:
        spec = self.spec
        with table_lock(spec.name):
            _, records = self._read()
            found = self._find_live(records, record_id, match)
            if found is None:
                raise NotFound(f"{spec.name}: '{record_id}' not found")
            table_id = self.backend.get_table_id(spec.name)
            # sheet row n is 0-based index n-1; delete exactly that one row
            self.backend.delete_rows(table_id, found.row_index - 1, found.row_index)
            logger.info("delete %s id=%s row=%d", spec.name, record_id, found.row_index)
        return found

