from __future__ import annotations

import copy
from typing import Dict, List, Optional

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .store import Row, TabularStore


class InMemoryStore(TabularStore):
    """Dict-backed store used by tests and STORE_BACKEND=memory.

    Rows are deep-copied on the way in and out so callers never share state
    with the store, the same as reading a spreadsheet range.
    """

    def __init__(self, seed: Optional[Dict[str, List[Row]]] = None):
        self._collections: Dict[str, Dict[str, Row]] = {}
        for collection, rows in (seed or {}).items():
            for row in rows:
                self.append_row(collection, row)

    def _table(self, collection: str) -> Dict[str, Row]:
        return self._collections.setdefault(collection, {})

    def list_rows(self, collection: str) -> List[Row]:
        return [copy.deepcopy(r) for r in self._table(collection).values()]

    def get_row(self, collection: str, row_id: str) -> Optional[Row]:
        row = self._table(collection).get(str(row_id))
        return copy.deepcopy(row) if row else None

    def append_row(self, collection: str, row: Row) -> Row:
        row_id = row.get("id")
        if not row_id:
            raise ValidationError("Row id is required", "MISSING_PARAMETER")
        table = self._table(collection)
        if str(row_id) in table:
            raise ConflictError(f"Row {row_id} already exists in {collection}")
        stored = copy.deepcopy(row)
        stored["version"] = 1
        table[str(row_id)] = stored
        return copy.deepcopy(stored)

    def update_row(self, collection: str, row_id: str, row: Row, *, expected_version: Optional[int] = None) -> Row:
        table = self._table(collection)
        current = table.get(str(row_id))
        if current is None:
            raise NotFoundError(f"Row {row_id} not found in {collection}")
        if expected_version is not None and int(current.get("version", 0)) != int(expected_version):
            raise ConflictError("Record was modified by someone else. Reload and try again.")
        stored = copy.deepcopy(row)
        stored["id"] = str(row_id)
        stored["version"] = int(current.get("version", 0)) + 1
        table[str(row_id)] = stored
        return copy.deepcopy(stored)

    def upsert_row(self, collection: str, row: Row) -> Row:
        if str(row.get("id")) in self._table(collection):
            return self.update_row(collection, str(row["id"]), row)
        return self.append_row(collection, row)

    def delete_row(self, collection: str, row_id: str) -> bool:
        return self._table(collection).pop(str(row_id), None) is not None
