from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

Row = Dict[str, Any]


class TabularStore(Protocol):
    """Row-oriented storage of named collections keyed by `id`.

    Rows are plain dicts. Every stored row carries an integer `version` that the
    store bumps on each write; `update` rejects a stale `expected_version`
    with ConflictError. Iteration order of `list_rows` is insertion order.
    """

    def list_rows(self, collection: str) -> List[Row]:
        raise NotImplementedError

    def get_row(self, collection: str, row_id: str) -> Optional[Row]:
        raise NotImplementedError

    def append_row(self, collection: str, row: Row) -> Row:
        """Insert a new row. Returns the stored row (with `version`)."""

        raise NotImplementedError

    def update_row(self, collection: str, row_id: str, row: Row, *, expected_version: Optional[int] = None) -> Row:
        """Replace a row. Raises NotFoundError / ConflictError."""

        raise NotImplementedError

    def upsert_row(self, collection: str, row: Row) -> Row:
        """Insert or replace without a version check (snapshots, config)."""

        raise NotImplementedError

    def delete_row(self, collection: str, row_id: str) -> bool:
        raise NotImplementedError
