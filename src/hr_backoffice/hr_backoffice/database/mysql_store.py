from __future__ import annotations

import json
from typing import List, Optional

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .connection import DatabaseConnection
from .mysql_base import all_rows, first_row, store_cursor
from .store import Row, TabularStore


def _dump(row: Row) -> str:
    payload = {k: v for k, v in row.items() if k != "version"}
    return json.dumps(payload, default=str)


def _load(r: dict) -> Row:
    payload = r["payload"]
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    row = json.loads(payload) if isinstance(payload, str) else dict(payload)
    row["id"] = r["record_id"]
    row["version"] = int(r["version"])
    return row


class MySQLTabularStore(TabularStore):
    """Collections stored as JSON rows of a single `records` table.

    Each collection plays the role of one sheet of the original workbook; the
    `seq` column keeps insertion order so scans return rows in storage order.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_rows(self, collection: str) -> List[Row]:
        with store_cursor(self._conn_factory) as cur:
            cur.execute(
                """
                SELECT record_id, payload, version
                FROM records
                WHERE collection=%s
                ORDER BY seq
                """,
                (collection,),
            )
            return [_load(r) for r in all_rows(cur)]

    def get_row(self, collection: str, row_id: str) -> Optional[Row]:
        with store_cursor(self._conn_factory) as cur:
            cur.execute(
                """
                SELECT record_id, payload, version
                FROM records
                WHERE collection=%s AND record_id=%s
                """,
                (collection, str(row_id)),
            )
            r = first_row(cur)
            return _load(r) if r else None

    def append_row(self, collection: str, row: Row) -> Row:
        row_id = row.get("id")
        if not row_id:
            raise ValidationError("Row id is required", "MISSING_PARAMETER")

        with store_cursor(self._conn_factory) as cur:
            cur.execute(
                "SELECT 1 FROM records WHERE collection=%s AND record_id=%s",
                (collection, str(row_id)),
            )
            if first_row(cur):
                raise ConflictError(f"Row {row_id} already exists in {collection}")
            cur.execute(
                """
                INSERT INTO records(collection, record_id, payload, version)
                VALUES(%s,%s,%s,1)
                """,
                (collection, str(row_id), _dump(row)),
            )
        stored = dict(row)
        stored["version"] = 1
        return stored

    def update_row(self, collection: str, row_id: str, row: Row, *, expected_version: Optional[int] = None) -> Row:
        with store_cursor(self._conn_factory) as cur:
            cur.execute(
                """
                SELECT version FROM records
                WHERE collection=%s AND record_id=%s
                FOR UPDATE
                """,
                (collection, str(row_id)),
            )
            current = first_row(cur)
            if not current:
                raise NotFoundError(f"Row {row_id} not found in {collection}")
            version = int(current["version"])
            if expected_version is not None and version != int(expected_version):
                raise ConflictError("Record was modified by someone else. Reload and try again.")

            cur.execute(
                """
                UPDATE records
                SET payload=%s, version=version+1, updated_at=NOW()
                WHERE collection=%s AND record_id=%s AND version=%s
                """,
                (_dump(row), collection, str(row_id), version),
            )
            if cur.rowcount == 0:
                raise ConflictError("Record was modified by someone else. Reload and try again.")

        stored = dict(row)
        stored["id"] = str(row_id)
        stored["version"] = version + 1
        return stored

    def upsert_row(self, collection: str, row: Row) -> Row:
        if self.get_row(collection, str(row["id"])) is None:
            return self.append_row(collection, row)
        return self.update_row(collection, str(row["id"]), row)

    def delete_row(self, collection: str, row_id: str) -> bool:
        with store_cursor(self._conn_factory) as cur:
            cur.execute(
                "DELETE FROM records WHERE collection=%s AND record_id=%s",
                (collection, str(row_id)),
            )
            return cur.rowcount > 0
