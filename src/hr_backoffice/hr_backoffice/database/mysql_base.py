from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector

from ..core.exceptions import StoreError, StoreTimeoutError
from .connection import DatabaseConnection

# CR_SERVER_LOST: the server stopped answering mid-query.
_TIMEOUT_ERRNOS = {2013}


@contextmanager
def translate_store_errors() -> Iterator[None]:
    """Re-raise driver connectivity failures as StoreError / StoreTimeoutError."""
    try:
        yield
    except (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError) as e:
        if getattr(e, "errno", None) in _TIMEOUT_ERRNOS or "timed out" in str(e).lower():
            raise StoreTimeoutError(f"Store did not respond in time: {e}") from e
        raise StoreError(f"Store unavailable: {e}") from e


@contextmanager
def store_cursor(conn_factory: DatabaseConnection) -> Iterator[Any]:
    """One transaction per block: commit on success, roll back on any error.

    Rows come back as dicts; driver failures surface as store errors.
    """
    with translate_store_errors():
        conn = conn_factory.connect()
        cur = None
        try:
            cur = conn.cursor(dictionary=True)
            yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            if cur is not None:
                cur.close()
            conn.close()


def first_row(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def all_rows(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])
