from __future__ import annotations

import json
from pathlib import Path

import mysql.connector
import pytest

from src.hr_backoffice.hr_backoffice.core.exceptions import ConflictError, StoreError, StoreTimeoutError
from src.hr_backoffice.hr_backoffice.database.bootstrap import ensure_database_exists, schema_statements
from src.hr_backoffice.hr_backoffice.database.connection import DBConfig
from src.hr_backoffice.hr_backoffice.database.mysql_base import translate_store_errors
from src.hr_backoffice.hr_backoffice.database.mysql_store import MySQLTabularStore


class FakeCursor:
    def __init__(self, results):
        self._results = list(results)
        self.executed = []
        self.rowcount = 1

    def execute(self, sql, params=None):
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self._results.pop(0) if self._results else None

    def fetchall(self):
        return self._results.pop(0) if self._results else []

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class FakeConnFactory:
    def __init__(self, cursor):
        self.connection = FakeConnection(cursor)

    def connect(self):
        return self.connection


def test_list_rows_decodes_payload_and_version():
    cursor = FakeCursor([[{"record_id": "u1", "payload": json.dumps({"name": "Ana"}), "version": 3}]])
    store = MySQLTabularStore(FakeConnFactory(cursor))

    assert store.list_rows("users") == [{"id": "u1", "name": "Ana", "version": 3}]
    assert "ORDER BY seq" in cursor.executed[0][0]


def test_update_with_stale_version_rolls_back():
    cursor = FakeCursor([{"version": 4}])
    factory = FakeConnFactory(cursor)
    store = MySQLTabularStore(factory)

    with pytest.raises(ConflictError):
        store.update_row("pto_requests", "pto_1", {"status": "Approved"}, expected_version=3)
    assert factory.connection.rolled_back
    assert not factory.connection.committed


def test_update_bumps_version_and_drops_it_from_payload():
    cursor = FakeCursor([{"version": 2}])
    factory = FakeConnFactory(cursor)
    store = MySQLTabularStore(factory)

    stored = store.update_row("pto_requests", "pto_1", {"status": "Approved", "version": 2}, expected_version=2)

    assert stored == {"status": "Approved", "version": 3, "id": "pto_1"}
    payload = json.loads(cursor.executed[1][1][0])
    assert payload == {"status": "Approved"}
    assert factory.connection.committed


def test_driver_errors_become_store_errors():
    with pytest.raises(StoreError) as exc:
        with translate_store_errors():
            raise mysql.connector.errors.InterfaceError(msg="Can't connect", errno=2003)
    assert exc.value.code == "NETWORK_ERROR"

    with pytest.raises(StoreTimeoutError) as exc:
        with translate_store_errors():
            raise mysql.connector.errors.OperationalError(msg="Lost connection", errno=2013)
    assert exc.value.code == "TIMEOUT"


def test_schema_file_yields_only_the_table_statement():
    schema = Path(__file__).resolve().parents[2] / "database" / "schema.sql"

    statements = schema_statements(schema.read_text(encoding="utf-8"))

    assert len(statements) == 1
    assert statements[0].startswith("CREATE TABLE IF NOT EXISTS records")


def test_db_config_from_settings_mapping():
    config = DBConfig.from_mapping({"host": "db", "port": "3307", "user": "hr", "password": "pw", "database": "pto"})

    assert config.label == "hr@db:3307/pto"
    assert config.timeout == 30
    assert DBConfig.from_mapping({}).label == "root@localhost:3306/hr_backoffice"


def test_connect_failure_surfaces_as_store_error():
    class DownFactory:
        def connect(self):
            raise mysql.connector.errors.InterfaceError(msg="Can't connect to MySQL server", errno=2003)

    with pytest.raises(StoreError) as exc:
        MySQLTabularStore(DownFactory()).get_row("users", "u1")
    assert exc.value.code == "NETWORK_ERROR"


def test_bootstrap_connect_failure_surfaces_as_store_error():
    class DownServer:
        config = DBConfig.from_mapping({})

        def connect(self, *, with_database=True):
            raise mysql.connector.errors.OperationalError(msg="Connection timed out", errno=2003)

    with pytest.raises(StoreTimeoutError):
        ensure_database_exists(DownServer())
