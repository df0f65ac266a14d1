"""Create the database and apply database/schema.sql."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Mapping

from ..common.logging import get_logger
from .connection import DatabaseConnection, DBConfig
from .mysql_base import translate_store_errors

log = get_logger(__name__)

_CREATE_OR_USE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


def schema_statements(sql: str) -> List[str]:
    """Statements of a schema file, minus comments and database selection.

    The target database comes from DB_CONFIG, so CREATE DATABASE / USE lines
    in the file are ignored. Statements must not contain literal semicolons.
    """
    sql = _LINE_COMMENT.sub("", sql)
    sql = _CREATE_OR_USE.sub("", sql)
    return [s.strip() for s in sql.split(";") if s.strip()]


def ensure_database_exists(db: DatabaseConnection) -> None:
    with translate_store_errors():
        conn = db.connect(with_database=False)
        try:
            cur = conn.cursor()
            cur.execute(
                f"CREATE DATABASE IF NOT EXISTS `{db.config.database}` "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            )
            conn.commit()
        finally:
            conn.close()


def apply_schema(db_config: Mapping, *, schema_path: str | Path) -> None:
    db = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    ensure_database_exists(db)

    statements = schema_statements(Path(schema_path).read_text(encoding="utf-8"))
    with translate_store_errors():
        conn = db.connect()
        try:
            cur = conn.cursor()
            for stmt in statements:
                cur.execute(stmt)
            conn.commit()
        finally:
            conn.close()
    log.info("schema_applied", db=db.config.label, statements=len(statements))


def list_tables(db_config: Mapping) -> List[str]:
    with translate_store_errors():
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config)).connect()
        try:
            cur = conn.cursor()
            cur.execute("SHOW TABLES")
            return [row[0] for row in cur.fetchall()]
        finally:
            conn.close()
