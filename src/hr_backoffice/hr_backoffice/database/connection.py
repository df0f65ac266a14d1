from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping

import mysql.connector

from ..core.constants import STORE_TIMEOUT_SECONDS


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    timeout: int = STORE_TIMEOUT_SECONDS

    @classmethod
    def from_mapping(cls, db_config: Mapping) -> "DBConfig":
        """Build from the DB_CONFIG settings dict; missing keys fall back to local defaults."""
        return cls(
            host=str(db_config.get("host") or "localhost"),
            port=int(db_config.get("port") or 3306),
            user=str(db_config.get("user") or "root"),
            password=str(db_config.get("password") or ""),
            database=str(db_config.get("database") or "hr_backoffice"),
        )

    @property
    def label(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Connection factory, one per distinct DBConfig.

    Note: Connections are short-lived, opened per store operation and closed
    by the caller.
    """

    _instances: Dict[DBConfig, "DatabaseConnection"] = {}

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if config not in cls._instances:
            cls._instances[config] = cls(config)
        return cls._instances[config]

    def connect(self, *, with_database: bool = True):
        kwargs = dict(
            host=self._config.host,
            port=self._config.port,
            user=self._config.user,
            password=self._config.password,
            connection_timeout=self._config.timeout,
        )
        # CREATE DATABASE needs a server-level connection.
        if with_database:
            kwargs["database"] = self._config.database
        return mysql.connector.connect(**kwargs)
