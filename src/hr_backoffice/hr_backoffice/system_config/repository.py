from __future__ import annotations

from typing import Protocol

from ..common.validators import as_bool
from ..core.constants import SYSTEM_CONFIG, SYSTEM_CONFIG_ID
from ..database.store import Row, TabularStore
from .model import SystemConfig


class SystemConfigRepository(Protocol):
    def load(self) -> SystemConfig:
        raise NotImplementedError

    def save(self, config: SystemConfig) -> SystemConfig:
        raise NotImplementedError


def row_to_config(row: Row) -> SystemConfig:
    defaults = SystemConfig()
    return SystemConfig(
        default_full_time_days=float(row.get("defaultFullTimeDays", defaults.default_full_time_days)),
        default_part_time_days=float(row.get("defaultPartTimeDays", defaults.default_part_time_days)),
        prorate_by_hire_date=as_bool(row.get("prorateByHireDate", defaults.prorate_by_hire_date), "prorateByHireDate"),
        short_notice_threshold_days=int(row.get("shortNoticeThresholdDays", defaults.short_notice_threshold_days)),
        shared_calendar_id=str(row.get("sharedCalendarId") or ""),
        full_team_calendar_visible=as_bool(
            row.get("fullTeamCalendarVisible", defaults.full_team_calendar_visible), "fullTeamCalendarVisible"
        ),
    )


class StoreSystemConfigRepository(SystemConfigRepository):
    """Singleton config row. Never cached: every load reads the store."""

    def __init__(self, store: TabularStore):
        self._store = store

    def load(self) -> SystemConfig:
        row = self._store.get_row(SYSTEM_CONFIG, SYSTEM_CONFIG_ID)
        return row_to_config(row) if row else SystemConfig()

    def save(self, config: SystemConfig) -> SystemConfig:
        row = {"id": SYSTEM_CONFIG_ID, **config.to_dict()}
        return row_to_config(self._store.upsert_row(SYSTEM_CONFIG, row))
