from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import coerce_date, isoformat, optional_date, parse_timestamp
from ..core.constants import BLACKOUT_DATES, HOLIDAYS
from ..database.store import Row, TabularStore
from .model import BlackoutDate, Holiday


class CalendarRepository(Protocol):
    def list_holidays(self) -> Sequence[Holiday]:
        raise NotImplementedError

    def add_holiday(self, holiday: Holiday) -> Holiday:
        raise NotImplementedError

    def delete_holiday(self, holiday_id: str) -> bool:
        raise NotImplementedError

    def list_blackout_dates(self) -> Sequence[BlackoutDate]:
        raise NotImplementedError

    def add_blackout_date(self, blackout: BlackoutDate) -> BlackoutDate:
        raise NotImplementedError

    def delete_blackout_date(self, blackout_id: str) -> bool:
        raise NotImplementedError


def row_to_holiday(row: Row) -> Holiday:
    return Holiday(
        holiday_id=str(row["id"]),
        date=coerce_date(row["date"], "date"),
        name=row.get("name") or "",
        end_date=optional_date(row.get("endDate"), "endDate"),
    )


def row_to_blackout(row: Row) -> BlackoutDate:
    return BlackoutDate(
        blackout_id=str(row["id"]),
        date=coerce_date(row["date"], "date"),
        name=row.get("name") or "",
        end_date=optional_date(row.get("endDate"), "endDate"),
        created_by=row.get("createdBy") or "",
        created_at=parse_timestamp(row.get("createdAt")),
    )


class StoreCalendarRepository(CalendarRepository):
    def __init__(self, store: TabularStore):
        self._store = store

    def list_holidays(self) -> Sequence[Holiday]:
        return [row_to_holiday(r) for r in self._store.list_rows(HOLIDAYS)]

    def add_holiday(self, holiday: Holiday) -> Holiday:
        row = {
            "id": holiday.holiday_id,
            "date": isoformat(holiday.date),
            "endDate": isoformat(holiday.end_date),
            "name": holiday.name,
        }
        return row_to_holiday(self._store.append_row(HOLIDAYS, row))

    def delete_holiday(self, holiday_id: str) -> bool:
        return self._store.delete_row(HOLIDAYS, holiday_id)

    def list_blackout_dates(self) -> Sequence[BlackoutDate]:
        return [row_to_blackout(r) for r in self._store.list_rows(BLACKOUT_DATES)]

    def add_blackout_date(self, blackout: BlackoutDate) -> BlackoutDate:
        row = {
            "id": blackout.blackout_id,
            "date": isoformat(blackout.date),
            "endDate": isoformat(blackout.end_date),
            "name": blackout.name,
            "createdBy": blackout.created_by,
            "createdAt": isoformat(blackout.created_at),
        }
        return row_to_blackout(self._store.append_row(BLACKOUT_DATES, row))

    def delete_blackout_date(self, blackout_id: str) -> bool:
        return self._store.delete_row(BLACKOUT_DATES, blackout_id)
