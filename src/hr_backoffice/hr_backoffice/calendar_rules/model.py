from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import isoformat


@dataclass(frozen=True)
class Holiday:
    holiday_id: str
    date: date
    name: str
    end_date: Optional[date] = None

    @property
    def last_day(self) -> date:
        return self.end_date or self.date

    def covers(self, day: date) -> bool:
        return self.date <= day <= self.last_day

    def to_dict(self) -> dict:
        data = {"id": self.holiday_id, "date": isoformat(self.date), "name": self.name}
        if self.end_date:
            data["endDate"] = isoformat(self.end_date)
        return data


@dataclass(frozen=True)
class BlackoutDate:
    blackout_id: str
    date: date
    name: str
    end_date: Optional[date] = None
    created_by: str = ""
    created_at: Optional[datetime] = None

    @property
    def last_day(self) -> date:
        return self.end_date or self.date

    def overlaps(self, start: date, end: date) -> bool:
        return self.date <= end and start <= self.last_day

    def to_dict(self) -> dict:
        data = {
            "id": self.blackout_id,
            "date": isoformat(self.date),
            "name": self.name,
            "createdBy": self.created_by,
            "createdAt": isoformat(self.created_at),
        }
        if self.end_date:
            data["endDate"] = isoformat(self.end_date)
        return data


@dataclass(frozen=True)
class BlackoutConflict:
    conflict: bool
    name: Optional[str] = None
    date: Optional[date] = None

    def to_dict(self) -> dict:
        if not self.conflict:
            return {"conflict": False}
        return {"conflict": True, "name": self.name, "date": isoformat(self.date)}
