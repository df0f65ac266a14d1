from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Mapping, Optional

from ..common.datetime_utils import coerce_date, now_utc, optional_date
from ..common.ids import generate_id
from ..common.logging import get_logger
from ..common.validators import require_fields, require_non_empty
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import User
from .model import BlackoutConflict, BlackoutDate, Holiday
from .repository import CalendarRepository
from .rules import count_business_days, find_blackout_conflict

log = get_logger(__name__)


@dataclass(frozen=True)
class NewCalendarEntry:
    """A holiday or blackout range as entered by an admin."""

    date: date
    name: str
    end_date: Optional[date] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "NewCalendarEntry":
        require_fields(payload, ["date", "name"])
        start = coerce_date(payload["date"], "date")
        end = optional_date(payload.get("endDate"), "endDate")
        if end is not None and end < start:
            raise ValidationError("End date must be on or after the start date", "INVALID_DATE_RANGE")
        return cls(date=start, name=require_non_empty(payload["name"], "name"), end_date=end)


class CalendarRules:
    """Holiday and blackout catalogs plus the checks built on them."""

    def __init__(self, calendar: CalendarRepository):
        self._calendar = calendar

    # Reads
    def holidays(self) -> List[Holiday]:
        return list(self._calendar.list_holidays())

    def blackout_dates(self) -> List[BlackoutDate]:
        return list(self._calendar.list_blackout_dates())

    def business_days(self, start: date, end: date, is_half_day_start: bool, is_half_day_end: bool) -> float:
        return count_business_days(start, end, is_half_day_start, is_half_day_end, self.holidays())

    def blackout_conflict(self, start: date, end: date) -> BlackoutConflict:
        return find_blackout_conflict(start, end, self.blackout_dates())

    # Admin catalog management
    @staticmethod
    def _require_admin(actor: User) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Unauthorized: Admin access required")

    def create_holiday(self, *, actor: User, entry: NewCalendarEntry) -> Holiday:
        self._require_admin(actor)
        holiday = self._calendar.add_holiday(
            Holiday(holiday_id=generate_id("holiday"), date=entry.date, end_date=entry.end_date, name=entry.name)
        )
        log.info("holiday_created", holiday_id=holiday.holiday_id, date=entry.date.isoformat(), actor_id=actor.user_id)
        return holiday

    def delete_holiday(self, *, actor: User, holiday_id: str) -> None:
        self._require_admin(actor)
        if not self._calendar.delete_holiday(require_non_empty(holiday_id, "holidayId")):
            raise NotFoundError("Holiday not found")
        log.info("holiday_deleted", holiday_id=holiday_id, actor_id=actor.user_id)

    def create_blackout_date(self, *, actor: User, entry: NewCalendarEntry) -> BlackoutDate:
        self._require_admin(actor)
        blackout = self._calendar.add_blackout_date(
            BlackoutDate(
                blackout_id=generate_id("blackout"),
                date=entry.date,
                end_date=entry.end_date,
                name=entry.name,
                created_by=actor.user_id,
                created_at=now_utc(),
            )
        )
        log.info("blackout_created", blackout_id=blackout.blackout_id, date=entry.date.isoformat(), actor_id=actor.user_id)
        return blackout

    def delete_blackout_date(self, *, actor: User, blackout_id: str) -> None:
        self._require_admin(actor)
        if not self._calendar.delete_blackout_date(require_non_empty(blackout_id, "blackoutId")):
            raise NotFoundError("Blackout date not found")
        log.info("blackout_deleted", blackout_id=blackout_id, actor_id=actor.user_id)
