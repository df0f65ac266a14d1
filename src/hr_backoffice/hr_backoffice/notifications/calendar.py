from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Protocol, Sequence, Union

import requests

from ..common.datetime_utils import iter_days
from ..common.logging import get_logger
from ..core.constants import OUTBOUND_TIMEOUT_SECONDS
from ..pto.model import PtoRequest

log = get_logger(__name__)

HALF_DAY_START = time(9, 0)
HALF_DAY_END = time(13, 0)
LOCATION = "Out of Office"


@dataclass(frozen=True)
class CalendarEvent:
    title: str
    description: str
    start: Union[date, datetime]
    end: Union[date, datetime]
    all_day: bool
    location: str = LOCATION

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "allDay": self.all_day,
            "location": self.location,
        }


def _half_day(title: str, description: str, day: date) -> CalendarEvent:
    return CalendarEvent(
        title=title,
        description=description,
        start=datetime.combine(day, HALF_DAY_START),
        end=datetime.combine(day, HALF_DAY_END),
        all_day=False,
    )


def _all_day(title: str, description: str, first: date, last: date) -> CalendarEvent:
    # All-day events use an exclusive end date.
    return CalendarEvent(title=title, description=description, start=first, end=last + timedelta(days=1), all_day=True)


def build_calendar_events(request: PtoRequest) -> List[CalendarEvent]:
    """Out-of-office events for an approved request.

    Without half days this is one all-day event over the whole range. With a
    half-day flag every day gets its own event, 9:00-13:00 for the half days.
    """
    title = f"{request.user_name} - Out of Office"
    description = f"PTO Type: {request.type.value}\nTotal Days: {request.total_days:g}\n"
    if request.reason:
        description += f"Reason: {request.reason}"

    start, end = request.start_date, request.end_date
    if not (request.is_half_day_start or request.is_half_day_end):
        return [_all_day(title, description, start, end)]

    events = []
    for day in iter_days(start, end):
        half = (day == start and request.is_half_day_start) or (day == end and request.is_half_day_end)
        if half:
            events.append(_half_day(title, description, day))
        else:
            events.append(_all_day(title, description, day, day))
    return events


class CalendarPublisher(Protocol):
    def publish(self, calendar_id: str, events: Sequence[CalendarEvent]) -> None:
        raise NotImplementedError


class WebhookCalendarPublisher(CalendarPublisher):
    """Posts events as JSON to a calendar bridge endpoint."""

    def __init__(self, url: str, *, timeout: float = OUTBOUND_TIMEOUT_SECONDS, session=None):
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()

    def publish(self, calendar_id: str, events: Sequence[CalendarEvent]) -> None:
        payload = {"calendarId": calendar_id, "events": [e.to_dict() for e in events]}
        response = self._session.post(self._url, json=payload, timeout=self._timeout)
        response.raise_for_status()
        log.info("calendar_events_published", calendar_id=calendar_id, count=len(events))


class LoggingCalendarPublisher(CalendarPublisher):
    def __init__(self):
        self.published: List[tuple] = []

    def publish(self, calendar_id: str, events: Sequence[CalendarEvent]) -> None:
        self.published.append((calendar_id, list(events)))
        log.info("calendar_publish_skipped", calendar_id=calendar_id, count=len(events))
