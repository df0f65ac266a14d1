from __future__ import annotations

from datetime import date, datetime

import pytest
import requests

from src.hr_backoffice.hr_backoffice.core.enums import PtoStatus, PtoType
from src.hr_backoffice.hr_backoffice.notifications.calendar import WebhookCalendarPublisher, build_calendar_events
from src.hr_backoffice.hr_backoffice.pto.model import PtoRequest


def approved(start, end, *, half_start=False, half_end=False, reason="Beach"):
    return PtoRequest(
        request_id="pto_1",
        user_id="staff",
        user_name="Sam Staff",
        type=PtoType.VACATION,
        start_date=start,
        end_date=end,
        is_half_day_start=half_start,
        is_half_day_end=half_end,
        total_days=3.0,
        status=PtoStatus.APPROVED,
        approver_id="manager",
        approver_name="Max Manager",
        reason=reason,
    )


def test_full_days_become_one_all_day_event_with_exclusive_end():
    events = build_calendar_events(approved(date(2026, 3, 2), date(2026, 3, 4)))

    assert len(events) == 1
    event = events[0]
    assert event.all_day
    assert event.title == "Sam Staff - Out of Office"
    assert event.start == date(2026, 3, 2)
    assert event.end == date(2026, 3, 5)
    assert "Reason: Beach" in event.description


def test_half_days_split_into_daily_events():
    events = build_calendar_events(approved(date(2026, 3, 2), date(2026, 3, 4), half_start=True, half_end=True))

    assert len(events) == 3
    first, middle, last = events
    assert not first.all_day
    assert first.start == datetime(2026, 3, 2, 9, 0)
    assert first.end == datetime(2026, 3, 2, 13, 0)
    assert middle.all_day and middle.end == date(2026, 3, 4)
    assert not last.all_day


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, status_code=200):
        self.status_code = status_code
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json, timeout))
        return FakeResponse(self.status_code)


def test_webhook_posts_events_as_json():
    session = FakeSession()
    publisher = WebhookCalendarPublisher("https://calendar.example.org/hook", timeout=5, session=session)

    publisher.publish("team@calendar", build_calendar_events(approved(date(2026, 3, 2), date(2026, 3, 2))))

    url, body, timeout = session.calls[0]
    assert url == "https://calendar.example.org/hook"
    assert timeout == 5
    assert body["calendarId"] == "team@calendar"
    assert body["events"][0] == {
        "title": "Sam Staff - Out of Office",
        "description": "PTO Type: Vacation\nTotal Days: 3\nReason: Beach",
        "start": "2026-03-02",
        "end": "2026-03-03",
        "allDay": True,
        "location": "Out of Office",
    }


def test_webhook_failure_raises():
    publisher = WebhookCalendarPublisher("https://calendar.example.org/hook", session=FakeSession(502))

    with pytest.raises(requests.HTTPError):
        publisher.publish("team@calendar", [])
