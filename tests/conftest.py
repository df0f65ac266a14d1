from __future__ import annotations

import pytest

from src.hr_backoffice.hr_backoffice.container import build_container
from src.hr_backoffice.hr_backoffice.core import constants
from src.hr_backoffice.hr_backoffice.database.memory_store import InMemoryStore
from src.hr_backoffice.hr_backoffice.notifications.calendar import LoggingCalendarPublisher
from src.hr_backoffice.hr_backoffice.notifications.notifier import LoggingNotifier


def _user(user_id, name, *, role="STAFF", manager_id=None, employment="FullTime", hire_date="2020-01-06"):
    return {
        "id": user_id,
        "name": name,
        "email": f"{user_id}@example.org",
        "role": role,
        "managerId": manager_id,
        "employmentType": employment,
        "hireDate": hire_date,
    }


ORG_CHART = [
    _user("admin", "Ada Admin", role="ADMIN"),
    _user("manager", "Max Manager", role="MANAGER", manager_id="admin"),
    _user("manager2", "Mia Manager", role="MANAGER", manager_id="admin"),
    _user("staff", "Sam Staff", manager_id="manager", hire_date="2025-03-01"),
    _user("peer", "Pia Peer", manager_id="manager", employment="PartTime"),
    _user("orphan", "Olly Orphan"),
]


@pytest.fixture
def store():
    return InMemoryStore(seed={constants.USERS: ORG_CHART})


@pytest.fixture
def notifier():
    return LoggingNotifier()


@pytest.fixture
def calendar_publisher():
    return LoggingCalendarPublisher()


@pytest.fixture
def make_container(store, notifier, calendar_publisher):
    def make(**kwargs):
        kwargs.setdefault("notifier", notifier)
        kwargs.setdefault("calendar_publisher", calendar_publisher)
        return build_container(store=store, **kwargs)

    return make


@pytest.fixture
def container(make_container):
    return make_container()


@pytest.fixture
def users(container):
    return {u.user_id: u for u in container.directory.list_all()}
