"""Demo data for a fresh store (users, holidays, blackout dates, config)."""

from __future__ import annotations

from ..core import constants
from ..core.enums import EmploymentType, Role
from ..common.datetime_utils import now_utc
from ..system_config.model import SystemConfig
from .store import TabularStore


def _user(user_id: str, name: str, email: str, role: Role, manager_id, employment: EmploymentType, hire_date: str) -> dict:
    now = now_utc().isoformat()
    return {
        "id": user_id,
        "name": name,
        "email": email,
        "role": role.value,
        "managerId": manager_id,
        "employmentType": employment.value,
        "hireDate": hire_date,
        "createdAt": now,
        "updatedAt": now,
    }


DEMO_USERS = [
    _user("user_admin", "Alex Admin", "admin@example.org", Role.ADMIN, None, EmploymentType.FULL_TIME, "2019-01-07"),
    _user("user_manager", "Morgan Manager", "manager@example.org", Role.MANAGER, "user_admin", EmploymentType.FULL_TIME, "2020-04-01"),
    _user("user_staff", "Sam Staff", "staff@example.org", Role.STAFF, "user_manager", EmploymentType.FULL_TIME, "2025-03-01"),
    _user("user_parttime", "Pat Parttime", "parttime@example.org", Role.STAFF, "user_manager", EmploymentType.PART_TIME, "2023-09-15"),
]

DEMO_HOLIDAYS = [
    {"id": "holiday_newyear", "date": "2026-01-01", "endDate": None, "name": "New Year's Day"},
    {"id": "holiday_july4", "date": "2026-07-03", "endDate": None, "name": "Independence Day (observed)"},
    {"id": "holiday_thanksgiving", "date": "2026-11-26", "endDate": "2026-11-27", "name": "Thanksgiving Holiday"},
    {"id": "holiday_christmas", "date": "2026-12-24", "endDate": "2026-12-25", "name": "Christmas Holiday"},
]

DEMO_BLACKOUTS = [
    {"id": "blackout_q2close", "date": "2026-06-26", "endDate": "2026-06-30", "name": "Q2 Financial Close", "createdBy": "user_admin"},
    {"id": "blackout_yearend", "date": "2026-12-14", "endDate": "2026-12-18", "name": "Year-End Close", "createdBy": "user_admin"},
]

DEMO_CONFIG = {"id": constants.SYSTEM_CONFIG_ID, **SystemConfig().to_dict()}


def seed_demo_data(store: TabularStore) -> int:
    """Insert demo rows that are not there yet. Returns the number of rows written."""
    written = 0
    batches = [
        (constants.USERS, DEMO_USERS),
        (constants.HOLIDAYS, DEMO_HOLIDAYS),
        (constants.BLACKOUT_DATES, DEMO_BLACKOUTS),
        (constants.SYSTEM_CONFIG, [DEMO_CONFIG]),
    ]
    for collection, rows in batches:
        for row in rows:
            if store.get_row(collection, row["id"]) is None:
                store.append_row(collection, dict(row))
                written += 1
    return written
