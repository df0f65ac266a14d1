from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import isoformat, optional_date, parse_timestamp
from ..core.constants import USERS
from ..core.enums import EmploymentType, Role
from ..database.store import Row, TabularStore
from .model import User
from .repository import UserRepository


def row_to_user(row: Row) -> User:
    return User(
        user_id=str(row["id"]),
        name=row.get("name") or "",
        email=row.get("email") or "",
        role=Role(str(row.get("role") or Role.STAFF.value).upper()),
        manager_id=row.get("managerId") or None,
        employment_type=EmploymentType(row.get("employmentType") or EmploymentType.FULL_TIME.value),
        hire_date=optional_date(row.get("hireDate"), "hireDate"),
        created_at=parse_timestamp(row.get("createdAt")),
        updated_at=parse_timestamp(row.get("updatedAt")),
        version=int(row.get("version") or 0),
    )


def user_to_row(user: User) -> Row:
    return {
        "id": user.user_id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "managerId": user.manager_id,
        "employmentType": user.employment_type.value,
        "hireDate": isoformat(user.hire_date),
        "createdAt": isoformat(user.created_at),
        "updatedAt": isoformat(user.updated_at),
    }


class StoreUserRepository(UserRepository):
    def __init__(self, store: TabularStore):
        self._store = store

    def get_by_id(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        row = self._store.get_row(USERS, str(user_id))
        return row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        needle = email.strip().lower()
        for row in self._store.list_rows(USERS):
            if str(row.get("email") or "").lower() == needle:
                return row_to_user(row)
        return None

    def list_all(self) -> Sequence[User]:
        return [row_to_user(r) for r in self._store.list_rows(USERS)]

    def create(self, user: User) -> User:
        return row_to_user(self._store.append_row(USERS, user_to_row(user)))

    def save(self, user: User) -> User:
        stored = self._store.update_row(USERS, user.user_id, user_to_row(user), expected_version=user.version)
        return row_to_user(stored)
