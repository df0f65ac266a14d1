from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import EmploymentType, Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: Plain data object (no store access). `manager_id` is a weak reference,
    looked up through the directory and never owned.
    """

    user_id: str
    name: str
    email: str
    role: Role
    manager_id: Optional[str]
    employment_type: EmploymentType
    hire_date: Optional[date]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_manager(self) -> bool:
        """Managers and admins both manage people."""
        return self.role in {Role.MANAGER, Role.ADMIN}

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "managerId": self.manager_id,
            "employmentType": self.employment_type.value,
            "hireDate": isoformat(self.hire_date),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
