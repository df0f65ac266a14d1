from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from ..common.datetime_utils import coerce_date, now_utc
from ..common.ids import generate_id
from ..common.logging import get_logger
from ..common.validators import require_fields, require_non_empty
from ..core.enums import EmploymentType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .directory import UserDirectory
from .model import User
from .repository import UserRepository

log = get_logger(__name__)


def _parse_enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


class UserService:
    """Use case: provision users and maintain the org chart (admin)."""

    def __init__(self, users: UserRepository, directory: UserDirectory):
        self._users = users
        self._directory = directory

    def create_user(self, *, actor: User, payload: dict) -> User:
        if not actor.is_admin:
            raise AuthorizationError("Unauthorized: Admin access required")

        require_fields(payload, ["name", "email", "employmentType", "hireDate"])
        email = require_non_empty(payload["email"], "email").lower()
        if self._directory.get_by_email(email):
            raise ValidationError("A user with this email already exists", "DUPLICATE_EMAIL")

        role = _parse_enum(Role, str(payload.get("role") or Role.STAFF.value).upper(), "role")
        manager_id = payload.get("managerId") or None
        if manager_id and not self._directory.get_by_id(manager_id):
            raise NotFoundError("Manager not found")

        now = now_utc()
        user = User(
            user_id=generate_id("user"),
            name=require_non_empty(payload["name"], "name"),
            email=email,
            role=role,
            manager_id=manager_id,
            employment_type=_parse_enum(EmploymentType, payload["employmentType"], "employmentType"),
            hire_date=coerce_date(payload["hireDate"], "hireDate"),
            created_at=now,
            updated_at=now,
        )
        created = self._users.create(user)
        log.info("user_created", user_id=created.user_id, role=created.role.value, actor_id=actor.user_id)
        return created

    def update_user(self, *, actor: User, user_id: str, role: Optional[str] = None, manager_id: Optional[str] = None, clear_manager: bool = False) -> User:
        """Only role and manager may change once a user exists."""
        if not actor.is_admin:
            raise AuthorizationError("Unauthorized: Admin access required")

        user = self._directory.get_by_id(require_non_empty(user_id, "userId"))
        if not user:
            raise NotFoundError("User not found")

        changes = {}
        if role:
            changes["role"] = _parse_enum(Role, str(role).upper(), "role")
        if clear_manager:
            changes["manager_id"] = None
        elif manager_id:
            if manager_id == user.user_id:
                raise ValidationError("A user cannot manage themselves")
            if not self._directory.get_by_id(manager_id):
                raise NotFoundError("Manager not found")
            changes["manager_id"] = manager_id
        if not changes:
            raise ValidationError("No update data provided", "MISSING_PARAMETERS")

        saved = self._users.save(replace(user, updated_at=now_utc(), **changes))
        log.info("user_updated", user_id=saved.user_id, fields=sorted(changes), actor_id=actor.user_id)
        return saved

    def list_users(self, *, actor: User) -> List[User]:
        if not actor.is_admin:
            raise AuthorizationError("Unauthorized: Admin access required")
        return self._directory.list_all()

    def list_direct_reports(self, *, actor: User) -> List[User]:
        if not actor.is_manager:
            raise AuthorizationError("Unauthorized: Manager access required")
        return self._directory.direct_reports(actor.user_id)
