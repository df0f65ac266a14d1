from __future__ import annotations

from typing import List, Optional

from .model import User
from .repository import UserRepository


class UserDirectory:
    """Read-side view of the org chart: users, managers and direct reports."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_by_id(self, user_id: Optional[str]) -> Optional[User]:
        return self._users.get_by_id(user_id) if user_id else None

    def get_by_email(self, email: Optional[str]) -> Optional[User]:
        return self._users.get_by_email(email) if email else None

    def list_all(self) -> List[User]:
        return list(self._users.list_all())

    def get_manager(self, user: User) -> Optional[User]:
        return self.get_by_id(user.manager_id)

    def direct_reports(self, manager_id: str) -> List[User]:
        return [u for u in self._users.list_all() if u.manager_id == manager_id]

    def manages(self, actor: User, user_id: str) -> bool:
        """True when `user_id` names `actor` as their manager right now, whatever `actor`'s role."""
        owner = self.get_by_id(user_id)
        return owner is not None and owner.manager_id == actor.user_id

    def is_current_manager_of(self, actor: User, user_id: str) -> bool:
        """Like `manages`, but only for users holding a manager (or admin) role."""
        return actor.is_manager and self.manages(actor, user_id)
