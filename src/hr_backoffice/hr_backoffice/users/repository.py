from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note: services depend on this interface, not on a concrete store.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def create(self, user: User) -> User:
        raise NotImplementedError

    def save(self, user: User) -> User:
        """Write back a user read earlier; fails with ConflictError if it changed meanwhile."""

        raise NotImplementedError
