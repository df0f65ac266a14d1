from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from .model import PtoBalance, PtoRequest


class PtoRequestRepository(Protocol):
    def get_by_id(self, request_id: str) -> Optional[PtoRequest]:
        raise NotImplementedError

    def list_all(self) -> Sequence[PtoRequest]:
        raise NotImplementedError

    def list_for_user(self, user_id: str) -> Sequence[PtoRequest]:
        raise NotImplementedError

    def create(self, request: PtoRequest) -> PtoRequest:
        raise NotImplementedError

    def save(self, request: PtoRequest, *, expected_version: Optional[int] = None) -> PtoRequest:
        """Persist a changed request.

        Raises ConflictError when `expected_version` no longer matches the stored row.
        """

        raise NotImplementedError


class PtoBalanceRepository(Protocol):
    def upsert(self, balance: PtoBalance) -> PtoBalance:
        raise NotImplementedError

    def list_for_year(self, year: int) -> List[PtoBalance]:
        raise NotImplementedError
