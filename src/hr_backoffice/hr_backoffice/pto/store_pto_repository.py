from __future__ import annotations

import json
from typing import List, Optional, Sequence

from ..common.datetime_utils import coerce_date, parse_timestamp
from ..common.validators import as_bool
from ..core.constants import PTO_BALANCES, PTO_REQUESTS
from ..core.enums import PtoStatus, PtoType
from ..database.store import Row, TabularStore
from .model import HistoryEntry, PtoBalance, PtoRequest
from .repository import PtoBalanceRepository, PtoRequestRepository


def _history_from_row(value) -> tuple:
    if not value:
        return ()
    # Imported sheet rows keep the history as a JSON string.
    items = json.loads(value) if isinstance(value, str) else value
    return tuple(
        HistoryEntry(
            timestamp=parse_timestamp(item.get("timestamp")),
            actor_id=item.get("actorId") or "",
            actor_name=item.get("actorName") or "",
            action=item.get("action") or "",
            note=item.get("note") or "",
        )
        for item in items
    )


def row_to_request(row: Row) -> PtoRequest:
    return PtoRequest(
        request_id=str(row["id"]),
        user_id=str(row["userId"]),
        user_name=row.get("userName") or "",
        type=PtoType(row["type"]),
        start_date=coerce_date(row["startDate"], "startDate"),
        end_date=coerce_date(row["endDate"], "endDate"),
        is_half_day_start=as_bool(row.get("isHalfDayStart"), "isHalfDayStart"),
        is_half_day_end=as_bool(row.get("isHalfDayEnd"), "isHalfDayEnd"),
        total_days=float(row.get("totalDays") or 0),
        status=PtoStatus(row["status"]),
        approver_id=row.get("approverId") or "",
        approver_name=row.get("approverName") or "",
        reason=row.get("reason") or "",
        attachment=row.get("attachment") or "",
        manager_comment=row.get("managerComment") or "",
        employee_comment=row.get("employeeComment") or "",
        history=_history_from_row(row.get("history")),
        created_at=parse_timestamp(row.get("createdAt")),
        updated_at=parse_timestamp(row.get("updatedAt")),
        version=int(row.get("version") or 0),
    )


def request_to_row(request: PtoRequest) -> Row:
    row = request.to_dict()
    # The store owns the version counter.
    row.pop("version")
    return row


class StorePtoRequestRepository(PtoRequestRepository):
    def __init__(self, store: TabularStore):
        self._store = store

    def get_by_id(self, request_id: str) -> Optional[PtoRequest]:
        row = self._store.get_row(PTO_REQUESTS, str(request_id))
        return row_to_request(row) if row else None

    def list_all(self) -> Sequence[PtoRequest]:
        return [row_to_request(r) for r in self._store.list_rows(PTO_REQUESTS)]

    def list_for_user(self, user_id: str) -> Sequence[PtoRequest]:
        return [r for r in self.list_all() if r.user_id == user_id]

    def create(self, request: PtoRequest) -> PtoRequest:
        return row_to_request(self._store.append_row(PTO_REQUESTS, request_to_row(request)))

    def save(self, request: PtoRequest, *, expected_version: Optional[int] = None) -> PtoRequest:
        stored = self._store.update_row(
            PTO_REQUESTS, request.request_id, request_to_row(request), expected_version=expected_version
        )
        return row_to_request(stored)


def balance_row_id(user_id: str, year: int) -> str:
    return f"{user_id}_{year}"


def row_to_balance(row: Row) -> PtoBalance:
    return PtoBalance(
        user_id=str(row["userId"]),
        year=int(row["year"]),
        total_days=float(row.get("totalDays") or 0),
        used_days=float(row.get("usedDays") or 0),
        pending_days=float(row.get("pendingDays") or 0),
    )


class StorePtoBalanceRepository(PtoBalanceRepository):
    """Reporting snapshots, one row per (user, year)."""

    def __init__(self, store: TabularStore):
        self._store = store

    def upsert(self, balance: PtoBalance) -> PtoBalance:
        row = {"id": balance_row_id(balance.user_id, balance.year), **balance.to_dict()}
        return row_to_balance(self._store.upsert_row(PTO_BALANCES, row))

    def list_for_year(self, year: int) -> List[PtoBalance]:
        return [
            row_to_balance(r)
            for r in self._store.list_rows(PTO_BALANCES)
            if int(r.get("year") or 0) == int(year)
        ]
