from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Tuple

from ..common.datetime_utils import isoformat
from ..core.enums import PtoStatus, PtoType


@dataclass(frozen=True)
class HistoryEntry:
    timestamp: datetime
    actor_id: str
    actor_name: str
    action: str
    note: str = ""

    def to_dict(self) -> dict:
        return {
            "timestamp": isoformat(self.timestamp),
            "actorId": self.actor_id,
            "actorName": self.actor_name,
            "action": self.action,
            "note": self.note,
        }


@dataclass(frozen=True)
class PtoRequest:
    """Domain entity: PtoRequest.

    Note: `approver_id` / `approver_name` are copied from the owner's manager
    at creation and never re-derived. `history` only ever grows.
    """

    request_id: str
    user_id: str
    user_name: str
    type: PtoType
    start_date: date
    end_date: date
    is_half_day_start: bool
    is_half_day_end: bool
    total_days: float
    status: PtoStatus
    approver_id: str
    approver_name: str
    reason: str = ""
    attachment: str = ""
    manager_comment: str = ""
    employee_comment: str = ""
    history: Tuple[HistoryEntry, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0

    @property
    def start_year(self) -> int:
        return self.start_date.year

    def record(self, entry: HistoryEntry, **changes) -> "PtoRequest":
        """Copy with `changes` applied and `entry` appended to the history."""
        return replace(self, history=self.history + (entry,), updated_at=entry.timestamp, **changes)

    def overlaps(self, start: Optional[date], end: Optional[date]) -> bool:
        return (end is None or self.start_date <= end) and (start is None or self.end_date >= start)

    def to_calendar_dict(self) -> dict:
        """Team calendar view: who is out and when, without reasons or comments."""
        return {
            "id": self.request_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "type": self.type.value,
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
            "isHalfDayStart": self.is_half_day_start,
            "isHalfDayEnd": self.is_half_day_end,
            "totalDays": self.total_days,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "type": self.type.value,
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
            "isHalfDayStart": self.is_half_day_start,
            "isHalfDayEnd": self.is_half_day_end,
            "totalDays": self.total_days,
            "reason": self.reason,
            "attachment": self.attachment,
            "status": self.status.value,
            "managerComment": self.manager_comment,
            "employeeComment": self.employee_comment,
            "approverId": self.approver_id,
            "approverName": self.approver_name,
            "history": [h.to_dict() for h in self.history],
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
            "version": self.version,
        }


@dataclass(frozen=True)
class PtoBalance:
    user_id: str
    year: int
    total_days: float
    used_days: float
    pending_days: float

    @property
    def available_days(self) -> float:
        return self.total_days - self.used_days - self.pending_days

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "year": self.year,
            "totalDays": self.total_days,
            "usedDays": self.used_days,
            "pendingDays": self.pending_days,
            "availableDays": self.available_days,
        }
