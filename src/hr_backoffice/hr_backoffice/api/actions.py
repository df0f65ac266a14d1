"""The closed set of API actions.

Each action pairs a typed payload (parsed and validated before any store
access) with the service call that handles it and the error code reported
when that call fails unexpectedly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from ..calendar_rules.service import NewCalendarEntry
from ..common.datetime_utils import optional_date
from ..common.validators import as_bool, require_non_empty
from ..container import Container
from ..pto.workflow import NewPtoRequest, PtoRequestChanges, RequestFilters, optional_version
from ..users.model import User


class Action(str, Enum):
    GET_PTO_BALANCE = "getPtoBalance"
    CREATE_PTO_REQUEST = "createPtoRequest"
    UPDATE_PTO_REQUEST = "updatePtoRequest"
    SUBMIT_PTO_REQUEST = "submitPtoRequest"
    APPROVE_PTO_REQUEST = "approvePtoRequest"
    DENY_PTO_REQUEST = "denyPtoRequest"
    CANCEL_PTO_REQUEST = "cancelPtoRequest"
    GET_PTO_REQUESTS = "getPtoRequests"
    GET_PTO_REQUEST = "getPtoRequest"
    GET_TEAM_CALENDAR = "getTeamCalendar"
    INITIALIZE_BALANCES = "initializeBalances"
    GET_HOLIDAYS = "getHolidays"
    CREATE_HOLIDAY = "createHoliday"
    DELETE_HOLIDAY = "deleteHoliday"
    GET_BLACKOUT_DATES = "getBlackoutDates"
    CREATE_BLACKOUT_DATE = "createBlackoutDate"
    DELETE_BLACKOUT_DATE = "deleteBlackoutDate"
    GET_SYSTEM_CONFIG = "getSystemConfig"
    UPDATE_SYSTEM_CONFIG = "updateSystemConfig"
    GET_CURRENT_USER = "getCurrentUser"
    GET_USERS = "getUsers"
    GET_DIRECT_REPORTS = "getDirectReports"
    CREATE_USER = "createUser"
    UPDATE_USER = "updateUser"


# Typed payloads


@dataclass(frozen=True)
class NoPayload:
    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "NoPayload":
        return cls()


@dataclass(frozen=True)
class BalanceQuery:
    user_id: Optional[str] = None
    year: Any = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BalanceQuery":
        return cls(user_id=payload.get("userId") or None, year=payload.get("year"))


@dataclass(frozen=True)
class YearQuery:
    year: Any = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "YearQuery":
        return cls(year=payload.get("year"))


@dataclass(frozen=True)
class RequestRef:
    request_id: str
    expected_version: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RequestRef":
        return cls(
            request_id=require_non_empty(payload.get("requestId"), "requestId"),
            expected_version=optional_version(payload.get("version")),
        )


@dataclass(frozen=True)
class RequestUpdate:
    request_id: str
    changes: PtoRequestChanges

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RequestUpdate":
        return cls(
            request_id=require_non_empty(payload.get("requestId"), "requestId"),
            changes=PtoRequestChanges.from_payload(payload.get("updates")),
        )


@dataclass(frozen=True)
class Decision:
    request_id: str
    comment: Optional[str] = None
    expected_version: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Decision":
        return cls(
            request_id=require_non_empty(payload.get("requestId"), "requestId"),
            comment=payload.get("comment"),
            expected_version=optional_version(payload.get("version")),
        )


@dataclass(frozen=True)
class CalendarWindow:
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CalendarWindow":
        return cls(
            start_date=optional_date(payload.get("startDate"), "startDate"),
            end_date=optional_date(payload.get("endDate"), "endDate"),
        )


@dataclass(frozen=True)
class EntryRef:
    entry_id: str

    @classmethod
    def parser(cls, key: str) -> Callable[[Mapping[str, Any]], "EntryRef"]:
        def parse(payload: Mapping[str, Any]) -> "EntryRef":
            return cls(entry_id=require_non_empty(payload.get(key) or payload.get("id"), key))

        return parse


@dataclass(frozen=True)
class ConfigUpdate:
    updates: Dict[str, Any]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ConfigUpdate":
        updates = payload.get("updates")
        return cls(updates=dict(updates if isinstance(updates, Mapping) else payload))


@dataclass(frozen=True)
class UserPayload:
    fields: Dict[str, Any]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserPayload":
        return cls(fields=dict(payload))


@dataclass(frozen=True)
class UserUpdate:
    user_id: str
    role: Optional[str] = None
    manager_id: Optional[str] = None
    clear_manager: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserUpdate":
        return cls(
            user_id=require_non_empty(payload.get("userId"), "userId"),
            role=payload.get("role") or None,
            manager_id=payload.get("managerId") or None,
            clear_manager=as_bool(payload.get("clearManager"), "clearManager"),
        )


Handler = Callable[[Container, User, Any], Any]


@dataclass(frozen=True)
class ActionSpec:
    parse: Callable[[Mapping[str, Any]], Any]
    handle: Handler
    error_code: str
    error_message: str


def _dicts(items) -> list:
    return [i.to_dict() for i in items]


def _delete_holiday(c: Container, actor: User, p: EntryRef) -> dict:
    c.calendar_rules.delete_holiday(actor=actor, holiday_id=p.entry_id)
    return {"deleted": True}


def _delete_blackout_date(c: Container, actor: User, p: EntryRef) -> dict:
    c.calendar_rules.delete_blackout_date(actor=actor, blackout_id=p.entry_id)
    return {"deleted": True}


ACTIONS: Dict[Action, ActionSpec] = {
    Action.GET_PTO_BALANCE: ActionSpec(
        BalanceQuery.from_payload,
        lambda c, actor, p: c.balance_engine.get_balance(actor=actor, user_id=p.user_id, year=p.year).to_dict(),
        "GET_BALANCE_ERROR",
        "Failed to retrieve PTO balance",
    ),
    Action.CREATE_PTO_REQUEST: ActionSpec(
        NewPtoRequest.from_payload,
        lambda c, actor, p: c.pto_workflow.create_request(actor=actor, data=p).to_dict(),
        "CREATE_REQUEST_ERROR",
        "Failed to create PTO request",
    ),
    Action.UPDATE_PTO_REQUEST: ActionSpec(
        RequestUpdate.from_payload,
        lambda c, actor, p: c.pto_workflow.update_request(
            actor=actor, request_id=p.request_id, changes=p.changes
        ).to_dict(),
        "UPDATE_REQUEST_ERROR",
        "Failed to update PTO request",
    ),
    Action.SUBMIT_PTO_REQUEST: ActionSpec(
        RequestRef.from_payload,
        lambda c, actor, p: c.pto_workflow.submit_request(
            actor=actor, request_id=p.request_id, expected_version=p.expected_version
        ).to_dict(),
        "SUBMIT_REQUEST_ERROR",
        "Failed to submit PTO request",
    ),
    Action.APPROVE_PTO_REQUEST: ActionSpec(
        Decision.from_payload,
        lambda c, actor, p: c.pto_workflow.approve_request(
            actor=actor, request_id=p.request_id, comment=p.comment, expected_version=p.expected_version
        ).to_dict(),
        "APPROVE_REQUEST_ERROR",
        "Failed to approve PTO request",
    ),
    Action.DENY_PTO_REQUEST: ActionSpec(
        Decision.from_payload,
        lambda c, actor, p: c.pto_workflow.deny_request(
            actor=actor, request_id=p.request_id, comment=p.comment, expected_version=p.expected_version
        ).to_dict(),
        "DENY_REQUEST_ERROR",
        "Failed to deny PTO request",
    ),
    Action.CANCEL_PTO_REQUEST: ActionSpec(
        RequestRef.from_payload,
        lambda c, actor, p: c.pto_workflow.cancel_request(
            actor=actor, request_id=p.request_id, expected_version=p.expected_version
        ).to_dict(),
        "CANCEL_REQUEST_ERROR",
        "Failed to cancel PTO request",
    ),
    Action.GET_PTO_REQUESTS: ActionSpec(
        RequestFilters.from_payload,
        lambda c, actor, p: _dicts(c.pto_workflow.list_requests(actor=actor, filters=p)),
        "GET_REQUESTS_ERROR",
        "Failed to retrieve PTO requests",
    ),
    Action.GET_PTO_REQUEST: ActionSpec(
        RequestRef.from_payload,
        lambda c, actor, p: c.pto_workflow.get_request(actor=actor, request_id=p.request_id).to_dict(),
        "GET_REQUEST_ERROR",
        "Failed to retrieve PTO request",
    ),
    Action.GET_TEAM_CALENDAR: ActionSpec(
        CalendarWindow.from_payload,
        lambda c, actor, p: [
            r.to_calendar_dict()
            for r in c.pto_workflow.team_calendar(actor=actor, start_date=p.start_date, end_date=p.end_date)
        ],
        "GET_TEAM_CALENDAR_ERROR",
        "Failed to retrieve team calendar",
    ),
    Action.INITIALIZE_BALANCES: ActionSpec(
        YearQuery.from_payload,
        lambda c, actor, p: c.balance_engine.initialize_all_balances(actor=actor, year=p.year),
        "INIT_BALANCES_ERROR",
        "Failed to initialize balances",
    ),
    Action.GET_HOLIDAYS: ActionSpec(
        NoPayload.from_payload,
        lambda c, actor, p: _dicts(c.calendar_rules.holidays()),
        "GET_HOLIDAYS_ERROR",
        "Failed to retrieve holidays",
    ),
    Action.CREATE_HOLIDAY: ActionSpec(
        NewCalendarEntry.from_payload,
        lambda c, actor, p: c.calendar_rules.create_holiday(actor=actor, entry=p).to_dict(),
        "CREATE_HOLIDAY_ERROR",
        "Failed to create holiday",
    ),
    Action.DELETE_HOLIDAY: ActionSpec(
        EntryRef.parser("holidayId"),
        _delete_holiday,
        "DELETE_HOLIDAY_ERROR",
        "Failed to delete holiday",
    ),
    Action.GET_BLACKOUT_DATES: ActionSpec(
        NoPayload.from_payload,
        lambda c, actor, p: _dicts(c.calendar_rules.blackout_dates()),
        "GET_BLACKOUT_DATES_ERROR",
        "Failed to retrieve blackout dates",
    ),
    Action.CREATE_BLACKOUT_DATE: ActionSpec(
        NewCalendarEntry.from_payload,
        lambda c, actor, p: c.calendar_rules.create_blackout_date(actor=actor, entry=p).to_dict(),
        "CREATE_BLACKOUT_DATE_ERROR",
        "Failed to create blackout date",
    ),
    Action.DELETE_BLACKOUT_DATE: ActionSpec(
        EntryRef.parser("blackoutId"),
        _delete_blackout_date,
        "DELETE_BLACKOUT_DATE_ERROR",
        "Failed to delete blackout date",
    ),
    Action.GET_SYSTEM_CONFIG: ActionSpec(
        NoPayload.from_payload,
        lambda c, actor, p: c.config_service.get().to_dict(),
        "GET_CONFIG_ERROR",
        "Failed to retrieve system configuration",
    ),
    Action.UPDATE_SYSTEM_CONFIG: ActionSpec(
        ConfigUpdate.from_payload,
        lambda c, actor, p: c.config_service.update(actor=actor, updates=p.updates).to_dict(),
        "UPDATE_CONFIG_ERROR",
        "Failed to update system configuration",
    ),
    Action.GET_CURRENT_USER: ActionSpec(
        NoPayload.from_payload,
        lambda c, actor, p: actor.to_dict(),
        "GET_USER_ERROR",
        "Failed to retrieve current user",
    ),
    Action.GET_USERS: ActionSpec(
        NoPayload.from_payload,
        lambda c, actor, p: _dicts(c.user_service.list_users(actor=actor)),
        "GET_USERS_ERROR",
        "Failed to retrieve users",
    ),
    Action.GET_DIRECT_REPORTS: ActionSpec(
        NoPayload.from_payload,
        lambda c, actor, p: _dicts(c.user_service.list_direct_reports(actor=actor)),
        "GET_DIRECT_REPORTS_ERROR",
        "Failed to retrieve direct reports",
    ),
    Action.CREATE_USER: ActionSpec(
        UserPayload.from_payload,
        lambda c, actor, p: c.user_service.create_user(actor=actor, payload=p.fields).to_dict(),
        "CREATE_USER_ERROR",
        "Failed to create user",
    ),
    Action.UPDATE_USER: ActionSpec(
        UserUpdate.from_payload,
        lambda c, actor, p: c.user_service.update_user(
            actor=actor,
            user_id=p.user_id,
            role=p.role,
            manager_id=p.manager_id,
            clear_manager=p.clear_manager,
        ).to_dict(),
        "UPDATE_USER_ERROR",
        "Failed to update user",
    ),
}
