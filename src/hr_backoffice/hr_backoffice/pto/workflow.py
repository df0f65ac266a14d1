from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from ..calendar_rules.service import CalendarRules
from ..common.datetime_utils import coerce_date, now_utc, optional_date
from ..common.ids import generate_id
from ..common.logging import get_logger
from ..common.validators import as_bool, require_fields, require_non_empty
from ..core.enums import PtoAction, PtoStatus, PtoType
from ..core.exceptions import AuthorizationError, BusinessRuleError, NotFoundError, ValidationError
from ..notifications.calendar import CalendarPublisher, build_calendar_events
from ..notifications.notifier import Notifier
from ..system_config.repository import SystemConfigRepository
from ..users.directory import UserDirectory
from ..users.model import User
from .authorization import PtoAuthorizer
from .balance import PtoBalanceEngine
from .model import HistoryEntry, PtoRequest
from .repository import PtoRequestRepository

log = get_logger(__name__)


def _parse_type(value) -> PtoType:
    try:
        return PtoType(str(value).strip())
    except ValueError:
        allowed = ", ".join(t.value for t in PtoType)
        raise ValidationError(f"type must be one of: {allowed}")


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("End date must be on or after the start date", "INVALID_DATE_RANGE")


def optional_version(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("version must be an integer")


def is_short_notice(start: date, submitted_on: date, threshold_days: int) -> bool:
    """Submitted fewer than `threshold_days` ahead of the first day off."""
    days_ahead = (start - submitted_on).days
    return 0 <= days_ahead <= threshold_days


@dataclass(frozen=True)
class NewPtoRequest:
    type: PtoType
    start_date: date
    end_date: date
    is_half_day_start: bool = False
    is_half_day_end: bool = False
    reason: str = ""
    attachment: str = ""
    status: PtoStatus = PtoStatus.DRAFT

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "NewPtoRequest":
        require_fields(payload, ["type", "startDate", "endDate"])
        start = coerce_date(payload["startDate"], "startDate")
        end = coerce_date(payload["endDate"], "endDate")
        _check_range(start, end)

        status = payload.get("status") or PtoStatus.DRAFT.value
        if status not in (PtoStatus.DRAFT.value, PtoStatus.SUBMITTED.value):
            raise BusinessRuleError("New requests must be Draft or Submitted", "INVALID_STATUS")

        return cls(
            type=_parse_type(payload["type"]),
            start_date=start,
            end_date=end,
            is_half_day_start=as_bool(payload.get("isHalfDayStart"), "isHalfDayStart"),
            is_half_day_end=as_bool(payload.get("isHalfDayEnd"), "isHalfDayEnd"),
            reason=str(payload.get("reason") or ""),
            attachment=str(payload.get("attachment") or ""),
            status=PtoStatus(status),
        )


@dataclass(frozen=True)
class PtoRequestChanges:
    """Owner edits. Only fields that are set are applied."""

    fields: Dict[str, Any] = field(default_factory=dict)
    submit: bool = False
    expected_version: Optional[int] = None

    @property
    def touches_days(self) -> bool:
        return bool({"start_date", "end_date", "is_half_day_start", "is_half_day_end"} & set(self.fields))

    @classmethod
    def from_payload(cls, updates: Any) -> "PtoRequestChanges":
        if updates is None:
            updates = {}
        if not isinstance(updates, Mapping):
            raise ValidationError("updates must be an object")

        fields: Dict[str, Any] = {}
        if updates.get("type"):
            fields["type"] = _parse_type(updates["type"])
        if updates.get("startDate"):
            fields["start_date"] = coerce_date(updates["startDate"], "startDate")
        if updates.get("endDate"):
            fields["end_date"] = coerce_date(updates["endDate"], "endDate")
        for key, name in (("isHalfDayStart", "is_half_day_start"), ("isHalfDayEnd", "is_half_day_end")):
            if updates.get(key) is not None:
                fields[name] = as_bool(updates[key], key)
        for key, name in (("reason", "reason"), ("attachment", "attachment"), ("employeeComment", "employee_comment")):
            if updates.get(key) is not None:
                fields[name] = str(updates[key])

        status = updates.get("status")
        if status and status != PtoStatus.SUBMITTED.value:
            raise BusinessRuleError("Only Submitted may be set through an update", "INVALID_STATUS")

        return cls(fields=fields, submit=bool(status), expected_version=optional_version(updates.get("version")))


@dataclass(frozen=True)
class RequestFilters:
    user_id: Optional[str] = None
    status: Optional[PtoStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RequestFilters":
        status = payload.get("status") or None
        if status:
            try:
                status = PtoStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status: {status}")
        return cls(
            user_id=payload.get("userId") or None,
            status=status,
            start_date=optional_date(payload.get("startDate"), "startDate"),
            end_date=optional_date(payload.get("endDate"), "endDate"),
        )

    def matches(self, request: PtoRequest) -> bool:
        if self.user_id and request.user_id != self.user_id:
            return False
        if self.status and request.status != self.status:
            return False
        if self.start_date and request.start_date < self.start_date:
            return False
        if self.end_date and request.end_date > self.end_date:
            return False
        return True


class PtoRequestWorkflow:
    """State machine for a single PTO request.

    Every transition is authorized and written before any side effect runs.
    Balance snapshots, emails and calendar events are best effort: a failure
    is logged and the transition still succeeds.
    """

    def __init__(
        self,
        *,
        requests: PtoRequestRepository,
        directory: UserDirectory,
        calendar: CalendarRules,
        balances: PtoBalanceEngine,
        configs: SystemConfigRepository,
        authorizer: PtoAuthorizer,
        notifier: Notifier,
        calendar_publisher: CalendarPublisher,
        enforce_blackout_on_submit: bool = False,
    ):
        self._requests = requests
        self._directory = directory
        self._calendar = calendar
        self._balances = balances
        self._configs = configs
        self._authorizer = authorizer
        self._notifier = notifier
        self._calendar_publisher = calendar_publisher
        self._enforce_blackout_on_submit = enforce_blackout_on_submit

    # Reads
    def get_request(self, *, actor: User, request_id: str) -> PtoRequest:
        request = self._load(request_id)
        if not self._authorizer.can_access(actor, request):
            raise AuthorizationError("Unauthorized: Cannot access this request")
        return request

    def list_requests(self, *, actor: User, filters: Optional[RequestFilters] = None) -> List[PtoRequest]:
        filters = filters or RequestFilters()
        visible = [r for r in self._requests.list_all() if self._authorizer.can_access(actor, r)]
        return [r for r in visible if filters.matches(r)]

    def team_calendar(
        self, *, actor: User, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[PtoRequest]:
        """Approved time off overlapping [start_date, end_date].

        With `fullTeamCalendarVisible` off, non-admins only see their own team:
        themselves, their manager, peers under the same manager and their
        direct reports.
        """
        if start_date and end_date:
            _check_range(start_date, end_date)
        approved = [
            r
            for r in self._requests.list_all()
            if r.status == PtoStatus.APPROVED and r.overlaps(start_date, end_date)
        ]
        if actor.is_admin or self._configs.load().full_team_calendar_visible:
            return approved
        team = self._team_ids(actor)
        return [r for r in approved if r.user_id in team]

    # Transitions
    def create_request(self, *, actor: User, data: NewPtoRequest) -> PtoRequest:
        total_days = self._calendar.business_days(
            data.start_date, data.end_date, data.is_half_day_start, data.is_half_day_end
        )
        self._check_blackout(data.start_date, data.end_date)

        owner = self._directory.get_by_id(actor.user_id) or actor
        approver = self._directory.get_manager(owner)
        if not approver:
            raise BusinessRuleError("No manager assigned. Please contact your administrator.", "NO_APPROVER")

        now = now_utc()
        submitted = data.status == PtoStatus.SUBMITTED
        entry = HistoryEntry(
            timestamp=now,
            actor_id=actor.user_id,
            actor_name=actor.name,
            action="Submitted" if submitted else "Created",
            note="Request submitted for approval" if submitted else "Request created as draft",
        )
        created = self._requests.create(
            PtoRequest(
                request_id=generate_id("pto"),
                user_id=owner.user_id,
                user_name=owner.name,
                type=data.type,
                start_date=data.start_date,
                end_date=data.end_date,
                is_half_day_start=data.is_half_day_start,
                is_half_day_end=data.is_half_day_end,
                total_days=total_days,
                status=data.status,
                approver_id=approver.user_id,
                approver_name=approver.name,
                reason=data.reason,
                attachment=data.attachment,
                history=(entry,),
                created_at=now,
                updated_at=now,
            )
        )
        log.info(
            "pto_request_created",
            request_id=created.request_id,
            user_id=created.user_id,
            status=created.status.value,
            total_days=created.total_days,
        )

        if submitted:
            self._after_submit(created, owner, approver)
        return created

    def update_request(self, *, actor: User, request_id: str, changes: PtoRequestChanges) -> PtoRequest:
        request = self._load(request_id)
        if not self._authorizer.can_modify(actor, request, PtoAction.EDIT):
            raise AuthorizationError("Unauthorized: Cannot edit this request")
        if changes.submit and not self._authorizer.can_modify(actor, request, PtoAction.SUBMIT):
            raise AuthorizationError("Unauthorized: Cannot submit this request")

        fields = dict(changes.fields)
        start = fields.get("start_date", request.start_date)
        end = fields.get("end_date", request.end_date)
        _check_range(start, end)
        if changes.touches_days:
            fields["total_days"] = self._calendar.business_days(
                start,
                end,
                fields.get("is_half_day_start", request.is_half_day_start),
                fields.get("is_half_day_end", request.is_half_day_end),
            )

        now = now_utc()
        updated = request.record(
            HistoryEntry(now, actor.user_id, actor.name, "Updated", "Request updated"),
            **fields,
        )
        if changes.submit:
            updated = self._submit(updated, actor, now)

        saved = self._save(updated, changes.expected_version, request)
        log.info("pto_request_updated", request_id=saved.request_id, fields=sorted(fields), submitted=changes.submit)
        if changes.submit:
            self._after_submit(saved)
        return saved

    def submit_request(self, *, actor: User, request_id: str, expected_version: Optional[int] = None) -> PtoRequest:
        request = self._load(request_id)
        if not self._authorizer.can_modify(actor, request, PtoAction.SUBMIT):
            raise AuthorizationError("Unauthorized: Cannot submit this request")

        saved = self._save(self._submit(request, actor, now_utc()), expected_version, request)
        log.info("pto_request_submitted", request_id=saved.request_id, user_id=saved.user_id)
        self._after_submit(saved)
        return saved

    def approve_request(
        self, *, actor: User, request_id: str, comment: Optional[str] = None, expected_version: Optional[int] = None
    ) -> PtoRequest:
        request = self._load(request_id)
        if not self._authorizer.can_modify(actor, request, PtoAction.APPROVE):
            raise AuthorizationError("Unauthorized: Cannot approve this request")

        comment = (comment or "").strip()
        approved = request.record(
            HistoryEntry(now_utc(), actor.user_id, actor.name, "Approved", comment or "Request approved"),
            status=PtoStatus.APPROVED,
            manager_comment=comment or "Approved",
        )
        saved = self._save(approved, expected_version, request)
        log.info("pto_request_approved", request_id=saved.request_id, approver_id=actor.user_id)

        self._side_effect("balance_sync", saved, lambda: self._balances.sync_balance_snapshot(saved.user_id, saved.start_year))
        self._side_effect("calendar_event", saved, lambda: self._publish_calendar(saved))
        employee = self._directory.get_by_id(saved.user_id)
        if employee:
            self._side_effect("approval_email", saved, lambda: self._notifier.request_approved(saved, employee, actor))
        return saved

    def deny_request(
        self, *, actor: User, request_id: str, comment: Optional[str], expected_version: Optional[int] = None
    ) -> PtoRequest:
        request_id = require_non_empty(request_id, "requestId")
        if not comment or not str(comment).strip():
            raise ValidationError("Comment required when denying a request", "MISSING_PARAMETER")

        request = self._load(request_id)
        if not self._authorizer.can_modify(actor, request, PtoAction.DENY):
            raise AuthorizationError("Unauthorized: Cannot deny this request")

        comment = str(comment).strip()
        denied = request.record(
            HistoryEntry(now_utc(), actor.user_id, actor.name, "Denied", comment),
            status=PtoStatus.DENIED,
            manager_comment=comment,
        )
        saved = self._save(denied, expected_version, request)
        log.info("pto_request_denied", request_id=saved.request_id, approver_id=actor.user_id)

        self._side_effect("balance_sync", saved, lambda: self._balances.sync_balance_snapshot(saved.user_id, saved.start_year))
        employee = self._directory.get_by_id(saved.user_id)
        if employee:
            self._side_effect("denial_email", saved, lambda: self._notifier.request_denied(saved, employee, actor))
        return saved

    def cancel_request(self, *, actor: User, request_id: str, expected_version: Optional[int] = None) -> PtoRequest:
        request = self._load(request_id)
        if not self._authorizer.can_modify(actor, request, PtoAction.CANCEL):
            raise AuthorizationError("Unauthorized: Cannot cancel this request")

        was_pending = request.status == PtoStatus.SUBMITTED
        cancelled = request.record(
            HistoryEntry(now_utc(), actor.user_id, actor.name, "Cancelled", "Request cancelled by employee"),
            status=PtoStatus.CANCELLED,
        )
        saved = self._save(cancelled, expected_version, request)
        log.info("pto_request_cancelled", request_id=saved.request_id, previous_status=request.status.value)

        self._side_effect("balance_sync", saved, lambda: self._balances.sync_balance_snapshot(saved.user_id, saved.start_year))
        approver = self._directory.get_by_id(saved.approver_id)
        self._side_effect(
            "cancellation_email",
            saved,
            lambda: self._notifier.request_cancelled(saved, actor, approver, was_pending=was_pending),
        )
        return saved

    # Helpers
    def _load(self, request_id: str) -> PtoRequest:
        request = self._requests.get_by_id(require_non_empty(request_id, "requestId"))
        if not request:
            raise NotFoundError("PTO request not found")
        return request

    def _team_ids(self, actor: User) -> Set[str]:
        member = self._directory.get_by_id(actor.user_id) or actor
        team = {member.user_id}
        team.update(u.user_id for u in self._directory.direct_reports(member.user_id))
        if member.manager_id:
            team.add(member.manager_id)
            team.update(u.user_id for u in self._directory.direct_reports(member.manager_id))
        return team

    def _save(self, request: PtoRequest, expected_version: Optional[int], loaded: PtoRequest) -> PtoRequest:
        version = expected_version if expected_version is not None else loaded.version
        return self._requests.save(request, expected_version=version)

    def _check_blackout(self, start: date, end: date) -> None:
        conflict = self._calendar.blackout_conflict(start, end)
        if conflict.conflict:
            raise BusinessRuleError(
                f"PTO request conflicts with blackout date: {conflict.name} on {conflict.date.isoformat()}",
                "BLACKOUT_CONFLICT",
            )

    def _submit(self, request: PtoRequest, actor: User, now: datetime) -> PtoRequest:
        if self._enforce_blackout_on_submit:
            self._check_blackout(request.start_date, request.end_date)
        return request.record(
            HistoryEntry(now, actor.user_id, actor.name, "Submitted", "Request submitted for approval"),
            status=PtoStatus.SUBMITTED,
        )

    def _after_submit(self, request: PtoRequest, owner: Optional[User] = None, approver: Optional[User] = None) -> None:
        self._side_effect(
            "balance_sync", request, lambda: self._balances.sync_balance_snapshot(request.user_id, request.start_year)
        )
        owner = owner or self._directory.get_by_id(request.user_id)
        approver = approver or self._directory.get_by_id(request.approver_id)
        if not owner:
            return

        def send() -> None:
            threshold = self._configs.load().short_notice_threshold_days
            short_notice = is_short_notice(request.start_date, now_utc().date(), threshold)
            self._notifier.request_submitted(request, owner, approver, short_notice=short_notice)

        self._side_effect("submission_email", request, send)

    def _publish_calendar(self, request: PtoRequest) -> None:
        calendar_id = self._configs.load().shared_calendar_id
        if not calendar_id:
            log.info("calendar_event_skipped", request_id=request.request_id, reason="no shared calendar configured")
            return
        self._calendar_publisher.publish(calendar_id, build_calendar_events(request))

    @staticmethod
    def _side_effect(name: str, request: PtoRequest, fn: Callable[[], Any]) -> None:
        try:
            fn()
        except Exception:
            log.exception("pto_side_effect_failed", side_effect=name, request_id=request.request_id)
