from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from src.hr_backoffice.hr_backoffice.calendar_rules.service import NewCalendarEntry
from src.hr_backoffice.hr_backoffice.core import constants
from src.hr_backoffice.hr_backoffice.core.enums import PtoStatus, PtoType
from src.hr_backoffice.hr_backoffice.core.exceptions import (
    AuthorizationError,
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.hr_backoffice.hr_backoffice.pto.workflow import NewPtoRequest, PtoRequestChanges, RequestFilters


def new_request(start="2026-03-02", end="2026-03-06", **extra):
    payload = {"type": "Vacation", "startDate": start, "endDate": end}
    payload.update(extra)
    return NewPtoRequest.from_payload(payload)


def test_create_draft_counts_business_days_and_snapshots_approver(container, users):
    created = container.pto_workflow.create_request(actor=users["staff"], data=new_request())

    assert created.status == PtoStatus.DRAFT
    assert created.type == PtoType.VACATION
    assert created.total_days == 5.0
    assert created.approver_id == "manager"
    assert created.approver_name == "Max Manager"
    assert [h.action for h in created.history] == ["Created"]
    assert created.version == 1


def test_create_single_half_day_counts_half(container, users):
    created = container.pto_workflow.create_request(
        actor=users["staff"],
        data=new_request("2026-03-03", "2026-03-03", isHalfDayStart=True),
    )

    assert created.total_days == 0.5


def test_create_rejected_inside_blackout_persists_nothing(container, users, store):
    container.calendar_rules.create_blackout_date(
        actor=users["admin"],
        entry=_entry("2026-03-04", "Quarter close"),
    )

    with pytest.raises(BusinessRuleError) as exc:
        container.pto_workflow.create_request(actor=users["staff"], data=new_request())

    assert exc.value.code == "BLACKOUT_CONFLICT"
    assert "Quarter close" in str(exc.value)
    assert store.list_rows(constants.PTO_REQUESTS) == []


def test_create_without_manager_is_rejected(container, users):
    with pytest.raises(BusinessRuleError) as exc:
        container.pto_workflow.create_request(actor=users["orphan"], data=new_request())

    assert exc.value.code == "NO_APPROVER"


def test_create_with_reversed_dates_is_rejected():
    with pytest.raises(ValidationError) as exc:
        new_request("2026-03-06", "2026-03-02")

    assert exc.value.code == "INVALID_DATE_RANGE"


def test_create_with_unsupported_status_is_rejected():
    with pytest.raises(BusinessRuleError) as exc:
        new_request(status="Approved")

    assert exc.value.code == "INVALID_STATUS"


def test_create_submitted_sends_emails_and_syncs_pending(container, users, notifier, store):
    created = container.pto_workflow.create_request(actor=users["staff"], data=new_request(status="Submitted"))

    assert created.status == PtoStatus.SUBMITTED
    assert [h.action for h in created.history] == ["Submitted"]
    recipients = [to for to, _, _ in notifier.sent]
    assert recipients == ["staff@example.org", "manager@example.org"]

    snapshot = store.get_row(constants.PTO_BALANCES, "staff_2026")
    assert snapshot["pendingDays"] == 5.0
    assert snapshot["usedDays"] == 0


def test_full_lifecycle_submit_then_approve(container, users, calendar_publisher, store):
    wf = container.pto_workflow
    container.config_service.update(actor=users["admin"], updates={"sharedCalendarId": "team@calendar"})

    draft = wf.create_request(actor=users["staff"], data=new_request())
    submitted = wf.submit_request(actor=users["staff"], request_id=draft.request_id)
    approved = wf.approve_request(actor=users["manager"], request_id=draft.request_id, comment="Enjoy")

    assert submitted.status == PtoStatus.SUBMITTED
    assert approved.status == PtoStatus.APPROVED
    assert approved.manager_comment == "Enjoy"
    assert [h.action for h in approved.history] == ["Created", "Submitted", "Approved"]

    calendar_id, events = calendar_publisher.published[0]
    assert calendar_id == "team@calendar"
    assert len(events) == 1 and events[0].all_day

    balance = container.balance_engine.compute_balance("staff", 2026)
    assert balance.used_days == 5.0
    assert balance.pending_days == 0
    assert store.get_row(constants.PTO_BALANCES, "staff_2026")["usedDays"] == 5.0


def test_approve_without_comment_uses_default(container, users):
    wf = container.pto_workflow
    created = wf.create_request(actor=users["staff"], data=new_request(status="Submitted"))

    approved = wf.approve_request(actor=users["manager"], request_id=created.request_id)

    assert approved.manager_comment == "Approved"


def test_approve_skips_calendar_when_no_calendar_configured(container, users, calendar_publisher):
    wf = container.pto_workflow
    created = wf.create_request(actor=users["staff"], data=new_request(status="Submitted"))

    wf.approve_request(actor=users["manager"], request_id=created.request_id)

    assert calendar_publisher.published == []


def test_approving_a_draft_is_unauthorized(container, users):
    wf = container.pto_workflow
    draft = wf.create_request(actor=users["staff"], data=new_request())

    with pytest.raises(AuthorizationError) as exc:
        wf.approve_request(actor=users["manager"], request_id=draft.request_id)

    assert exc.value.code == "UNAUTHORIZED"


def test_owner_cannot_approve_own_request(container, users):
    wf = container.pto_workflow
    created = wf.create_request(actor=users["staff"], data=new_request(status="Submitted"))

    with pytest.raises(AuthorizationError):
        wf.approve_request(actor=users["staff"], request_id=created.request_id)


def test_deny_requires_comment_before_loading(container, users):
    with pytest.raises(ValidationError) as exc:
        container.pto_workflow.deny_request(actor=users["manager"], request_id="does-not-exist", comment="  ")

    assert exc.value.code == "MISSING_PARAMETER"


def test_deny_records_comment_and_notifies_employee(container, users, notifier):
    wf = container.pto_workflow
    created = wf.create_request(actor=users["staff"], data=new_request(status="Submitted"))
    notifier.sent.clear()

    denied = wf.deny_request(actor=users["manager"], request_id=created.request_id, comment="Team offsite")

    assert denied.status == PtoStatus.DENIED
    assert denied.manager_comment == "Team offsite"
    assert denied.history[-1].note == "Team offsite"
    to, subject, body = notifier.sent[0]
    assert to == "staff@example.org"
    assert subject.startswith("PTO Request Denied")
    assert "Team offsite" in body


def test_approved_request_cannot_be_cancelled(container, users, notifier):
    wf = container.pto_workflow
    created = wf.create_request(actor=users["staff"], data=new_request(status="Submitted"))
    wf.approve_request(actor=users["manager"], request_id=created.request_id)
    notifier.sent.clear()

    with pytest.raises(AuthorizationError):
        wf.cancel_request(actor=users["staff"], request_id=created.request_id)
    assert notifier.sent == []


def test_cancel_submitted_request_frees_pending_days_and_tells_approver(container, users, notifier):
    wf = container.pto_workflow
    created = wf.create_request(actor=users["staff"], data=new_request(status="Submitted"))
    notifier.sent.clear()

    cancelled = wf.cancel_request(actor=users["staff"], request_id=created.request_id)

    assert cancelled.status == PtoStatus.CANCELLED
    assert cancelled.history[-1].note == "Request cancelled by employee"
    assert container.balance_engine.compute_balance("staff", 2026).pending_days == 0
    assert [to for to, _, _ in notifier.sent] == ["staff@example.org", "manager@example.org"]


def test_cancel_draft_only_tells_employee(container, users, notifier):
    wf = container.pto_workflow
    draft = wf.create_request(actor=users["staff"], data=new_request())

    wf.cancel_request(actor=users["staff"], request_id=draft.request_id)

    assert [to for to, _, _ in notifier.sent] == ["staff@example.org"]


def test_only_owner_may_cancel(container, users):
    wf = container.pto_workflow
    created = wf.create_request(actor=users["staff"], data=new_request())

    with pytest.raises(AuthorizationError):
        wf.cancel_request(actor=users["manager"], request_id=created.request_id)


def test_submit_is_only_allowed_from_draft(container, users):
    wf = container.pto_workflow
    created = wf.create_request(actor=users["staff"], data=new_request(status="Submitted"))

    with pytest.raises(AuthorizationError):
        wf.submit_request(actor=users["staff"], request_id=created.request_id)


def test_update_recomputes_days_and_can_submit(container, users):
    wf = container.pto_workflow
    draft = wf.create_request(actor=users["staff"], data=new_request())

    changes = PtoRequestChanges.from_payload({"endDate": "2026-03-04", "reason": "Family", "status": "Submitted"})
    updated = wf.update_request(actor=users["staff"], request_id=draft.request_id, changes=changes)

    assert updated.total_days == 3.0
    assert updated.reason == "Family"
    assert updated.status == PtoStatus.SUBMITTED
    assert [h.action for h in updated.history] == ["Created", "Updated", "Submitted"]


def test_update_rejects_other_status_values():
    with pytest.raises(BusinessRuleError) as exc:
        PtoRequestChanges.from_payload({"status": "Approved"})

    assert exc.value.code == "INVALID_STATUS"


def test_update_by_non_owner_is_unauthorized(container, users):
    wf = container.pto_workflow
    draft = wf.create_request(actor=users["staff"], data=new_request())

    with pytest.raises(AuthorizationError):
        wf.update_request(
            actor=users["manager"],
            request_id=draft.request_id,
            changes=PtoRequestChanges.from_payload({"reason": "x"}),
        )


def test_stale_version_is_a_conflict(container, users):
    wf = container.pto_workflow
    draft = wf.create_request(actor=users["staff"], data=new_request())
    wf.update_request(
        actor=users["staff"],
        request_id=draft.request_id,
        changes=PtoRequestChanges.from_payload({"reason": "first"}),
    )

    with pytest.raises(ConflictError) as exc:
        wf.update_request(
            actor=users["staff"],
            request_id=draft.request_id,
            changes=PtoRequestChanges.from_payload({"reason": "second", "version": draft.version}),
        )

    assert exc.value.code == "CONFLICT"
    assert wf.get_request(actor=users["staff"], request_id=draft.request_id).reason == "first"


def test_unknown_request_is_not_found(container, users):
    with pytest.raises(NotFoundError):
        container.pto_workflow.get_request(actor=users["staff"], request_id="pto_missing")


def test_missing_request_id_is_a_missing_parameter(container, users):
    with pytest.raises(ValidationError) as exc:
        container.pto_workflow.approve_request(actor=users["manager"], request_id="")

    assert exc.value.code == "MISSING_PARAMETER"


def test_failing_notifier_does_not_undo_the_transition(make_container, users):
    class ExplodingNotifier:
        def __getattr__(self, name):
            def fail(*args, **kwargs):
                raise RuntimeError("smtp down")

            return fail

    container = make_container(notifier=ExplodingNotifier())
    wf = container.pto_workflow
    created = wf.create_request(actor=users["staff"], data=new_request(status="Submitted"))
    approved = wf.approve_request(actor=users["manager"], request_id=created.request_id)

    assert approved.status == PtoStatus.APPROVED
    assert wf.get_request(actor=users["staff"], request_id=created.request_id).status == PtoStatus.APPROVED


def test_blackout_enforced_on_submit_when_enabled(make_container, users):
    container = make_container(enforce_blackout_on_submit=True)
    wf = container.pto_workflow
    draft = wf.create_request(actor=users["staff"], data=new_request())
    container.calendar_rules.create_blackout_date(actor=users["admin"], entry=_entry("2026-03-05", "Audit"))

    with pytest.raises(BusinessRuleError) as exc:
        wf.submit_request(actor=users["staff"], request_id=draft.request_id)

    assert exc.value.code == "BLACKOUT_CONFLICT"


def test_list_requests_is_filtered_by_visibility(container, users):
    wf = container.pto_workflow
    mine = wf.create_request(actor=users["staff"], data=new_request())
    theirs = wf.create_request(actor=users["peer"], data=new_request("2026-04-06", "2026-04-07"))

    assert [r.request_id for r in wf.list_requests(actor=users["staff"])] == [mine.request_id]
    assert {r.request_id for r in wf.list_requests(actor=users["manager"])} == {mine.request_id, theirs.request_id}
    assert wf.list_requests(actor=users["manager2"]) == []

    april = RequestFilters.from_payload({"startDate": "2026-04-01"})
    assert [r.request_id for r in wf.list_requests(actor=users["admin"], filters=april)] == [theirs.request_id]


def _entry(day: str, name: str):
    return NewCalendarEntry(date=date.fromisoformat(day), name=name)


def test_imported_row_with_utc_z_timestamps_loads(container, users, store):
    store.append_row(
        constants.PTO_REQUESTS,
        {
            "id": "pto_imported",
            "userId": "staff",
            "userName": "Sam Staff",
            "type": "Vacation",
            "startDate": "2026-04-06",
            "endDate": "2026-04-07",
            "totalDays": 2,
            "status": "Submitted",
            "approverId": "manager",
            "approverName": "Max Manager",
            "history": '[{"timestamp": "2026-03-01T09:30:00.000Z", "actorId": "staff", "action": "Submitted"}]',
            "createdAt": "2026-03-01T09:30:00.000Z",
            "updatedAt": "2026-03-01T09:30:00.000Z",
        },
    )

    request = container.pto_workflow.get_request(actor=users["staff"], request_id="pto_imported")

    assert request.created_at == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    assert request.history[0].timestamp.utcoffset() == timedelta(0)


def approved_for(container, owner, approver, start, end):
    wf = container.pto_workflow
    created = wf.create_request(actor=owner, data=new_request(start, end, status="Submitted"))
    return wf.approve_request(actor=approver, request_id=created.request_id)


def test_team_calendar_shows_approved_time_off_only(container, users):
    mine = approved_for(container, users["staff"], users["manager"], "2026-03-09", "2026-03-10")
    other = approved_for(container, users["manager2"], users["admin"], "2026-05-04", "2026-05-05")
    container.pto_workflow.create_request(actor=users["peer"], data=new_request("2026-03-11", "2026-03-11"))

    entries = container.pto_workflow.team_calendar(actor=users["peer"])
    assert [r.request_id for r in entries] == [mine.request_id, other.request_id]

    window = container.pto_workflow.team_calendar(actor=users["peer"], start_date=date(2026, 4, 1))
    assert [r.request_id for r in window] == [other.request_id]


def test_team_calendar_limited_to_own_team_when_full_view_is_off(container, users):
    mine = approved_for(container, users["staff"], users["manager"], "2026-03-09", "2026-03-10")
    approved_for(container, users["manager2"], users["admin"], "2026-05-04", "2026-05-05")
    container.config_service.update(actor=users["admin"], updates={"fullTeamCalendarVisible": False})

    wf = container.pto_workflow
    assert [r.request_id for r in wf.team_calendar(actor=users["peer"])] == [mine.request_id]
    assert wf.team_calendar(actor=users["orphan"]) == []
    assert len(wf.team_calendar(actor=users["admin"])) == 2

    with pytest.raises(ValidationError) as exc:
        wf.team_calendar(actor=users["peer"], start_date=date(2026, 5, 1), end_date=date(2026, 4, 1))
    assert exc.value.code == "INVALID_DATE_RANGE"
