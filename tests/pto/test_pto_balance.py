from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.hr_backoffice.hr_backoffice.calendar_rules.model import Holiday
from src.hr_backoffice.hr_backoffice.core import constants
from src.hr_backoffice.hr_backoffice.core.enums import ApproverPolicy, EmploymentType, PtoStatus, PtoType, Role
from src.hr_backoffice.hr_backoffice.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hr_backoffice.hr_backoffice.pto.authorization import PtoAuthorizer
from src.hr_backoffice.hr_backoffice.pto.balance import PtoBalanceEngine, parse_year, round_half_up
from src.hr_backoffice.hr_backoffice.pto.model import PtoBalance, PtoRequest
from src.hr_backoffice.hr_backoffice.system_config.model import SystemConfig
from src.hr_backoffice.hr_backoffice.users.directory import UserDirectory
from src.hr_backoffice.hr_backoffice.users.model import User


class FakeUsers:
    def __init__(self, users):
        self._users = {u.user_id: u for u in users}

    def get_by_id(self, user_id):
        return self._users.get(user_id)

    def get_by_email(self, email):
        return next((u for u in self._users.values() if u.email == email), None)

    def list_all(self):
        return list(self._users.values())


class FakeRequests:
    def __init__(self, requests=()):
        self.requests = list(requests)

    def list_for_user(self, user_id):
        return [r for r in self.requests if r.user_id == user_id]


class FakeBalances:
    def __init__(self):
        self.rows = {}

    def upsert(self, balance: PtoBalance) -> PtoBalance:
        self.rows[(balance.user_id, balance.year)] = balance
        return balance


class FakeConfigs:
    def __init__(self, config: SystemConfig = SystemConfig()):
        self.config = config

    def load(self) -> SystemConfig:
        return self.config


def make_user(user_id="u1", *, employment=EmploymentType.FULL_TIME, hire=date(2020, 1, 6), role=Role.STAFF, manager_id=None):
    return User(
        user_id=user_id,
        name=user_id.title(),
        email=f"{user_id}@example.org",
        role=role,
        manager_id=manager_id,
        employment_type=employment,
        hire_date=hire,
    )


def make_request(status, start, end, total, user_id="u1", request_id=None):
    return PtoRequest(
        request_id=request_id or f"pto_{start}_{status.value}",
        user_id=user_id,
        user_name=user_id.title(),
        type=PtoType.VACATION,
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end),
        is_half_day_start=False,
        is_half_day_end=False,
        total_days=total,
        status=status,
        approver_id="boss",
        approver_name="Boss",
    )


def make_engine(users, requests=(), config=SystemConfig()):
    directory = UserDirectory(FakeUsers(users))
    balances = FakeBalances()
    engine = PtoBalanceEngine(
        directory=directory,
        requests=FakeRequests(requests),
        balances=balances,
        configs=FakeConfigs(config),
        authorizer=PtoAuthorizer(directory, ApproverPolicy.LIVE),
    )
    return engine, balances


def test_entitlement_prorated_in_hire_year():
    engine, _ = make_engine([])
    user = make_user(hire=date(2025, 3, 1))

    # 15 * 10 / 12 = 12.5, rounded half up.
    assert engine.compute_entitlement(user, 2025) == 13.0
    assert engine.compute_entitlement(user, 2026) == 15.0


def test_entitlement_part_time_and_proration_switch():
    part_timer = make_user(employment=EmploymentType.PART_TIME, hire=date(2025, 7, 15))

    engine, _ = make_engine([])
    assert engine.compute_entitlement(part_timer, 2025) == 5.0

    engine, _ = make_engine([], config=SystemConfig(prorate_by_hire_date=False))
    assert engine.compute_entitlement(part_timer, 2025) == 10.0


def test_entitlement_without_hire_date_is_full_base():
    engine, _ = make_engine([])

    assert engine.compute_entitlement(make_user(hire=None), 2026) == 15.0


def test_round_half_up_avoids_bankers_rounding():
    assert round_half_up(Decimal("2.5")) == 3.0
    assert round_half_up(Decimal("12.5")) == 13.0
    assert round_half_up(Decimal("12.49")) == 12.0


def test_balance_sums_approved_and_submitted_only():
    requests = [
        make_request(PtoStatus.APPROVED, "2026-02-02", "2026-02-04", 3.0),
        make_request(PtoStatus.SUBMITTED, "2026-05-04", "2026-05-05", 2.0),
        make_request(PtoStatus.DRAFT, "2026-06-01", "2026-06-05", 5.0),
        make_request(PtoStatus.DENIED, "2026-07-06", "2026-07-06", 1.0),
        make_request(PtoStatus.CANCELLED, "2026-08-03", "2026-08-03", 1.0),
        make_request(PtoStatus.CHANGES_REQUESTED, "2026-09-07", "2026-09-07", 1.0),
    ]
    engine, _ = make_engine([make_user()], requests)

    balance = engine.compute_balance("u1", 2026)

    assert balance.total_days == 15.0
    assert balance.used_days == 3.0
    assert balance.pending_days == 2.0
    assert balance.available_days == 10.0


def test_balance_attributes_cross_year_request_to_start_year():
    requests = [make_request(PtoStatus.APPROVED, "2026-12-28", "2027-01-05", 7.0)]
    engine, _ = make_engine([make_user()], requests)

    assert engine.compute_balance("u1", 2026).used_days == 7.0
    assert engine.compute_balance("u1", 2027).used_days == 0


def test_compute_balance_is_idempotent():
    requests = [make_request(PtoStatus.SUBMITTED, "2026-05-04", "2026-05-05", 2.0)]
    engine, _ = make_engine([make_user()], requests)

    assert engine.compute_balance("u1", 2026) == engine.compute_balance("u1", 2026)


def test_compute_balance_unknown_user():
    engine, _ = make_engine([])

    with pytest.raises(NotFoundError):
        engine.compute_balance("ghost", 2026)


def test_get_balance_visibility():
    boss = make_user("boss", role=Role.MANAGER)
    report = make_user("u1", manager_id="boss")
    stranger = make_user("u2")
    engine, _ = make_engine([boss, report, stranger])

    assert engine.get_balance(actor=report, year=2026).user_id == "u1"
    assert engine.get_balance(actor=boss, user_id="u1", year="2026").year == 2026
    with pytest.raises(AuthorizationError):
        engine.get_balance(actor=stranger, user_id="u1", year=2026)


def test_initialize_all_balances_requires_admin_and_writes_snapshots():
    admin = make_user("admin", role=Role.ADMIN)
    engine, balances = make_engine([admin, make_user("u1")])

    with pytest.raises(AuthorizationError):
        engine.initialize_all_balances(actor=make_user("u1"), year=2026)

    result = engine.initialize_all_balances(actor=admin, year=2026)
    again = engine.initialize_all_balances(actor=admin, year=2026)

    assert result == {"message": "Initialized balances for 2 users", "count": 2, "year": 2026}
    assert again == result
    assert set(balances.rows) == {("admin", 2026), ("u1", 2026)}


def test_parse_year():
    assert parse_year("2026") == 2026
    assert parse_year(None, default=2030) == 2030
    with pytest.raises(ValidationError):
        parse_year("next")
    with pytest.raises(ValidationError):
        parse_year(12)


def test_snapshot_row_is_keyed_by_user_and_year(container, users, store):
    container.balance_engine.initialize_all_balances(actor=users["admin"], year=2026)

    row = store.get_row(constants.PTO_BALANCES, "staff_2026")
    assert row["userId"] == "staff"
    assert row["totalDays"] == 15.0
    assert len(container.balances_repo.list_for_year(2026)) == len(users)


def test_engine_counts_business_days_against_given_holidays():
    thanksgiving = [Holiday("h1", date(2026, 11, 26), "Thanksgiving", end_date=date(2026, 11, 27))]

    assert PtoBalanceEngine.count_business_days(date(2026, 11, 23), date(2026, 11, 27), False, False, thanksgiving) == 3.0
    # Holiday range plus the weekend after it.
    assert PtoBalanceEngine.count_business_days(date(2026, 11, 26), date(2026, 11, 29), False, False, thanksgiving) == 0.0
