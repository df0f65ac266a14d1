from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ..calendar_rules.model import Holiday
from ..calendar_rules.rules import count_business_days as _count_business_days
from ..common.datetime_utils import today
from ..common.logging import get_logger
from ..core.enums import EmploymentType, PtoStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..system_config.repository import SystemConfigRepository
from ..users.directory import UserDirectory
from ..users.model import User
from .authorization import PtoAuthorizer
from .model import PtoBalance
from .repository import PtoBalanceRepository, PtoRequestRepository

log = get_logger(__name__)


def round_half_up(value: Decimal) -> float:
    return float(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_year(value, default: Optional[int] = None) -> int:
    if value in (None, ""):
        return default if default is not None else today().year
    try:
        year = int(value)
    except (TypeError, ValueError):
        raise ValidationError("year must be an integer")
    if year < 1900 or year > 9999:
        raise ValidationError("year is out of range")
    return year


class PtoBalanceEngine:
    """Entitlement and used/pending aggregation for one user and year.

    The request history is the source of truth; persisted snapshots are only
    for reporting and are overwritten by every sync.
    """

    def __init__(
        self,
        *,
        directory: UserDirectory,
        requests: PtoRequestRepository,
        balances: PtoBalanceRepository,
        configs: SystemConfigRepository,
        authorizer: PtoAuthorizer,
    ):
        self._directory = directory
        self._requests = requests
        self._balances = balances
        self._configs = configs
        self._authorizer = authorizer

    def compute_entitlement(self, user: User, year: int) -> float:
        config = self._configs.load()
        if user.employment_type == EmploymentType.FULL_TIME:
            base = config.default_full_time_days
        else:
            base = config.default_part_time_days

        if config.prorate_by_hire_date and user.hire_date and user.hire_date.year == year:
            # Months left in the hire year, hire month included.
            months_remaining = 12 - (user.hire_date.month - 1)
            return round_half_up(Decimal(str(base)) * months_remaining / 12)
        return float(base)

    def compute_balance(self, user_id: str, year: int) -> PtoBalance:
        user = self._directory.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        used = 0.0
        pending = 0.0
        for request in self._requests.list_for_user(user_id):
            # Attributed to the start year only, even across a year boundary.
            if request.start_year != year:
                continue
            if request.status == PtoStatus.APPROVED:
                used += request.total_days
            elif request.status == PtoStatus.SUBMITTED:
                pending += request.total_days

        return PtoBalance(
            user_id=user_id,
            year=year,
            total_days=self.compute_entitlement(user, year),
            used_days=used,
            pending_days=pending,
        )

    @staticmethod
    def count_business_days(
        start: date,
        end: date,
        is_half_day_start: bool,
        is_half_day_end: bool,
        holidays: Sequence[Holiday],
    ) -> float:
        return _count_business_days(start, end, is_half_day_start, is_half_day_end, holidays)

    def get_balance(self, *, actor: User, user_id: Optional[str] = None, year=None) -> PtoBalance:
        target = user_id or actor.user_id
        resolved_year = parse_year(year)
        if not self._authorizer.can_view_balance(actor, target):
            raise AuthorizationError("Unauthorized: Cannot access this user's balance")
        return self.compute_balance(target, resolved_year)

    def sync_balance_snapshot(self, user_id: str, year: int) -> PtoBalance:
        balance = self.compute_balance(user_id, year)
        self._balances.upsert(balance)
        log.info(
            "pto_balance_synced",
            user_id=user_id,
            year=year,
            used_days=balance.used_days,
            pending_days=balance.pending_days,
        )
        return balance

    def initialize_all_balances(self, *, actor: User, year=None) -> dict:
        if not actor.is_admin:
            raise AuthorizationError("Unauthorized: Admin access required")

        resolved_year = parse_year(year)
        count = 0
        for user in self._directory.list_all():
            try:
                self.sync_balance_snapshot(user.user_id, resolved_year)
                count += 1
            except Exception:
                log.exception("pto_balance_init_failed", user_id=user.user_id, year=resolved_year)

        log.info("pto_balances_initialized", count=count, year=resolved_year, actor_id=actor.user_id)
        return {
            "message": f"Initialized balances for {count} users",
            "count": count,
            "year": resolved_year,
        }

    def list_balances(self, year: int) -> list:
        """Freshly computed balances for every user, with the user attached."""
        rows = []
        for user in self._directory.list_all():
            rows.append((user, self.compute_balance(user.user_id, year)))
        return rows
