from __future__ import annotations

from dataclasses import replace

from ..common.logging import get_logger
from ..common.validators import as_bool, as_non_negative_number
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.model import User
from .model import SystemConfig
from .repository import SystemConfigRepository

log = get_logger(__name__)

# API field -> (dataclass field, converter)
_FIELDS = {
    "defaultFullTimeDays": ("default_full_time_days", as_non_negative_number),
    "defaultPartTimeDays": ("default_part_time_days", as_non_negative_number),
    "prorateByHireDate": ("prorate_by_hire_date", as_bool),
    "shortNoticeThresholdDays": ("short_notice_threshold_days", lambda v, f: int(as_non_negative_number(v, f))),
    "sharedCalendarId": ("shared_calendar_id", lambda v, f: str(v or "").strip()),
    "fullTeamCalendarVisible": ("full_team_calendar_visible", as_bool),
}


class SystemConfigService:
    def __init__(self, configs: SystemConfigRepository):
        self._configs = configs

    def get(self) -> SystemConfig:
        return self._configs.load()

    def update(self, *, actor: User, updates: dict) -> SystemConfig:
        if not actor.is_admin:
            raise AuthorizationError("Unauthorized: Admin access required")

        changes = {}
        for key, value in (updates or {}).items():
            if key not in _FIELDS:
                continue
            field_name, convert = _FIELDS[key]
            changes[field_name] = convert(value, key)
        if not changes:
            raise ValidationError("No configuration fields provided", "MISSING_PARAMETERS")

        saved = self._configs.save(replace(self._configs.load(), **changes))
        log.info("system_config_updated", fields=sorted(changes), actor_id=actor.user_id)
        return saved
