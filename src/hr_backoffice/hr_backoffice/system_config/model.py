from __future__ import annotations

from dataclasses import dataclass

from ..core import constants


@dataclass(frozen=True)
class SystemConfig:
    """Process-wide PTO settings, editable by admins."""

    default_full_time_days: float = constants.DEFAULT_FULL_TIME_DAYS
    default_part_time_days: float = constants.DEFAULT_PART_TIME_DAYS
    prorate_by_hire_date: bool = True
    short_notice_threshold_days: int = constants.DEFAULT_SHORT_NOTICE_DAYS
    shared_calendar_id: str = ""
    full_team_calendar_visible: bool = True

    def to_dict(self) -> dict:
        return {
            "defaultFullTimeDays": self.default_full_time_days,
            "defaultPartTimeDays": self.default_part_time_days,
            "prorateByHireDate": self.prorate_by_hire_date,
            "shortNoticeThresholdDays": self.short_notice_threshold_days,
            "sharedCalendarId": self.shared_calendar_id,
            "fullTeamCalendarVisible": self.full_team_calendar_visible,
        }
