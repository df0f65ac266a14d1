from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    STAFF = "STAFF"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class EmploymentType(str, Enum):
    FULL_TIME = "FullTime"
    PART_TIME = "PartTime"


class PtoType(str, Enum):
    VACATION = "Vacation"
    SICK = "Sick"
    OTHER = "Other"


class PtoStatus(str, Enum):
    """Lifecycle states of a PTO request."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    APPROVED = "Approved"
    DENIED = "Denied"
    CHANGES_REQUESTED = "ChangesRequested"
    CANCELLED = "Cancelled"


class PtoAction(str, Enum):
    """Transitions a caller may attempt on an existing request."""

    EDIT = "EDIT"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    DENY = "DENY"
    CANCEL = "CANCEL"


class ApproverPolicy(str, Enum):
    """Who counts as the approver of a request at decision time.

    LIVE: the owner's current manager.
    SNAPSHOT: the approverId recorded when the request was created.
    EITHER: both of the above.
    Admins are always allowed.
    """

    LIVE = "live"
    SNAPSHOT = "snapshot"
    EITHER = "either"
