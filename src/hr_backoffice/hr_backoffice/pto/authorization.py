from __future__ import annotations

from ..core.enums import ApproverPolicy, PtoAction, PtoStatus
from ..users.directory import UserDirectory
from ..users.model import User
from .model import PtoRequest

# Statuses each action may start from.
_ALLOWED_FROM = {
    PtoAction.EDIT: {PtoStatus.DRAFT, PtoStatus.CHANGES_REQUESTED},
    PtoAction.SUBMIT: {PtoStatus.DRAFT},
    PtoAction.APPROVE: {PtoStatus.SUBMITTED},
    PtoAction.DENY: {PtoStatus.SUBMITTED},
    PtoAction.CANCEL: {PtoStatus.DRAFT, PtoStatus.SUBMITTED},
}

_OWNER_ACTIONS = {PtoAction.EDIT, PtoAction.SUBMIT, PtoAction.CANCEL}


class PtoAuthorizer:
    """Who may see or move a PTO request.

    The approver check depends on `policy`: the owner's manager right now
    (LIVE), the approver recorded at creation (SNAPSHOT), or either one.
    """

    def __init__(self, directory: UserDirectory, policy: ApproverPolicy = ApproverPolicy.LIVE):
        self._directory = directory
        self._policy = ApproverPolicy(policy)

    @property
    def policy(self) -> ApproverPolicy:
        return self._policy

    def can_access(self, actor: User, request: PtoRequest) -> bool:
        if request.user_id == actor.user_id or actor.is_admin:
            return True
        if request.approver_id and request.approver_id == actor.user_id:
            return True
        return self._directory.manages(actor, request.user_id)

    def is_approver(self, actor: User, request: PtoRequest) -> bool:
        if actor.is_admin:
            return True
        snapshot = bool(request.approver_id) and request.approver_id == actor.user_id
        if self._policy == ApproverPolicy.SNAPSHOT:
            return snapshot
        live = self._directory.manages(actor, request.user_id)
        if self._policy == ApproverPolicy.EITHER:
            return snapshot or live
        return live

    def can_modify(self, actor: User, request: PtoRequest, action: PtoAction) -> bool:
        if request.status not in _ALLOWED_FROM.get(action, set()):
            return False
        if action in _OWNER_ACTIONS:
            return request.user_id == actor.user_id
        return self.is_approver(actor, request)

    def can_view_balance(self, actor: User, user_id: str) -> bool:
        if actor.user_id == user_id or actor.is_admin:
            return True
        return self._directory.is_current_manager_of(actor, user_id)
