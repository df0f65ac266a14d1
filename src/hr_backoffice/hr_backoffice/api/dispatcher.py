from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from ..common.logging import get_logger
from ..common.responses import error_response, success_response
from ..container import Container
from ..core.exceptions import AuthenticationError, DomainError
from ..users.model import User
from .actions import ACTIONS, Action, ActionSpec

log = get_logger(__name__)


def resolve_action(name: str) -> Optional[Action]:
    try:
        return Action(name)
    except ValueError:
        return None


class ActionDispatcher:
    """Single boundary that turns service results and errors into envelopes.

    Caller resolution runs inside the boundary. Domain errors (store outages
    included) keep their code. Anything else is logged with its traceback and
    reported under the action's own `*_ERROR` code.
    """

    def __init__(self, container: Container, actions: Optional[Dict[Action, ActionSpec]] = None):
        self._container = container
        self._actions = actions or ACTIONS

    def dispatch(
        self,
        name: str,
        resolve_actor: Callable[[], Optional[User]],
        payload: Optional[Mapping[str, Any]] = None,
    ) -> dict:
        action = resolve_action(name)
        if action is None or action not in self._actions:
            return error_response(f"Unknown action: {name}", "UNKNOWN_ACTION")

        spec = self._actions[action]
        actor: Optional[User] = None
        try:
            actor = resolve_actor()
            if actor is None:
                raise AuthenticationError("Unable to resolve the current user")
            data = spec.handle(self._container, actor, spec.parse(payload or {}))
        except DomainError as e:
            log.info("action_rejected", action=action.value, code=e.code, actor_id=_actor_id(actor), error=str(e))
            return error_response(str(e), e.code)
        except Exception as e:
            log.exception("action_failed", action=action.value, actor_id=_actor_id(actor))
            return error_response(f"{spec.error_message}: {e}", spec.error_code)
        return success_response(data)


def _actor_id(actor: Optional[User]) -> Optional[str]:
    return actor.user_id if actor else None
