"""
Wizard Store

Single writer of wizard state. Components hold a reference to the store
and mutate state only through ``dispatch``.
"""

from typing import Any, Callable, Dict, List, Optional

import structlog

from paywidget.types import RemoteStatus

from .models import Action, ActionType, Phase, Resource, WidgetInputs, WizardState
from .reducer import initial_state, reduce, status_action


logger = structlog.stdlib.get_logger(__name__)

Listener = Callable[[WizardState], None]


class WizardStore:
    """
    Holds the current ``WizardState`` and applies actions in dispatch order.

    Features:
    - Synchronous dispatch through the pure reducer
    - Listener subscription for the rendering layer
    - Per-resource request generations so that only the most recent
      request for a resource may settle it
    """

    def __init__(
        self,
        inputs: Optional[WidgetInputs] = None,
        state: Optional[WizardState] = None,
    ):
        self._state = state or initial_state(inputs)
        self._listeners: List[Listener] = []
        self._generations: Dict[Resource, int] = {resource: 0 for resource in Resource}

    @property
    def state(self) -> WizardState:
        return self._state

    def dispatch(self, action: Action) -> WizardState:
        if action.type == ActionType.SET_STEP and action.payload not in self._state.steps:
            logger.warning(
                "set_step_ignored",
                phase=getattr(action.payload, "value", action.payload),
                steps=[p.value for p in self._state.steps],
            )

        previous = self._state
        self._state = reduce(previous, action)
        logger.debug("dispatch", action=repr(action), step=self._state.step)

        if self._state is not previous:
            self._notify()
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self._listeners = [cb for cb in self._listeners if cb is not listener]

        return unsubscribe

    def _notify(self) -> None:
        state = self._state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error("listener_failed", error=str(e))

    # =========================================================================
    # Convenience dispatchers
    # =========================================================================

    def set_status(self, resource: Resource, status: RemoteStatus, payload: Any = None) -> WizardState:
        return self.dispatch(Action(status_action(resource, status), payload))

    def set_step(self, phase: Phase) -> WizardState:
        return self.dispatch(Action(ActionType.SET_STEP, phase))

    def reset(self) -> WizardState:
        for resource in Resource:
            self.invalidate(resource)
        return self.dispatch(Action(ActionType.RESET_STATE))

    # =========================================================================
    # Request generations
    # =========================================================================

    def begin_request(self, resource: Resource) -> int:
        """Start a new request for ``resource``; earlier tokens become stale."""
        self._generations[resource] += 1
        return self._generations[resource]

    def is_current(self, resource: Resource, token: int) -> bool:
        return self._generations[resource] == token

    def invalidate(self, resource: Resource) -> None:
        """Make every outstanding request for ``resource`` stale."""
        self._generations[resource] += 1

    def settle(
        self,
        resource: Resource,
        token: int,
        status: RemoteStatus,
        payload: Any = None,
    ) -> bool:
        """Apply a completion only if ``token`` is still the latest request."""
        if not self.is_current(resource, token):
            logger.info("stale_completion_dropped", resource=resource.value, status=status.value)
            return False
        self.set_status(resource, status, payload)
        return True
