"""
Wizard reducer.

``reduce(state, action)`` is pure and total: every action yields a new
snapshot (or the same one), unknown actions are ignored.
"""

from dataclasses import replace
from typing import Dict, Optional, Sequence, Tuple

from paywidget.types import RemoteStatus, StatusEnvelope

from .models import Action, ActionType, Phase, Resource, WidgetInputs, WizardState
from .steps import DEFAULT_STEPS, initial_step


# Resource status actions -> (state field, status)
STATUS_ACTIONS: Dict[ActionType, Tuple[Resource, RemoteStatus]] = {
    ActionType.SET_ACCOUNT_IDLE: (Resource.ACCOUNT, RemoteStatus.IDLE),
    ActionType.SET_ACCOUNT_LOADING: (Resource.ACCOUNT, RemoteStatus.LOADING),
    ActionType.SET_ACCOUNT_SUCCESS: (Resource.ACCOUNT, RemoteStatus.SUCCESS),
    ActionType.SET_ACCOUNT_ERROR: (Resource.ACCOUNT, RemoteStatus.ERROR),
    ActionType.SET_PROVIDER_IDLE: (Resource.PROVIDER, RemoteStatus.IDLE),
    ActionType.SET_PROVIDER_LOADING: (Resource.PROVIDER, RemoteStatus.LOADING),
    ActionType.SET_PROVIDER_SUCCESS: (Resource.PROVIDER, RemoteStatus.SUCCESS),
    ActionType.SET_PROVIDER_ERROR: (Resource.PROVIDER, RemoteStatus.ERROR),
    ActionType.GENERATE_DEPOSIT_ADDRESS_IDLE: (Resource.DEPOSIT_ADDRESS, RemoteStatus.IDLE),
    ActionType.GENERATE_DEPOSIT_ADDRESS_LOADING: (Resource.DEPOSIT_ADDRESS, RemoteStatus.LOADING),
    ActionType.GENERATE_DEPOSIT_ADDRESS_SUCCESS: (Resource.DEPOSIT_ADDRESS, RemoteStatus.SUCCESS),
    ActionType.GENERATE_DEPOSIT_ADDRESS_ERROR: (Resource.DEPOSIT_ADDRESS, RemoteStatus.ERROR),
    ActionType.SET_PREBUILT_TX_IDLE: (Resource.PREBUILT_TX, RemoteStatus.IDLE),
    ActionType.SET_PREBUILT_TX_LOADING: (Resource.PREBUILT_TX, RemoteStatus.LOADING),
    ActionType.SET_PREBUILT_TX_SUCCESS: (Resource.PREBUILT_TX, RemoteStatus.SUCCESS),
    ActionType.SET_PREBUILT_TX_ERROR: (Resource.PREBUILT_TX, RemoteStatus.ERROR),
    ActionType.SET_TRANSACTION_IDLE: (Resource.TRANSACTION, RemoteStatus.IDLE),
    ActionType.SET_TRANSACTION_LOADING: (Resource.TRANSACTION, RemoteStatus.LOADING),
    ActionType.SET_TRANSACTION_SUCCESS: (Resource.TRANSACTION, RemoteStatus.SUCCESS),
    ActionType.SET_TRANSACTION_ERROR: (Resource.TRANSACTION, RemoteStatus.ERROR),
}

STATUS_ACTION_FOR: Dict[Tuple[Resource, RemoteStatus], ActionType] = {
    value: key for key, value in STATUS_ACTIONS.items()
}


def status_action(resource: Resource, status: RemoteStatus) -> ActionType:
    """Action type that moves ``resource`` to ``status``."""
    return STATUS_ACTION_FOR[(resource, status)]


def _envelope(status: RemoteStatus, payload) -> StatusEnvelope:
    if status == RemoteStatus.SUCCESS:
        return StatusEnvelope.success(payload)
    if status == RemoteStatus.ERROR:
        return StatusEnvelope.failure(payload if isinstance(payload, str) else None)
    if status == RemoteStatus.LOADING:
        return StatusEnvelope.loading()
    return StatusEnvelope.idle()


def initial_state(
    inputs: Optional[WidgetInputs] = None,
    steps: Sequence[Phase] = DEFAULT_STEPS,
) -> WizardState:
    """Fresh state for the given caller inputs."""
    inputs = inputs or WidgetInputs()
    steps = tuple(steps)
    return WizardState(
        steps=steps,
        step=steps.index(initial_step(inputs.asset, inputs.network)),
        asset=inputs.asset,
        network=inputs.network,
        theme=inputs.theme,
        colors=inputs.colors,
        fiat=inputs.fiat,
        slug=inputs.slug,
        inputs=inputs,
    )


def _set_steps(state: WizardState, steps: Tuple[Phase, ...]) -> WizardState:
    if not steps:
        return state
    current = state.phase
    if current in steps:
        step = steps.index(current)
    else:
        step = min(state.step, len(steps) - 1)
    return replace(state, steps=steps, step=step)


def reduce(state: WizardState, action: Action) -> WizardState:
    kind = action.type

    if kind in STATUS_ACTIONS:
        resource, status = STATUS_ACTIONS[kind]
        return replace(state, **{resource.value: _envelope(status, action.payload)})

    if kind == ActionType.SET_ASSET:
        return replace(state, asset=action.payload)
    if kind == ActionType.SET_NETWORK:
        return replace(state, network=action.payload)
    if kind == ActionType.SET_PAYMENT_METHOD:
        return replace(state, method=action.payload)
    if kind == ActionType.SET_STEP:
        # Precondition: the phase is part of the current sequence
        if action.payload not in state.steps:
            return state
        return replace(state, step=state.steps.index(action.payload))
    if kind == ActionType.SET_STEPS:
        return _set_steps(state, tuple(action.payload or ()))
    if kind == ActionType.SET_PROVIDER_CHAIN_ID:
        return replace(state, provider_chain_id=action.payload)
    if kind == ActionType.RESET_STATE:
        return initial_state(state.inputs)

    return state
