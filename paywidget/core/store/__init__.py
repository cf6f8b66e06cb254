"""
Wizard Store Module

Central state container of the payment widget: phases, status envelopes
and the reducer that is the single writer of truth.
"""

from .models import (
    Action,
    ActionType,
    DepositAddress,
    Phase,
    ProviderHandle,
    Resource,
    SubmittedTransaction,
    TransportKind,
    WidgetInputs,
    WizardState,
)
from .reducer import initial_state, reduce, status_action
from .steps import (
    BASE_STEPS,
    DEFAULT_STEPS,
    MethodKind,
    initial_step,
    method_kind,
    plan_steps,
)
from .store import WizardStore

__all__ = [
    # Store
    "WizardStore",
    "reduce",
    "initial_state",
    "status_action",
    # Models
    "Action",
    "ActionType",
    "DepositAddress",
    "Phase",
    "ProviderHandle",
    "Resource",
    "SubmittedTransaction",
    "TransportKind",
    "WidgetInputs",
    "WizardState",
    # Steps
    "BASE_STEPS",
    "DEFAULT_STEPS",
    "MethodKind",
    "initial_step",
    "method_kind",
    "plan_steps",
]
