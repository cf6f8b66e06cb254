"""Step planning: which phases a widget instance walks through."""

from enum import Enum
from typing import Optional, Tuple

from paywidget.types import Asset, Network, PaymentMethod

from .models import Phase


WALLET_CONNECT_VALUE = "isWalletConnect"
QR_VALUES = frozenset({"qr", "binance-pay"})

BASE_STEPS: Tuple[Phase, ...] = (
    Phase.ASSET_SELECTION,
    Phase.NETWORK_SELECTION,
    Phase.PAYMENT_METHOD,
)

DEFAULT_STEPS: Tuple[Phase, ...] = BASE_STEPS + (Phase.ENTER_AMOUNT, Phase.RESULT)


class MethodKind(str, Enum):
    INJECTED = "injected"
    PAIRED = "paired"
    DEPOSIT = "deposit"


def method_kind(method: PaymentMethod) -> MethodKind:
    """Classify a payment method by the transport it needs."""
    if method.value == WALLET_CONNECT_VALUE:
        return MethodKind.PAIRED
    if not method.value or method.value in QR_VALUES:
        return MethodKind.DEPOSIT
    return MethodKind.INJECTED


def initial_step(asset: Optional[Asset], network: Optional[Network]) -> Phase:
    """First phase whose prerequisite selection is missing."""
    if not asset:
        return Phase.ASSET_SELECTION
    if not network:
        return Phase.NETWORK_SELECTION
    return Phase.PAYMENT_METHOD


def plan_steps(
    method: Optional[PaymentMethod],
    requires_chain_switch: bool = False,
) -> Tuple[Phase, ...]:
    """Phase sequence for the chosen payment method."""
    if method is None:
        return DEFAULT_STEPS

    kind = method_kind(method)
    if kind == MethodKind.DEPOSIT:
        return BASE_STEPS + (Phase.QR_CODE,)
    if kind == MethodKind.PAIRED:
        return BASE_STEPS + (Phase.WALLET_CONNECT, Phase.ENTER_AMOUNT, Phase.RESULT)
    if requires_chain_switch:
        return BASE_STEPS + (Phase.SWITCH_CHAIN, Phase.ENTER_AMOUNT, Phase.RESULT)
    return DEFAULT_STEPS
