"""
Wizard Store Models

Phases, actions and the immutable state aggregate owned by the store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from paywidget.types import Asset, Network, PaymentMethod, StatusEnvelope


class Phase(str, Enum):
    """Named steps of the wizard, in canonical order."""

    ASSET_SELECTION = "AssetSelection"
    NETWORK_SELECTION = "NetworkSelection"
    PAYMENT_METHOD = "PaymentMethod"
    SWITCH_CHAIN = "SwitchChain"
    ENTER_AMOUNT = "EnterAmount"
    WALLET_CONNECT = "WalletConnect"
    QR_CODE = "QRCode"
    RESULT = "Result"


class Resource(str, Enum):
    """Asynchronous resources tracked with a status envelope."""

    ACCOUNT = "account"
    PROVIDER = "provider"
    DEPOSIT_ADDRESS = "deposit_address"
    PREBUILT_TX = "prebuilt_tx"
    TRANSACTION = "transaction"


class ActionType(str, Enum):
    """Closed set of actions understood by the reducer."""

    RESET_STATE = "RESET_STATE"
    SET_ASSET = "SET_ASSET"
    SET_NETWORK = "SET_NETWORK"
    SET_PAYMENT_METHOD = "SET_PAYMENT_METHOD"
    SET_STEP = "SET_STEP"
    SET_STEPS = "SET_STEPS"
    SET_PROVIDER_CHAIN_ID = "SET_PROVIDER_CHAIN_ID"

    GENERATE_DEPOSIT_ADDRESS_IDLE = "GENERATE_DEPOSIT_ADDRESS_IDLE"
    GENERATE_DEPOSIT_ADDRESS_LOADING = "GENERATE_DEPOSIT_ADDRESS_LOADING"
    GENERATE_DEPOSIT_ADDRESS_SUCCESS = "GENERATE_DEPOSIT_ADDRESS_SUCCESS"
    GENERATE_DEPOSIT_ADDRESS_ERROR = "GENERATE_DEPOSIT_ADDRESS_ERROR"

    SET_ACCOUNT_IDLE = "SET_ACCOUNT_IDLE"
    SET_ACCOUNT_LOADING = "SET_ACCOUNT_LOADING"
    SET_ACCOUNT_SUCCESS = "SET_ACCOUNT_SUCCESS"
    SET_ACCOUNT_ERROR = "SET_ACCOUNT_ERROR"

    SET_PROVIDER_IDLE = "SET_PROVIDER_IDLE"
    SET_PROVIDER_LOADING = "SET_PROVIDER_LOADING"
    SET_PROVIDER_SUCCESS = "SET_PROVIDER_SUCCESS"
    SET_PROVIDER_ERROR = "SET_PROVIDER_ERROR"

    SET_PREBUILT_TX_IDLE = "SET_PREBUILT_TX_IDLE"
    SET_PREBUILT_TX_LOADING = "SET_PREBUILT_TX_LOADING"
    SET_PREBUILT_TX_SUCCESS = "SET_PREBUILT_TX_SUCCESS"
    SET_PREBUILT_TX_ERROR = "SET_PREBUILT_TX_ERROR"

    SET_TRANSACTION_IDLE = "SET_TRANSACTION_IDLE"
    SET_TRANSACTION_LOADING = "SET_TRANSACTION_LOADING"
    SET_TRANSACTION_SUCCESS = "SET_TRANSACTION_SUCCESS"
    SET_TRANSACTION_ERROR = "SET_TRANSACTION_ERROR"


@dataclass(frozen=True)
class Action:
    """A dispatched action. ``type`` may be any value; unknown types are no-ops."""

    type: Any
    payload: Any = None

    def __repr__(self) -> str:
        kind = self.type.value if isinstance(self.type, ActionType) else self.type
        return f"Action({kind})"


class TransportKind(str, Enum):
    INJECTED = "injected"
    PAIRED = "paired"


@dataclass(frozen=True)
class ProviderHandle:
    """Opaque descriptor of the live transport owned by the connection manager."""

    kind: TransportKind
    name: str
    handle_id: int


@dataclass(frozen=True)
class DepositAddress:
    address: str
    memo: Optional[str] = None


@dataclass(frozen=True)
class SubmittedTransaction:
    hash: Optional[str]


@dataclass(frozen=True)
class WidgetInputs:
    """Caller-supplied inputs, preserved across resets."""

    asset: Optional[Asset] = None
    network: Optional[Network] = None
    theme: Optional[str] = None
    colors: Optional[Dict[str, str]] = None
    fiat: Optional[str] = None
    slug: Optional[str] = None


@dataclass(frozen=True)
class WizardState:
    """Snapshot of the whole wizard. Only the reducer produces new snapshots."""

    steps: Tuple[Phase, ...]
    step: int = 0

    asset: Optional[Asset] = None
    network: Optional[Network] = None
    method: Optional[PaymentMethod] = None

    account: StatusEnvelope = field(default_factory=StatusEnvelope.idle)
    provider: StatusEnvelope = field(default_factory=StatusEnvelope.idle)
    provider_chain_id: Optional[int] = None
    deposit_address: StatusEnvelope = field(default_factory=StatusEnvelope.idle)
    prebuilt_tx: StatusEnvelope = field(default_factory=StatusEnvelope.idle)
    transaction: StatusEnvelope = field(default_factory=StatusEnvelope.idle)

    # Presentation only
    theme: Optional[str] = None
    colors: Optional[Dict[str, str]] = None
    fiat: Optional[str] = None
    slug: Optional[str] = None

    inputs: WidgetInputs = field(default_factory=WidgetInputs)

    @property
    def phase(self) -> Phase:
        return self.steps[self.step]

    @property
    def account_address(self) -> Optional[str]:
        return self.account.data if self.account.is_success else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "steps": [p.value for p in self.steps],
            "step": self.step,
            "phase": self.phase.value,
            "asset": self.asset.symbol if self.asset else None,
            "network": self.network.network_code if self.network else None,
            "method": self.method.name if self.method else None,
            "account": self.account.status.value,
            "provider": self.provider.status.value,
            "providerChainId": self.provider_chain_id,
            "depositAddress": self.deposit_address.status.value,
            "prebuiltTx": self.prebuilt_tx.status.value,
            "transaction": self.transaction.status.value,
        }
