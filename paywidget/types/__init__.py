from .envelope import RemoteStatus, StatusEnvelope
from .catalog import (
    Asset,
    Logo,
    Network,
    NetworkIdentifiers,
    NetworkLinks,
    PaymentMethod,
    WalletConnectLinks,
)

__all__ = [
    "RemoteStatus",
    "StatusEnvelope",
    "Asset",
    "Logo",
    "Network",
    "NetworkIdentifiers",
    "NetworkLinks",
    "PaymentMethod",
    "WalletConnectLinks",
]
