"""
Wallet Module

Transports to the user's wallet and the managers that own them:

- Injected provider discovery and connection
- Pairing sessions approved on a peer device
- Chain switching with a one-shot add-chain fallback
"""

from .chain_switch import ChainSwitchCoordinator, needs_chain_switch
from .connection import RECONNECT_MESSAGE, WalletConnectionManager
from .discovery import discover_providers, locate_provider
from .models import ConnectOutcome, SwitchOutcome
from .pairing import PairingSessionManager
from .transports import (
    Eip1193Provider,
    InjectedTransport,
    PairedTransport,
    PairingClient,
    Transport,
)

__all__ = [
    # Managers
    "WalletConnectionManager",
    "PairingSessionManager",
    "ChainSwitchCoordinator",
    "needs_chain_switch",
    "RECONNECT_MESSAGE",
    # Discovery
    "discover_providers",
    "locate_provider",
    # Transports
    "Transport",
    "InjectedTransport",
    "PairedTransport",
    "Eip1193Provider",
    "PairingClient",
    # Outcomes
    "ConnectOutcome",
    "SwitchOutcome",
]
