"""
Wallet session outcomes returned to the step that triggered them.
"""

from dataclasses import dataclass
from typing import Optional

from paywidget.core.errors import WalletConnectionError


@dataclass
class ConnectOutcome:
    """Result of a connection attempt as seen by the payment-method step."""
    account: Optional[str] = None
    form_error: Optional[str] = None            # Message for the step's form
    uri: Optional[str] = None                   # Pairing URI awaiting approval
    error: Optional[WalletConnectionError] = None

    @property
    def connected(self) -> bool:
        return self.account is not None


@dataclass
class SwitchOutcome:
    """Result of a chain switch request."""
    switched: bool = False
    added: bool = False                         # Chain was added to the wallet first
    form_error: Optional[str] = None
