"""
Transaction execution models and types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class TransactionType(str, Enum):
    """Types of transfers the widget can build."""
    NATIVE_TRANSFER = "native_transfer"
    TOKEN_TRANSFER = "token_transfer"


@dataclass(frozen=True)
class TxParams:
    """Parameters forwarded to the wallet's send-transaction call."""
    from_address: str
    to: str
    value: str                                  # Wei, hex quantity
    data: str                                   # Calldata, hex
    gas: str                                    # Gas limit, hex quantity
    tx_type: TransactionType = TransactionType.NATIVE_TRANSFER

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the eth_sendTransaction parameter object."""
        return {
            "data": self.data,
            "from": self.from_address,
            "gas": self.gas,
            "to": self.to,
            "value": self.value,
        }

    @property
    def gas_limit(self) -> int:
        return int(self.gas, 16)


@dataclass(frozen=True)
class TxEstimate:
    """Fee estimate and spendable maximum for a prebuilt transaction."""
    tx: TxParams
    gas_limit: int
    gas_price: int                              # Wei per gas
    fee: int                                    # Wei
    max_limit_raw: int                          # Smallest units of the asset
    max_limit_formatted: str
    fee_error: bool = False
