"""
Transaction Execution Layer

Builds, prices and submits the widget's transfers:
- TransactionBuilder: native and ERC20 transfers with memo calldata
- TransactionPrebuilder: fee estimate and spendable maximum
- TransactionSubmitter: sends through the active wallet transport

Usage:
    from paywidget.core.execution import TransactionBuilder

    tx = TransactionBuilder().build_token_transfer(
        from_address="0x...",
        token_address="0x...",
        to_address="0x...",
        amount="1.5",
        decimals=6,
        memo="0xabcdef",
    )
"""

from .encoding import (
    ERC20_BALANCE_OF_SELECTOR,
    ERC20_TRANSFER_SELECTOR,
    append_memo,
    encode_erc20_balance_of,
    encode_erc20_transfer,
    from_base_units,
    memo_byte_length,
    normalize_memo,
    to_base_units,
)
from .models import TransactionType, TxEstimate, TxParams
from .prebuild import TransactionPrebuilder
from .submitter import TransactionSubmitter
from .tx_builder import TransactionBuilder

__all__ = [
    # Builders
    "TransactionBuilder",
    "TransactionPrebuilder",
    "TransactionSubmitter",
    # Models
    "TransactionType",
    "TxEstimate",
    "TxParams",
    # Encoding
    "ERC20_TRANSFER_SELECTOR",
    "ERC20_BALANCE_OF_SELECTOR",
    "append_memo",
    "encode_erc20_transfer",
    "encode_erc20_balance_of",
    "memo_byte_length",
    "normalize_memo",
    "to_base_units",
    "from_base_units",
]
