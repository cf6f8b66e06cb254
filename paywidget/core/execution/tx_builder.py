"""
Transaction builder for native and token transfers.
"""

from decimal import Decimal
from typing import Optional, Union

from paywidget.config import settings
from paywidget.core.chains import to_hex
from paywidget.core.errors import MissingAccountError, MissingSelectionError
from paywidget.core.store import WizardState

from .encoding import (
    append_memo,
    encode_erc20_transfer,
    memo_byte_length,
    normalize_memo,
    to_base_units,
)
from .models import TransactionType, TxParams


Amount = Union[str, int, Decimal]


class TransactionBuilder:
    """
    Builds ``TxParams`` for the widget's transfers.

    Handles:
    - Native transfers, memo carried as calldata
    - ERC20 transfers, memo appended after the ABI arguments
    - Gas limits: a fixed baseline plus the memo's calldata cost
    """

    def __init__(
        self,
        native_gas: Optional[int] = None,
        token_gas: Optional[int] = None,
        gas_per_memo_byte: Optional[int] = None,
    ):
        self.native_gas = native_gas if native_gas is not None else settings.native_transfer_gas
        self.token_gas = token_gas if token_gas is not None else settings.token_transfer_gas
        self.gas_per_memo_byte = (
            gas_per_memo_byte if gas_per_memo_byte is not None else settings.memo_gas_per_byte
        )

    def gas_limit(self, baseline: int, memo: Optional[str] = None) -> int:
        return baseline + memo_byte_length(memo) * self.gas_per_memo_byte

    def build_native_transfer(
        self,
        from_address: str,
        to_address: str,
        amount: Amount,
        decimals: int = 18,
        memo: Optional[str] = None,
    ) -> TxParams:
        """
        Build a native token (ETH, MATIC, etc.) transfer.

        Args:
            from_address: The sender address
            to_address: The recipient address
            amount: Human amount, converted with ``decimals``
            decimals: Native currency decimals
            memo: Optional hex memo sent as calldata

        Returns:
            TxParams ready to be forwarded to the wallet
        """
        body = normalize_memo(memo)
        return TxParams(
            from_address=from_address,
            to=to_address,
            value=to_hex(to_base_units(amount, decimals)),
            data=f"0x{body}" if body else "0x",
            gas=to_hex(self.gas_limit(self.native_gas, memo)),
            tx_type=TransactionType.NATIVE_TRANSFER,
        )

    def build_token_transfer(
        self,
        from_address: str,
        token_address: str,
        to_address: str,
        amount: Amount,
        decimals: int,
        memo: Optional[str] = None,
    ) -> TxParams:
        """
        Build an ERC20 transfer transaction.

        Args:
            from_address: The sender address
            token_address: The ERC20 token contract
            to_address: The recipient address
            amount: Human amount, converted with the token's ``decimals``
            decimals: Token decimals
            memo: Optional hex memo appended to the calldata

        Returns:
            TxParams ready to be forwarded to the wallet
        """
        calldata = encode_erc20_transfer(to_address, to_base_units(amount, decimals))
        return TxParams(
            from_address=from_address,
            to=token_address,
            value="0x0",
            data=append_memo(calldata, memo),
            gas=to_hex(self.gas_limit(self.token_gas, memo)),
            tx_type=TransactionType.TOKEN_TRANSFER,
        )

    def build_for_state(
        self,
        state: WizardState,
        amount: Amount,
        recipient: str,
        memo: Optional[str] = None,
    ) -> TxParams:
        """Build the transfer for the selected asset from the connected account."""
        if not state.account.is_success or not state.account.data:
            raise MissingAccountError()
        if state.asset is None:
            raise MissingSelectionError("No asset selected")

        asset = state.asset
        if asset.is_token:
            return self.build_token_transfer(
                from_address=state.account.data,
                token_address=asset.address,
                to_address=recipient,
                amount=amount,
                decimals=asset.decimals,
                memo=memo,
            )
        return self.build_native_transfer(
            from_address=state.account.data,
            to_address=recipient,
            amount=amount,
            decimals=asset.decimals,
            memo=memo,
        )
