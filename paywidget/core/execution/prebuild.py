"""
Transaction prebuild: fee estimate and spendable maximum for the amount step.
"""

import logging
from typing import Any, Callable, Optional

from paywidget.core.chains import from_hex
from paywidget.core.errors import MissingAccountError, PreconditionError, error_message
from paywidget.core.store import Resource, WizardStore
from paywidget.types import RemoteStatus

from .encoding import encode_erc20_balance_of, from_base_units
from .models import TxEstimate, TxParams
from .tx_builder import Amount, TransactionBuilder


logger = logging.getLogger(__name__)


class TransactionPrebuilder:
    """
    Prices a transfer before the user confirms it.

    Reads gas price and balances through the active wallet transport and
    records a ``TxEstimate`` on the ``prebuilt_tx`` resource.
    """

    def __init__(
        self,
        store: WizardStore,
        transport_source: Callable[[], Optional[Any]],
        builder: Optional[TransactionBuilder] = None,
    ):
        self.store = store
        self.transport_source = transport_source
        self.builder = builder or TransactionBuilder()

    async def prebuild(
        self,
        amount: Amount,
        recipient: str,
        memo: Optional[str] = None,
    ) -> Optional[TxEstimate]:
        transport = self.transport_source()
        if transport is None:
            raise MissingAccountError("No wallet transport")

        token = self.store.begin_request(Resource.PREBUILT_TX)
        self.store.set_status(Resource.PREBUILT_TX, RemoteStatus.LOADING)
        try:
            tx = self.builder.build_for_state(self.store.state, amount, recipient, memo)
        except PreconditionError:
            self.store.invalidate(Resource.PREBUILT_TX)
            self.store.set_status(Resource.PREBUILT_TX, RemoteStatus.IDLE)
            raise
        except ValueError as e:
            # Bad amount, recipient or memo
            logger.info(f"Cannot prebuild transfer: {e}")
            self.store.settle(Resource.PREBUILT_TX, token, RemoteStatus.ERROR, str(e))
            return None

        try:
            estimate = await self._estimate(transport, tx)
        except Exception as e:
            message = error_message(e)
            logger.warning(f"Prebuild failed: {message}")
            self.store.settle(Resource.PREBUILT_TX, token, RemoteStatus.ERROR, message)
            return None

        if not self.store.settle(Resource.PREBUILT_TX, token, RemoteStatus.SUCCESS, estimate):
            return None
        return estimate

    async def _estimate(self, transport: Any, tx: TxParams) -> TxEstimate:
        asset = self.store.state.asset

        gas_price = from_hex(await transport.rpc("eth_gasPrice"))
        native_balance = from_hex(
            await transport.rpc("eth_getBalance", [tx.from_address, "latest"])
        )
        gas_limit = tx.gas_limit
        fee = gas_limit * gas_price

        if asset is not None and asset.is_token:
            token_balance = from_hex(await transport.rpc("eth_call", [
                {"to": asset.address, "data": encode_erc20_balance_of(tx.from_address)},
                "latest",
            ]))
            max_limit_raw = token_balance
            fee_error = native_balance < fee
        else:
            max_limit_raw = max(native_balance - fee, 0)
            fee_error = native_balance < fee + from_hex(tx.value)

        decimals = asset.decimals if asset is not None else 18
        logger.debug(
            f"Prebuilt {tx.tx_type.value}: gas={gas_limit} price={gas_price} "
            f"fee={fee} max={max_limit_raw} fee_error={fee_error}"
        )
        return TxEstimate(
            tx=tx,
            gas_limit=gas_limit,
            gas_price=gas_price,
            fee=fee,
            max_limit_raw=max_limit_raw,
            max_limit_formatted=from_base_units(max_limit_raw, decimals),
            fee_error=fee_error,
        )
