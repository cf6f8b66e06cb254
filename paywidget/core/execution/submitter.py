"""
Transaction Submitter

Builds the transfer for the current wizard state and sends it through the
active wallet transport, recording progress on the transaction resource.
"""

import logging
from typing import Any, Callable, Optional

from paywidget.core.errors import MissingAccountError, TransactionSubmitError, error_message
from paywidget.core.store import Resource, SubmittedTransaction, WizardStore
from paywidget.types import RemoteStatus

from .models import TxParams
from .tx_builder import Amount, TransactionBuilder


logger = logging.getLogger(__name__)


class TransactionSubmitter:
    """
    Sends transfers through whichever transport is active.

    Both transports follow one policy: a failure is recorded as
    ``transaction`` error and re-raised as ``TransactionSubmitError``.
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

    async def send_transaction(
        self,
        amount: Amount,
        recipient: str,
        memo: Optional[str] = None,
    ) -> str:
        """
        Build and submit a transfer of ``amount`` to ``recipient``.

        Returns:
            The transaction hash reported by the wallet

        Raises:
            MissingAccountError: no connected account (programmer error)
            TransactionSubmitError: the wallet rejected or failed the request
        """
        params = self.builder.build_for_state(self.store.state, amount, recipient, memo)

        transport = self.transport_source()
        if transport is None:
            raise MissingAccountError("No wallet transport")

        return await self.submit(transport, params)

    async def submit(self, transport: Any, params: TxParams) -> str:
        token = self.store.begin_request(Resource.TRANSACTION)
        self.store.set_status(Resource.TRANSACTION, RemoteStatus.LOADING)

        try:
            tx_hash = await transport.send_transaction(params)
        except Exception as e:
            message = error_message(e)
            logger.error(f"Transaction submission via {transport.name} failed: {message}")
            self.store.settle(Resource.TRANSACTION, token, RemoteStatus.ERROR, message)
            raise TransactionSubmitError(message, cause=e) from e

        logger.info(f"Transaction submitted via {transport.name}: {tx_hash}")
        self.store.settle(
            Resource.TRANSACTION, token, RemoteStatus.SUCCESS, SubmittedTransaction(hash=tx_hash)
        )
        return tx_hash
