"""
Chain Switch Coordinator

Asks the wallet to move to the selected network's chain. Failures stay on
the switch step's form and never touch resource status, so an already
connected account is not disturbed.
"""

import logging
from typing import Callable, Optional

from paywidget.core.chains import build_add_chain_params
from paywidget.core.errors import ChainSwitchError, ProviderRpcError, error_message
from paywidget.core.store import WizardState
from paywidget.types import Network

from .models import SwitchOutcome
from .transports import Transport


logger = logging.getLogger(__name__)


def needs_chain_switch(state: WizardState) -> bool:
    """True when the wallet reports a chain other than the selected network's."""
    if state.network is None or state.network.chain_id is None:
        return False
    return state.provider_chain_id != state.network.chain_id


class ChainSwitchCoordinator:
    """
    Switches the active transport's chain, adding the chain once when the
    wallet does not know it.
    """

    def __init__(self, transport_source: Callable[[], Optional[Transport]]):
        self.transport_source = transport_source

    async def request_switch(self, network: Network) -> SwitchOutcome:
        chain_id = network.chain_id
        if chain_id is None:
            return SwitchOutcome(form_error=f"{network.name} is not an EVM network")

        transport = self.transport_source()
        if transport is None:
            return SwitchOutcome(form_error="No wallet connected")

        try:
            await transport.switch_chain(chain_id)
            logger.info(f"Switched {transport.name} to chain {chain_id}")
            return SwitchOutcome(switched=True)
        except ProviderRpcError as e:
            if not e.is_unrecognized_chain:
                logger.warning(f"Chain switch to {chain_id} failed: {e.message}")
                return SwitchOutcome(form_error=e.message)
            logger.info(f"Chain {chain_id} unknown to {transport.name}, adding it")
        except Exception as e:
            logger.warning(f"Chain switch to {chain_id} failed: {e}")
            return SwitchOutcome(form_error=error_message(e))

        try:
            await self._add_chain(transport, network)
        except ChainSwitchError as e:
            return SwitchOutcome(form_error=e.message)
        return SwitchOutcome(switched=True, added=True)

    async def _add_chain(self, transport: Transport, network: Network) -> None:
        try:
            await transport.add_chain(build_add_chain_params(network))
        except Exception as e:
            logger.warning(f"Adding chain {network.chain_id} failed: {e}")
            raise ChainSwitchError(error_message(e))
