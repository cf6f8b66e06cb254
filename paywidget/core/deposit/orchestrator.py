"""
Deposit Address Orchestrator

Requests a deposit address (and optional memo) for the selected asset and
network from the host-supplied generator, for QR-code payment methods.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from paywidget.core.errors import MissingSelectionError
from paywidget.core.store import DepositAddress, Resource, WizardStore
from paywidget.types import RemoteStatus


logger = logging.getLogger(__name__)

# generate_deposit_address(asset_symbol, network_code, memo_enabled)
DepositAddressGenerator = Callable[
    [Optional[str], Optional[str], bool],
    Awaitable[Any],
]


def _to_deposit_address(result: Any) -> DepositAddress:
    if isinstance(result, DepositAddress):
        return result
    if isinstance(result, dict):
        return DepositAddress(address=result["address"], memo=result.get("memo"))
    raise TypeError(f"Unexpected deposit address result: {result!r}")


class DepositAddressOrchestrator:
    """
    Owns the ``deposit_address`` resource for one mounted QR step.

    ``teardown`` returns the resource to idle and makes any in-flight
    generation stale, so a late result never lands on a later mount.
    """

    def __init__(self, store: WizardStore, generator: DepositAddressGenerator):
        self.store = store
        self.generator = generator
        self._task: Optional[asyncio.Task] = None

    async def generate(self, memo_enabled: bool = False) -> Optional[DepositAddress]:
        state = self.store.state
        if state.asset is None or state.network is None:
            raise MissingSelectionError("Asset and network must be selected")

        token = self.store.begin_request(Resource.DEPOSIT_ADDRESS)
        self.store.set_status(Resource.DEPOSIT_ADDRESS, RemoteStatus.LOADING)

        try:
            result = await self.generator(state.asset.symbol, state.network.network_code, memo_enabled)
            deposit = _to_deposit_address(result)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                f"Deposit address generation failed for "
                f"{state.asset.symbol}/{state.network.network_code}: {e}"
            )
            self.store.settle(Resource.DEPOSIT_ADDRESS, token, RemoteStatus.ERROR)
            return None

        if not self.store.settle(Resource.DEPOSIT_ADDRESS, token, RemoteStatus.SUCCESS, deposit):
            return None
        logger.info(f"Deposit address ready for {state.asset.symbol}/{state.network.network_code}")
        return deposit

    def start(self, memo_enabled: bool = False) -> asyncio.Task:
        """Mount: begin generation in the background."""
        self.teardown()
        self._task = asyncio.get_running_loop().create_task(self.generate(memo_enabled))
        return self._task

    def teardown(self) -> None:
        """Unmount: drop any pending result and return to idle."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.store.invalidate(Resource.DEPOSIT_ADDRESS)
        self.store.set_status(Resource.DEPOSIT_ADDRESS, RemoteStatus.IDLE)
