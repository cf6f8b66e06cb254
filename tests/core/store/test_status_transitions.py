"""
Every resource reaches success or error only from loading, whichever
component drives it.
"""

from collections import defaultdict
from typing import Dict, List

import pytest
from unittest.mock import AsyncMock

from paywidget.core.deposit import DepositAddressOrchestrator
from paywidget.core.execution import TransactionPrebuilder
from paywidget.core.store import Action, ActionType, Phase, Resource, WidgetInputs, WizardStore, plan_steps
from paywidget.core.wallet import InjectedTransport, PairingSessionManager, WalletConnectionManager
from paywidget.types import RemoteStatus


SENDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"


class TransitionLog:
    """Records the distinct status sequence of every resource."""

    def __init__(self, store: WizardStore):
        self.history: Dict[Resource, List[RemoteStatus]] = defaultdict(list)
        self._record(store.state)
        store.subscribe(self._record)

    def _record(self, state) -> None:
        for resource in Resource:
            status = getattr(state, resource.value).status
            seen = self.history[resource]
            if not seen or seen[-1] != status:
                seen.append(status)

    def assert_settled_through_loading(self) -> None:
        for resource, statuses in self.history.items():
            for previous, status in zip(statuses, statuses[1:]):
                if status in (RemoteStatus.SUCCESS, RemoteStatus.ERROR):
                    assert previous == RemoteStatus.LOADING, (
                        f"{resource.value}: {previous.value} -> {status.value} in {statuses}"
                    )


@pytest.fixture
def store(usdc_asset, ethereum, rainbow) -> WizardStore:
    store = WizardStore(WidgetInputs(asset=usdc_asset, network=ethereum))
    store.dispatch(Action(ActionType.SET_PAYMENT_METHOD, rainbow))
    store.dispatch(Action(ActionType.SET_STEPS, plan_steps(rainbow)))
    store.set_step(Phase.WALLET_CONNECT)
    return store


@pytest.mark.asyncio
async def test_pairing_session_lifecycle(store, make_pairing_client, rainbow):
    log = TransitionLog(store)
    failing = make_pairing_client()
    failing.create_error = RuntimeError("bridge unreachable")
    working = make_pairing_client()
    clients = [failing, working]
    manager = PairingSessionManager(store, lambda: clients.pop(0))

    await manager.start(rainbow)
    assert store.state.account.is_error

    await manager.start(rainbow)
    working.approve(SENDER)
    working.emit("disconnect", RuntimeError("peer closed"), None)

    assert log.history[Resource.PROVIDER][:3] == [
        RemoteStatus.IDLE, RemoteStatus.LOADING, RemoteStatus.SUCCESS,
    ]
    assert store.state.account.error == "WalletConnect Error"
    log.assert_settled_through_loading()


@pytest.mark.asyncio
async def test_injected_connection(store, provider, make_host, metamask, coinbase):
    log = TransitionLog(store)
    manager = WalletConnectionManager(store, make_host(provider))
    manager.mount()

    await manager.connect(coinbase)
    await manager.connect(metamask)
    provider.emit("accountsChanged", [RECIPIENT])

    assert store.state.account.data == RECIPIENT
    log.assert_settled_through_loading()


@pytest.mark.asyncio
async def test_prebuild_failures(store, provider):
    store.dispatch(Action(ActionType.SET_ACCOUNT_SUCCESS, SENDER))
    log = TransitionLog(store)
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    prebuilder = TransactionPrebuilder(store, lambda: transport)

    assert await prebuilder.prebuild("not-a-number", RECIPIENT) is None
    assert await prebuilder.prebuild("1", RECIPIENT, memo="0x123") is None

    assert log.history[Resource.PREBUILT_TX] == [
        RemoteStatus.IDLE, RemoteStatus.LOADING, RemoteStatus.ERROR,
        RemoteStatus.LOADING, RemoteStatus.ERROR,
    ]
    log.assert_settled_through_loading()


@pytest.mark.asyncio
async def test_deposit_generation(store):
    log = TransitionLog(store)
    generator = AsyncMock(side_effect=[RuntimeError("backend down"), {"address": RECIPIENT}])
    orchestrator = DepositAddressOrchestrator(store, generator)

    await orchestrator.generate()
    await orchestrator.generate()

    assert store.state.deposit_address.data.address == RECIPIENT
    log.assert_settled_through_loading()
