"""
Tests for ChainSwitchCoordinator and the add-chain fallback.
"""

import pytest
from unittest.mock import AsyncMock

from paywidget.core.errors import ProviderRpcError
from paywidget.core.store import Action, ActionType, WidgetInputs, WizardStore
from paywidget.core.wallet import (
    ChainSwitchCoordinator,
    InjectedTransport,
    PairedTransport,
    needs_chain_switch,
)


@pytest.mark.asyncio
async def test_switch_to_known_chain(provider, polygon):
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    coordinator = ChainSwitchCoordinator(lambda: transport)

    outcome = await coordinator.request_switch(polygon)

    assert outcome.switched and not outcome.added
    assert provider.chain_id == 137
    assert provider.calls[-1] == ("wallet_switchEthereumChain", [{"chainId": "0x89"}])


@pytest.mark.asyncio
async def test_unrecognized_chain_is_added_once(provider, base_network):
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    coordinator = ChainSwitchCoordinator(lambda: transport)

    outcome = await coordinator.request_switch(base_network)

    assert outcome.switched and outcome.added
    assert provider.methods_called() == ["wallet_switchEthereumChain", "wallet_addEthereumChain"]
    params = provider.calls[-1][1][0]
    assert params["chainId"] == "0x2105"
    assert params["nativeCurrency"] == {"name": "Base", "symbol": "ETH", "decimals": 18}
    assert params["rpcUrls"] == ["https://mainnet.base.org"]
    assert params["blockExplorerUrls"] == ["https://basescan.org"]


@pytest.mark.asyncio
async def test_failed_add_surfaces_form_error(provider, base_network):
    provider.errors["wallet_addEthereumChain"] = ProviderRpcError("User rejected the request.", code=4001)
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    coordinator = ChainSwitchCoordinator(lambda: transport)

    outcome = await coordinator.request_switch(base_network)

    assert not outcome.switched
    assert outcome.form_error == "User rejected the request."
    assert provider.methods_called().count("wallet_addEthereumChain") == 1


@pytest.mark.asyncio
async def test_other_switch_error_skips_add(provider, polygon):
    provider.errors["wallet_switchEthereumChain"] = ProviderRpcError("User rejected the request.", code=4001)
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    coordinator = ChainSwitchCoordinator(lambda: transport)

    outcome = await coordinator.request_switch(polygon)

    assert outcome.form_error == "User rejected the request."
    assert "wallet_addEthereumChain" not in provider.methods_called()


@pytest.mark.asyncio
async def test_paired_switch_goes_through_session(pairing_client, polygon):
    transport = PairedTransport(pairing_client, "Rainbow", handle_id=1)
    coordinator = ChainSwitchCoordinator(lambda: transport)

    outcome = await coordinator.request_switch(polygon)

    assert outcome.switched
    assert pairing_client.custom == [{
        "jsonrpc": "2.0",
        "method": "wallet_switchEthereumChain",
        "params": [{"chainId": "0x89"}],
    }]


@pytest.mark.asyncio
async def test_unrecognized_message_without_code_triggers_add(pairing_client, base_network):
    pairing_client.send_custom_request = AsyncMock(
        side_effect=[ProviderRpcError('Unrecognized chain ID "0x2105".'), None]
    )
    transport = PairedTransport(pairing_client, "Rainbow", handle_id=1)
    coordinator = ChainSwitchCoordinator(lambda: transport)

    outcome = await coordinator.request_switch(base_network)

    assert outcome.added
    second = pairing_client.send_custom_request.await_args_list[1].args[0]
    assert second["method"] == "wallet_addEthereumChain"


@pytest.mark.asyncio
async def test_without_transport(polygon):
    coordinator = ChainSwitchCoordinator(lambda: None)

    outcome = await coordinator.request_switch(polygon)

    assert outcome.form_error == "No wallet connected"


def test_needs_chain_switch(eth_asset, ethereum):
    store = WizardStore(WidgetInputs(asset=eth_asset, network=ethereum))
    store.dispatch(Action(ActionType.SET_PROVIDER_CHAIN_ID, 137))
    assert needs_chain_switch(store.state) is True

    store.dispatch(Action(ActionType.SET_PROVIDER_CHAIN_ID, 1))
    assert needs_chain_switch(store.state) is False


def test_no_switch_without_network():
    assert needs_chain_switch(WizardStore().state) is False
