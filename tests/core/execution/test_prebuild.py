"""
Tests for TransactionPrebuilder fee and maximum estimates.
"""

import pytest

from paywidget.core.errors import MissingAccountError, ProviderRpcError
from paywidget.core.execution import TransactionPrebuilder, TxEstimate
from paywidget.core.store import Action, ActionType, WidgetInputs, WizardStore
from paywidget.core.wallet import InjectedTransport


SENDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
GWEI = 10**9


def _store(asset, network) -> WizardStore:
    store = WizardStore(WidgetInputs(asset=asset, network=network))
    store.dispatch(Action(ActionType.SET_ACCOUNT_SUCCESS, SENDER))
    return store


@pytest.mark.asyncio
async def test_token_estimate(provider, usdc_asset, ethereum):
    provider.responses.update({
        "eth_gasPrice": hex(10 * GWEI),
        "eth_getBalance": hex(2 * 10**15),
        "eth_call": hex(5_000_000),
    })
    store = _store(usdc_asset, ethereum)
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    prebuilder = TransactionPrebuilder(store, lambda: transport)

    estimate = await prebuilder.prebuild("1", RECIPIENT)

    assert isinstance(estimate, TxEstimate)
    assert estimate.gas_limit == 100000
    assert estimate.fee == 100000 * 10 * GWEI
    assert estimate.max_limit_raw == 5_000_000
    assert estimate.max_limit_formatted == "5"
    assert estimate.fee_error is False
    assert store.state.prebuilt_tx.data == estimate

    call = next(params for method, params in provider.calls if method == "eth_call")
    assert call[0]["to"] == usdc_asset.address
    assert call[0]["data"].startswith("0x70a08231")


@pytest.mark.asyncio
async def test_native_estimate_flags_insufficient_balance(provider, eth_asset, ethereum):
    provider.responses.update({
        "eth_gasPrice": hex(10 * GWEI),
        "eth_getBalance": hex(10**18),
    })
    store = _store(eth_asset, ethereum)
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    prebuilder = TransactionPrebuilder(store, lambda: transport)

    estimate = await prebuilder.prebuild("1", RECIPIENT)

    fee = 21000 * 10 * GWEI
    assert estimate.fee == fee
    assert estimate.fee_error is True
    assert estimate.max_limit_raw == 10**18 - fee
    assert estimate.max_limit_formatted == "0.99979"
    assert "eth_call" not in provider.methods_called()


@pytest.mark.asyncio
async def test_rpc_failure_records_error(provider, eth_asset, ethereum):
    provider.errors["eth_gasPrice"] = ProviderRpcError("Internal JSON-RPC error.", code=-32603)
    store = _store(eth_asset, ethereum)
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    prebuilder = TransactionPrebuilder(store, lambda: transport)

    assert await prebuilder.prebuild("1", RECIPIENT) is None
    assert store.state.prebuilt_tx.is_error
    assert store.state.prebuilt_tx.error == "Internal JSON-RPC error."


@pytest.mark.asyncio
async def test_invalid_amount_records_error(provider, eth_asset, ethereum):
    store = _store(eth_asset, ethereum)
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    prebuilder = TransactionPrebuilder(store, lambda: transport)

    assert await prebuilder.prebuild("one", RECIPIENT) is None
    assert store.state.prebuilt_tx.is_error
    assert provider.calls == []


@pytest.mark.asyncio
async def test_invalid_memo_records_error(provider, usdc_asset, ethereum):
    store = _store(usdc_asset, ethereum)
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    prebuilder = TransactionPrebuilder(store, lambda: transport)

    assert await prebuilder.prebuild("1", RECIPIENT, memo="0x123") is None
    assert store.state.prebuilt_tx.is_error
    assert "even-length" in store.state.prebuilt_tx.error
    assert provider.calls == []


@pytest.mark.asyncio
async def test_invalid_recipient_records_error(provider, usdc_asset, ethereum):
    store = _store(usdc_asset, ethereum)
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    prebuilder = TransactionPrebuilder(store, lambda: transport)

    assert await prebuilder.prebuild("1", "0xnot-an-address") is None
    assert store.state.prebuilt_tx.error == "Invalid address: 0xnot-an-address"


@pytest.mark.asyncio
async def test_missing_account_leaves_estimate_idle(provider, eth_asset, ethereum):
    store = WizardStore(WidgetInputs(asset=eth_asset, network=ethereum))
    transport = InjectedTransport(provider, "MetaMask", handle_id=1)
    prebuilder = TransactionPrebuilder(store, lambda: transport)

    with pytest.raises(MissingAccountError):
        await prebuilder.prebuild("1", RECIPIENT)
    assert store.state.prebuilt_tx.is_idle
