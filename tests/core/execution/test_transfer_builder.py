"""
Tests for TransactionBuilder gas, value and calldata.
"""

import pytest

from paywidget.core.errors import MissingAccountError, MissingSelectionError
from paywidget.core.execution import TransactionBuilder, TransactionType
from paywidget.core.execution.encoding import encode_erc20_transfer
from paywidget.core.store import Action, ActionType, WidgetInputs, WizardStore


SENDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


@pytest.fixture
def builder() -> TransactionBuilder:
    return TransactionBuilder(native_gas=21000, token_gas=100000, gas_per_memo_byte=16)


class TestNativeTransfer:

    def test_without_memo(self, builder):
        tx = builder.build_native_transfer(SENDER, RECIPIENT, "1")

        assert tx.gas == "0x5208"
        assert tx.data == "0x"
        assert tx.to == RECIPIENT
        assert tx.value == hex(10**18)
        assert tx.tx_type == TransactionType.NATIVE_TRANSFER

    def test_with_three_byte_memo(self, builder):
        tx = builder.build_native_transfer(SENDER, RECIPIENT, "1", memo="0x123456")

        assert tx.gas == "0x5238"
        assert tx.gas_limit == 21048
        assert tx.data == "0x123456"

    def test_memo_without_prefix_costs_the_same(self, builder):
        tx = builder.build_native_transfer(SENDER, RECIPIENT, "1", memo="123456")
        assert tx.gas == "0x5238"
        assert tx.data == "0x123456"

    def test_send_transaction_payload(self, builder):
        tx = builder.build_native_transfer(SENDER, RECIPIENT, "0.5")
        assert tx.to_dict() == {
            "data": "0x",
            "from": SENDER,
            "gas": "0x5208",
            "to": RECIPIENT,
            "value": hex(5 * 10**17),
        }


class TestTokenTransfer:

    def test_without_memo(self, builder):
        tx = builder.build_token_transfer(SENDER, USDC, RECIPIENT, "1", decimals=6)

        assert tx.gas == "0x186a0"
        assert int(tx.gas, 16) == 100000
        assert tx.value == "0x0"
        assert tx.to == USDC
        assert tx.data == encode_erc20_transfer(RECIPIENT, 1_000_000)
        assert tx.tx_type == TransactionType.TOKEN_TRANSFER

    def test_memo_appended_after_arguments(self, builder):
        tx = builder.build_token_transfer(SENDER, USDC, RECIPIENT, "1", decimals=6, memo="0xabcdef")

        assert tx.data == encode_erc20_transfer(RECIPIENT, 1_000_000) + "abcdef"
        assert tx.gas_limit == 100000 + 3 * 16


class TestBuildForState:

    def test_requires_connected_account(self, builder, eth_asset, ethereum):
        store = WizardStore(WidgetInputs(asset=eth_asset, network=ethereum))
        with pytest.raises(MissingAccountError):
            builder.build_for_state(store.state, "1", RECIPIENT)

    def test_requires_asset(self, builder):
        store = WizardStore()
        store.dispatch(Action(ActionType.SET_ACCOUNT_SUCCESS, SENDER))
        with pytest.raises(MissingSelectionError):
            builder.build_for_state(store.state, "1", RECIPIENT)

    def test_picks_token_transfer_for_token_asset(self, builder, usdc_asset, ethereum):
        store = WizardStore(WidgetInputs(asset=usdc_asset, network=ethereum))
        store.dispatch(Action(ActionType.SET_ACCOUNT_SUCCESS, SENDER))

        tx = builder.build_for_state(store.state, "2.5", RECIPIENT)

        assert tx.to == usdc_asset.address
        assert tx.from_address == SENDER
        assert tx.data == encode_erc20_transfer(RECIPIENT, 2_500_000)

    def test_picks_native_transfer_for_network_asset(self, builder, eth_asset, ethereum):
        store = WizardStore(WidgetInputs(asset=eth_asset, network=ethereum))
        store.dispatch(Action(ActionType.SET_ACCOUNT_SUCCESS, SENDER))

        tx = builder.build_for_state(store.state, "1", RECIPIENT)

        assert tx.to == RECIPIENT
        assert tx.tx_type == TransactionType.NATIVE_TRANSFER


def test_defaults_come_from_settings(monkeypatch):
    from paywidget.config import settings

    monkeypatch.setattr(settings, "native_transfer_gas", 30000)
    builder = TransactionBuilder()
    assert builder.build_native_transfer(SENDER, RECIPIENT, "1").gas_limit == 30000
