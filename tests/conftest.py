"""
Shared wallet fakes and catalog fixtures.

The fakes behave like the host-side objects the widget talks to: an
EIP-1193 injected provider (``window.ethereum``) and a pairing-session
client that is approved on a peer device.
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional

import pytest

from paywidget.core.errors import ProviderRpcError
from paywidget.types import (
    Asset,
    Network,
    NetworkIdentifiers,
    NetworkLinks,
    PaymentMethod,
)


SENDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
TX_HASH = "0x" + "ab" * 32


class FakeInjectedProvider:
    """In-page EIP-1193 provider with scripted accounts and errors."""

    def __init__(
        self,
        flags=("isMetaMask",),
        authorized: Optional[List[str]] = None,
        grant: Optional[List[str]] = None,
        chain_id: int = 1,
    ):
        for flag in flags:
            setattr(self, flag, True)
        self.authorized = list(authorized or [])
        self.grant = list(grant) if grant is not None else [SENDER]
        self.chain_id = chain_id
        self.known_chains = {1, 137}
        self.errors: Dict[str, Exception] = {}
        self.responses: Dict[str, Any] = {}
        self.listeners: Dict[str, List[Any]] = defaultdict(list)
        self.calls: List[tuple] = []

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        self.calls.append((method, params))
        if method in self.errors:
            raise self.errors[method]
        if method == "eth_accounts":
            return list(self.authorized)
        if method == "eth_requestAccounts":
            self.authorized = list(self.grant)
            return list(self.authorized)
        if method == "eth_chainId":
            return hex(self.chain_id)
        if method == "eth_sendTransaction":
            return self.responses.get(method, TX_HASH)
        if method == "wallet_switchEthereumChain":
            chain_id = int(params[0]["chainId"], 16)
            if chain_id not in self.known_chains:
                raise ProviderRpcError(
                    f'Unrecognized chain ID "{params[0]["chainId"]}". '
                    "Try adding the chain using wallet_addEthereumChain first.",
                    code=4902,
                )
            self.chain_id = chain_id
            return None
        if method == "wallet_addEthereumChain":
            chain_id = int(params[0]["chainId"], 16)
            self.known_chains.add(chain_id)
            self.chain_id = chain_id
            return None
        return self.responses.get(method)

    def on(self, event: str, listener) -> None:
        self.listeners[event].append(listener)

    def remove_listener(self, event: str, listener) -> None:
        self.listeners[event] = [cb for cb in self.listeners[event] if cb is not listener]

    def emit(self, event: str, *args) -> None:
        for listener in list(self.listeners[event]):
            listener(*args)

    def methods_called(self) -> List[str]:
        return [method for method, _ in self.calls]


class FakeAggregator:
    """Aggregating ``window.ethereum`` exposing several sub-providers."""

    def __init__(self, providers):
        self.providers = list(providers)


class FakeHost:
    def __init__(self, *providers):
        if not providers:
            self.ethereum = None
        elif len(providers) == 1:
            self.ethereum = providers[0]
        else:
            self.ethereum = FakeAggregator(providers)


class FakePairingClient:
    """Pairing-session client; ``approve`` simulates the peer accepting."""

    def __init__(
        self,
        connected: bool = False,
        accounts: Optional[List[str]] = None,
        chain_id: Optional[int] = None,
        peer_meta: Optional[Dict[str, Any]] = None,
        uri: str = "wc:8a5e5bdc-a0e4-4702-ba63-8f1a5655744f@1?bridge=https%3A%2F%2Fbridge&key=41791102",
    ):
        self.uri = uri
        self.connected = connected
        self.accounts = list(accounts or [])
        self.chain_id = chain_id
        self.peer_meta = peer_meta
        self.callbacks: Dict[str, List[Any]] = defaultdict(list)
        self.sent: List[Dict[str, Any]] = []
        self.custom: List[Dict[str, Any]] = []
        self.created = False
        self.killed = False
        self.create_error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None
        self.custom_error: Optional[Exception] = None

    async def create_session(self) -> None:
        if self.create_error is not None:
            raise self.create_error
        self.created = True

    async def kill_session(self) -> None:
        self.killed = True
        self.connected = False

    def on(self, event: str, callback) -> None:
        self.callbacks[event].append(callback)

    def off(self, event: str) -> None:
        self.callbacks.pop(event, None)

    async def send_transaction(self, params: Dict[str, Any]) -> str:
        self.sent.append(params)
        if self.send_error is not None:
            raise self.send_error
        return TX_HASH

    async def send_custom_request(self, payload: Dict[str, Any]) -> Any:
        self.custom.append(payload)
        if self.custom_error is not None:
            raise self.custom_error
        return None

    def emit(self, event: str, error=None, payload=None) -> None:
        for callback in list(self.callbacks.get(event, [])):
            callback(error, payload)

    def approve(self, account: str = SENDER, chain_id: int = 1, peer: str = "Rainbow") -> None:
        self.connected = True
        self.accounts = [account]
        self.chain_id = chain_id
        self.peer_meta = {"name": peer}
        self.emit("connect", None, {
            "params": [{"accounts": [account], "chainId": chain_id, "peerMeta": {"name": peer}}]
        })


# =============================================================================
# Wallet fixtures
# =============================================================================

@pytest.fixture
def provider() -> FakeInjectedProvider:
    return FakeInjectedProvider()


@pytest.fixture
def make_provider():
    return FakeInjectedProvider


@pytest.fixture
def make_host():
    return FakeHost


@pytest.fixture
def pairing_client() -> FakePairingClient:
    return FakePairingClient()


@pytest.fixture
def make_pairing_client():
    return FakePairingClient


# =============================================================================
# Catalog fixtures
# =============================================================================

@pytest.fixture
def ethereum() -> Network:
    return Network(
        name="Ethereum",
        network_code="ethereum",
        symbol="ETH",
        decimals=18,
        identifiers=NetworkIdentifiers(chain_id=1),
        links=NetworkLinks(explorer="https://etherscan.io"),
    )


@pytest.fixture
def polygon() -> Network:
    return Network(
        name="Polygon",
        network_code="polygon",
        symbol="MATIC",
        decimals=18,
        identifiers=NetworkIdentifiers(chain_id=137),
    )


@pytest.fixture
def base_network() -> Network:
    return Network(
        name="Base",
        network_code="base",
        symbol="ETH",
        decimals=18,
        identifiers=NetworkIdentifiers(chain_id=8453),
    )


@pytest.fixture
def eth_asset() -> Asset:
    return Asset(name="Ether", symbol="ETH", decimals=18, network_code="ethereum", type="network")


@pytest.fixture
def usdc_asset() -> Asset:
    return Asset(
        name="USD Coin",
        symbol="USDC",
        decimals=6,
        address=USDC_ADDRESS,
        network_code="ethereum",
        type="asset",
    )


@pytest.fixture
def metamask() -> PaymentMethod:
    return PaymentMethod(name="MetaMask", value="isMetaMask", flow="evm-injected")


@pytest.fixture
def coinbase() -> PaymentMethod:
    return PaymentMethod(name="CoinbaseWallet", value="isCoinbaseWallet", flow="evm-injected")


@pytest.fixture
def rainbow() -> PaymentMethod:
    return PaymentMethod(name="Rainbow", value="isWalletConnect", flow="walletconnect")


@pytest.fixture
def spot() -> PaymentMethod:
    return PaymentMethod(name="Spot", value="isWalletConnect", flow="walletconnect")


@pytest.fixture
def qr_method() -> PaymentMethod:
    return PaymentMethod(name="QR Code", value="qr", flow="qr")
