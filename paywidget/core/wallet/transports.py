"""
Wallet transports.

A transport is how the widget reaches the user's wallet. There are two
variants behind one interface:

- ``InjectedTransport`` wraps an in-page EIP-1193 provider object
- ``PairedTransport`` wraps a remote pairing-session client

Orchestration code (connection, chain switch, submission, prebuild) is
written once against ``Transport``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

from paywidget.core.chains import from_hex, to_hex
from paywidget.core.execution.models import TxParams
from paywidget.core.store import ProviderHandle, TransportKind


logger = logging.getLogger(__name__)

AccountsListener = Callable[[List[str]], None]
ChainListener = Callable[[Any], None]
DisconnectListener = Callable[[Optional[BaseException]], None]


@runtime_checkable
class Eip1193Provider(Protocol):
    """Host-side injected provider (window.ethereum and its sub-providers)."""

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any: ...

    def on(self, event: str, listener: Callable[..., Any]) -> None: ...

    def remove_listener(self, event: str, listener: Callable[..., Any]) -> None: ...


@runtime_checkable
class PairingClient(Protocol):
    """Remote pairing-session client (URI handshake, approved on a peer device)."""

    uri: str
    connected: bool
    accounts: List[str]
    chain_id: Optional[int]
    peer_meta: Optional[Dict[str, Any]]

    async def create_session(self) -> None: ...

    async def kill_session(self) -> None: ...

    def on(self, event: str, callback: Callable[[Optional[BaseException], Any], None]) -> None: ...

    def off(self, event: str) -> None: ...

    async def send_transaction(self, params: Dict[str, Any]) -> str: ...

    async def send_custom_request(self, payload: Dict[str, Any]) -> Any: ...


class Transport(ABC):
    """Capability set shared by both wallet transport variants."""

    kind: TransportKind

    def __init__(self, name: str, handle_id: int):
        self.name = name
        self.handle_id = handle_id
        self.closed = False

    @property
    def handle(self) -> ProviderHandle:
        return ProviderHandle(kind=self.kind, name=self.name, handle_id=self.handle_id)

    @abstractmethod
    async def accounts(self) -> List[str]:
        """Accounts the wallet has already authorized."""
        pass

    @abstractmethod
    async def request_accounts(self) -> List[str]:
        """Ask the wallet for authorization; may prompt the user."""
        pass

    @abstractmethod
    async def chain_id(self) -> Optional[int]:
        pass

    @abstractmethod
    async def send_transaction(self, params: TxParams) -> str:
        pass

    @abstractmethod
    async def rpc(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Generic JSON-RPC call routed through the wallet."""
        pass

    @abstractmethod
    def on_accounts_changed(self, listener: AccountsListener) -> None:
        pass

    @abstractmethod
    def on_chain_changed(self, listener: ChainListener) -> None:
        pass

    @abstractmethod
    def on_disconnect(self, listener: DisconnectListener) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        """Drop every listener this transport registered."""
        pass

    async def switch_chain(self, chain_id: int) -> None:
        await self.rpc("wallet_switchEthereumChain", [{"chainId": to_hex(chain_id)}])

    async def add_chain(self, params: Dict[str, Any]) -> None:
        await self.rpc("wallet_addEthereumChain", [params])


class InjectedTransport(Transport):
    """EIP-1193 provider injected into the host page."""

    kind = TransportKind.INJECTED

    def __init__(self, provider: Eip1193Provider, name: str, handle_id: int):
        super().__init__(name, handle_id)
        self.provider = provider
        # One active listener per event
        self._listeners: Dict[str, Callable[..., Any]] = {}

    def _subscribe(self, event: str, listener: Callable[..., Any]) -> None:
        previous = self._listeners.pop(event, None)
        if previous is not None:
            self.provider.remove_listener(event, previous)
        self._listeners[event] = listener
        self.provider.on(event, listener)

    async def rpc(self, method: str, params: Optional[List[Any]] = None) -> Any:
        return await self.provider.request(method, params or [])

    async def accounts(self) -> List[str]:
        return list(await self.rpc("eth_accounts") or [])

    async def request_accounts(self) -> List[str]:
        return list(await self.rpc("eth_requestAccounts") or [])

    async def chain_id(self) -> Optional[int]:
        result = await self.rpc("eth_chainId")
        return from_hex(result) if result is not None else None

    async def send_transaction(self, params: TxParams) -> str:
        return await self.rpc("eth_sendTransaction", [params.to_dict()])

    def on_accounts_changed(self, listener: AccountsListener) -> None:
        self._subscribe("accountsChanged", listener)

    def on_chain_changed(self, listener: ChainListener) -> None:
        self._subscribe("chainChanged", listener)

    def on_disconnect(self, listener: DisconnectListener) -> None:
        self._subscribe("disconnect", listener)

    def close(self) -> None:
        for event, listener in self._listeners.items():
            try:
                self.provider.remove_listener(event, listener)
            except Exception as e:
                logger.warning(f"Failed to remove {event} listener from {self.name}: {e}")
        self._listeners.clear()
        self.closed = True


class PairedTransport(Transport):
    """Pairing-session client; requests travel over the session channel."""

    kind = TransportKind.PAIRED

    def __init__(self, client: PairingClient, name: str, handle_id: int):
        super().__init__(name, handle_id)
        self.client = client
        self._events: List[str] = []
        self._accounts_listener: Optional[AccountsListener] = None
        self._chain_listener: Optional[ChainListener] = None

    def subscribe(self, event: str, callback: Callable[[Optional[BaseException], Any], None]) -> None:
        """Register ``callback`` for a session event, replacing any earlier one."""
        if event in self._events:
            self.client.off(event)
        else:
            self._events.append(event)
        self.client.on(event, callback)

    async def rpc(self, method: str, params: Optional[List[Any]] = None) -> Any:
        return await self.client.send_custom_request({
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
        })

    async def accounts(self) -> List[str]:
        return list(self.client.accounts or [])

    async def request_accounts(self) -> List[str]:
        # Authorization happens out-of-band when the peer approves the session
        return list(self.client.accounts or [])

    async def chain_id(self) -> Optional[int]:
        return self.client.chain_id

    async def send_transaction(self, params: TxParams) -> str:
        return await self.client.send_transaction(params.to_dict())

    def _on_session_update(self, error: Optional[BaseException], payload: Any) -> None:
        if error is not None:
            logger.warning(f"Session update error from {self.name}: {error}")
            return
        params = session_params(payload)
        if self._accounts_listener is not None and "accounts" in params:
            self._accounts_listener(list(params.get("accounts") or []))
        if self._chain_listener is not None and params.get("chainId") is not None:
            self._chain_listener(params["chainId"])

    def on_accounts_changed(self, listener: AccountsListener) -> None:
        self._accounts_listener = listener
        self.subscribe("session_update", self._on_session_update)

    def on_chain_changed(self, listener: ChainListener) -> None:
        self._chain_listener = listener
        self.subscribe("session_update", self._on_session_update)

    def on_disconnect(self, listener: DisconnectListener) -> None:
        self.subscribe("disconnect", lambda error, payload=None: listener(error))

    def close(self) -> None:
        for event in self._events:
            try:
                self.client.off(event)
            except Exception as e:
                logger.warning(f"Failed to remove {event} callback from {self.name}: {e}")
        self._events.clear()
        self._accounts_listener = None
        self._chain_listener = None
        self.closed = True


def session_params(payload: Any) -> Dict[str, Any]:
    """First entry of a pairing-session event's ``params`` list."""
    if not isinstance(payload, dict):
        return {}
    params = payload.get("params") or [{}]
    first = params[0] if params else {}
    return first if isinstance(first, dict) else {}
