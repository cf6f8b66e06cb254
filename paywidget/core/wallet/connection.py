"""
Wallet Connection Manager

Binds the wizard to the user's wallet. Owns the live transport (injected
provider or pairing session) for its whole lifetime; the store only ever
sees derived state: the account, an opaque provider handle and the chain id.
"""

import asyncio
import itertools
import logging
from typing import Any, Dict, List, Optional, Set

from paywidget.config import settings
from paywidget.core.chains import from_hex
from paywidget.core.errors import (
    NO_PROVIDER_FOUND,
    AuthorizationRejectedError,
    NoProviderFoundError,
    PreconditionError,
    ProviderRpcError,
    WalletConnectionError,
    error_message,
)
from paywidget.core.store import Action, ActionType, MethodKind, Resource, WizardStore, method_kind
from paywidget.types import PaymentMethod, RemoteStatus

from .discovery import discover_providers, locate_provider
from .models import ConnectOutcome
from .pairing import PairingClientFactory, PairingSessionManager
from .transports import InjectedTransport, Transport


logger = logging.getLogger(__name__)

RECONNECT_MESSAGE = "web3_connect"


class WalletConnectionManager:
    """
    Discovers injected wallets and connects the one matching the chosen
    payment method.

    Connecting again (for example on a host ``web3_connect`` message)
    replaces the previous transport, so one account-change event never
    produces more than one dispatch.
    """

    def __init__(
        self,
        store: WizardStore,
        host: Any = None,
        pairing_client_factory: Optional[PairingClientFactory] = None,
        vetted_extensions: Optional[Dict[str, str]] = None,
        memo_enabled_wallets: Optional[List[str]] = None,
    ):
        self.store = store
        self.host = host
        self.vetted_extensions = (
            vetted_extensions if vetted_extensions is not None
            else settings.vetted_wallet_extensions
        )
        self.pairing = (
            PairingSessionManager(store, pairing_client_factory, memo_enabled_wallets)
            if pairing_client_factory is not None else None
        )
        self.available: Dict[str, bool] = {}
        self.method: Optional[PaymentMethod] = None
        self._transport: Optional[InjectedTransport] = None
        self._handle_ids = itertools.count(1)
        self._tasks: Set[asyncio.Task] = set()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def mount(self) -> Dict[str, bool]:
        """Recompute which vetted wallets the host exposes."""
        self.available = discover_providers(self.host, self.vetted_extensions)
        return self.available

    async def unmount(self) -> None:
        """Cancel pending work and release every transport listener."""
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        self._release_injected()
        if self.pairing is not None:
            await self.pairing.stop()
        self.store.invalidate(Resource.ACCOUNT)
        self.store.invalidate(Resource.PROVIDER)

    @property
    def active_transport(self) -> Optional[Transport]:
        if self.method is not None and method_kind(self.method) == MethodKind.PAIRED:
            return self.pairing.transport if self.pairing else None
        return self._transport

    @property
    def memo_enabled(self) -> bool:
        """Pairing wallets on the vetted list may carry a deposit memo."""
        if self.method is None or method_kind(self.method) != MethodKind.PAIRED:
            return False
        return self.pairing is not None and self.pairing.memo_enabled

    # =========================================================================
    # Connection
    # =========================================================================

    async def connect(self, method: PaymentMethod) -> ConnectOutcome:
        """Connect the wallet behind ``method`` and record its account."""
        kind = method_kind(method)
        if kind == MethodKind.DEPOSIT:
            raise PreconditionError(f"Payment method {method.name} does not use a wallet")

        self.method = method
        if kind == MethodKind.PAIRED:
            if self.pairing is None:
                raise PreconditionError("No pairing client configured")
            if self._transport is not None:
                self._release_injected()
                self.store.invalidate(Resource.ACCOUNT)
                self.store.set_status(Resource.ACCOUNT, RemoteStatus.IDLE)
            return await self.pairing.start(method)
        if self.pairing is not None:
            await self.pairing.stop()
        return await self._connect_injected(method)

    async def _connect_injected(self, method: PaymentMethod) -> ConnectOutcome:
        account_token = self.store.begin_request(Resource.ACCOUNT)
        provider_token = self.store.begin_request(Resource.PROVIDER)
        self.store.set_status(Resource.ACCOUNT, RemoteStatus.LOADING)
        self.store.set_status(Resource.PROVIDER, RemoteStatus.LOADING)

        provider = locate_provider(self.host, method.value)
        if provider is None:
            error = NoProviderFoundError(method.name)
            logger.info(f"{NO_PROVIDER_FOUND} ({method.name})")
            self._release_injected()
            self.store.settle(Resource.PROVIDER, provider_token, RemoteStatus.ERROR, NO_PROVIDER_FOUND)
            self.store.settle(Resource.ACCOUNT, account_token, RemoteStatus.ERROR, NO_PROVIDER_FOUND)
            return ConnectOutcome(form_error=error.form_message, error=error)

        # Listeners go in before the first account query
        transport = self._bind_injected(provider, method.name)
        self.store.settle(Resource.PROVIDER, provider_token, RemoteStatus.SUCCESS, transport.handle)

        try:
            accounts = await transport.accounts()
            if not accounts:
                accounts = await transport.request_accounts()
        except ProviderRpcError as e:
            self.store.settle(Resource.ACCOUNT, account_token, RemoteStatus.ERROR, e.message)
            if e.is_user_rejection:
                logger.info(f"Account authorization rejected for {method.name}: {e.message}")
                return ConnectOutcome(
                    form_error=e.message,
                    error=AuthorizationRejectedError(e.message, cause=e),
                )
            logger.error(f"Account request failed for {method.name}: {e.message}")
            return ConnectOutcome(error=WalletConnectionError(e.message, cause=e))
        except Exception as e:
            logger.error(f"Account request failed for {method.name}: {e}", exc_info=True)
            message = error_message(e)
            self.store.settle(Resource.ACCOUNT, account_token, RemoteStatus.ERROR, message)
            return ConnectOutcome(error=WalletConnectionError(message, cause=e))

        if not accounts:
            self.store.settle(Resource.ACCOUNT, account_token, RemoteStatus.IDLE)
            return ConnectOutcome()

        if not self.store.settle(Resource.ACCOUNT, account_token, RemoteStatus.SUCCESS, accounts[0]):
            return ConnectOutcome(account=self.store.state.account_address)

        try:
            await self.refresh_chain_id()
        except Exception as e:
            logger.warning(f"Could not read chain id from {method.name}: {e}")
        return ConnectOutcome(account=accounts[0])

    def _bind_injected(self, provider: Any, name: str) -> InjectedTransport:
        self._release_injected()
        transport = InjectedTransport(provider, name=name, handle_id=next(self._handle_ids))
        transport.on_accounts_changed(lambda accounts: self._on_accounts_changed(transport, accounts))
        transport.on_chain_changed(lambda chain_id: self._on_chain_changed(transport, chain_id))
        transport.on_disconnect(lambda error=None: self._on_disconnect(transport, error))
        self._transport = transport
        return transport

    def _release_injected(self) -> None:
        if self._transport is not None:
            self._transport.close()
            self._transport = None

    def _on_accounts_changed(self, transport: InjectedTransport, accounts: List[str]) -> None:
        if transport is not self._transport:
            return
        token = self.store.begin_request(Resource.ACCOUNT)
        if not self.store.state.account.is_loading:
            self.store.set_status(Resource.ACCOUNT, RemoteStatus.LOADING)
        if accounts:
            self.store.settle(Resource.ACCOUNT, token, RemoteStatus.SUCCESS, accounts[0])
        else:
            self.store.settle(Resource.ACCOUNT, token, RemoteStatus.IDLE)

    def _on_chain_changed(self, transport: InjectedTransport, chain_id: Any) -> None:
        if transport is not self._transport:
            return
        self.store.dispatch(Action(ActionType.SET_PROVIDER_CHAIN_ID, from_hex(chain_id)))

    def _on_disconnect(self, transport: InjectedTransport, error: Optional[BaseException]) -> None:
        if transport is not self._transport:
            return
        logger.info(f"Injected provider {transport.name} disconnected: {error}")
        self.store.dispatch(Action(ActionType.SET_PROVIDER_CHAIN_ID, None))

    async def disconnect(self) -> None:
        """Drop the active wallet binding and clear account-derived state."""
        self._release_injected()
        if self.pairing is not None:
            await self.pairing.stop()
        self.store.invalidate(Resource.ACCOUNT)
        self.store.set_status(Resource.ACCOUNT, RemoteStatus.IDLE)
        self.store.set_status(Resource.PROVIDER, RemoteStatus.IDLE)
        self.store.dispatch(Action(ActionType.SET_PROVIDER_CHAIN_ID, None))

    def handle_message(self, message: Dict[str, Any]) -> Optional[asyncio.Task]:
        """React to a host message; ``web3_connect`` re-runs the connection."""
        if not isinstance(message, dict) or message.get("type") != RECONNECT_MESSAGE:
            return None
        if self.method is None or method_kind(self.method) != MethodKind.INJECTED:
            return None

        task = asyncio.get_running_loop().create_task(self.connect(self.method))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # =========================================================================
    # Chain detection
    # =========================================================================

    async def get_chain_id(self) -> Optional[int]:
        transport = self.active_transport
        if transport is None:
            return None
        return await transport.chain_id()

    async def refresh_chain_id(self) -> Optional[int]:
        chain_id = await self.get_chain_id()
        self.store.dispatch(Action(ActionType.SET_PROVIDER_CHAIN_ID, chain_id))
        return chain_id
