"""
Pairing Session Manager

Drives a remote pairing session: the widget shows a URI (QR code or deep
link), the user approves it on another device, and the session client
reports ``connect`` / ``disconnect`` events back.
"""

import logging
from typing import Any, Callable, List, Optional

from paywidget.config import settings
from paywidget.core.chains import from_hex
from paywidget.core.errors import PAIRING_SESSION_ERROR, PairingSessionError
from paywidget.core.store import Action, ActionType, Phase, Resource, WizardStore
from paywidget.types import PaymentMethod, RemoteStatus

from .models import ConnectOutcome
from .transports import PairedTransport, PairingClient, session_params


logger = logging.getLogger(__name__)

PairingClientFactory = Callable[[], PairingClient]


class PairingSessionManager:
    """
    Owns at most one pairing session at a time.

    Every session gets a sequence number; events carrying an older number
    belong to a discarded session and are ignored.
    """

    def __init__(
        self,
        store: WizardStore,
        client_factory: PairingClientFactory,
        memo_enabled_wallets: Optional[List[str]] = None,
    ):
        self.store = store
        self.client_factory = client_factory
        self.memo_enabled_wallets = (
            memo_enabled_wallets if memo_enabled_wallets is not None
            else settings.memo_enabled_wallets
        )
        self.transport: Optional[PairedTransport] = None
        self.method: Optional[PaymentMethod] = None
        self.peer_name: Optional[str] = None
        self.form_error: Optional[str] = None
        self.error: Optional[PairingSessionError] = None
        self._session = 0

    @property
    def client(self) -> Optional[PairingClient]:
        return self.transport.client if self.transport else None

    @property
    def uri(self) -> Optional[str]:
        client = self.client
        return client.uri if client is not None else None

    @property
    def memo_enabled(self) -> bool:
        """Whether the paired wallet is trusted to carry a memo."""
        names = {self.peer_name, self.method.name if self.method else None}
        return any(name in self.memo_enabled_wallets for name in names if name)

    async def start(self, method: PaymentMethod) -> ConnectOutcome:
        """
        Open a fresh session for ``method``, discarding any previous one.

        Returns the connected account when the client already holds an
        approved session, otherwise the URI the user must approve.
        """
        await self.stop()

        self._session += 1
        session = self._session
        self.method = method
        self.form_error = None
        self.error = None

        client = self.client_factory()
        transport = PairedTransport(client, name=method.name, handle_id=session)
        self.transport = transport

        transport.subscribe("connect", lambda error, payload=None: self.connect(error, payload, session=session))
        transport.subscribe("disconnect", lambda error=None, payload=None: self.disconnect(error, session=session))
        transport.on_accounts_changed(lambda accounts: self._on_accounts_changed(session, accounts))
        transport.on_chain_changed(lambda chain: self._on_chain_changed(session, chain))

        provider_token = self.store.begin_request(Resource.PROVIDER)
        self.store.set_status(Resource.PROVIDER, RemoteStatus.LOADING)
        self.store.settle(Resource.PROVIDER, provider_token, RemoteStatus.SUCCESS, transport.handle)

        if client.connected:
            logger.info(f"Reusing approved pairing session for {method.name}")
            self.connect(None, {
                "params": [{
                    "accounts": client.accounts,
                    "chainId": client.chain_id,
                    "peerMeta": client.peer_meta,
                }]
            }, session=session)
            return ConnectOutcome(
                account=self.store.state.account_address,
                form_error=self.form_error,
                error=self.error,
            )

        try:
            await client.create_session()
        except Exception as e:
            logger.error(f"Failed to create pairing session for {method.name}: {e}")
            error = PairingSessionError(PAIRING_SESSION_ERROR, cause=e)
            if session == self._session:
                self._fail_account(error)
            return ConnectOutcome(form_error=PAIRING_SESSION_ERROR, error=error)

        return ConnectOutcome(uri=client.uri)

    def _fail_account(self, error: PairingSessionError) -> None:
        self.error = error
        self.form_error = error.message
        token = self.store.begin_request(Resource.ACCOUNT)
        self.store.set_status(Resource.ACCOUNT, RemoteStatus.LOADING)
        self.store.settle(Resource.ACCOUNT, token, RemoteStatus.ERROR, error.message)

    def _is_stale(self, session: Optional[int], event: str) -> bool:
        if session is not None and session != self._session:
            logger.info(f"Ignoring {event} from discarded pairing session {session}")
            return True
        return False

    def connect(self, error: Optional[BaseException], payload: Any = None, session: Optional[int] = None) -> None:
        """Handle the session's ``connect`` event."""
        if self._is_stale(session, "connect"):
            return

        token = self.store.begin_request(Resource.ACCOUNT)
        self.store.set_status(Resource.ACCOUNT, RemoteStatus.LOADING)

        if error is not None:
            logger.warning(f"Pairing session connect failed: {error}")
            self.error = PairingSessionError(PAIRING_SESSION_ERROR, cause=error)
            self.form_error = PAIRING_SESSION_ERROR
            self.store.settle(Resource.ACCOUNT, token, RemoteStatus.ERROR, PAIRING_SESSION_ERROR)
            return

        params = session_params(payload)
        accounts = params.get("accounts") or []
        self.peer_name = (params.get("peerMeta") or {}).get("name")

        chain_id = params.get("chainId")
        if chain_id is not None:
            self.store.dispatch(Action(ActionType.SET_PROVIDER_CHAIN_ID, from_hex(chain_id)))

        if not accounts:
            self.store.settle(Resource.ACCOUNT, token, RemoteStatus.IDLE)
            return

        self.form_error = None
        self.error = None
        self.store.settle(Resource.ACCOUNT, token, RemoteStatus.SUCCESS, accounts[0])
        if Phase.ENTER_AMOUNT in self.store.state.steps:
            self.store.set_step(Phase.ENTER_AMOUNT)

    def disconnect(self, error: Optional[BaseException] = None, session: Optional[int] = None) -> None:
        """Handle the session's ``disconnect`` event."""
        if self._is_stale(session, "disconnect"):
            return

        if error is not None:
            logger.warning(f"Pairing session disconnected with error: {error}")
            self._fail_account(PairingSessionError(PAIRING_SESSION_ERROR, cause=error))
        else:
            self.store.invalidate(Resource.ACCOUNT)
            self.store.set_status(Resource.ACCOUNT, RemoteStatus.IDLE)

        self.store.set_status(Resource.PROVIDER, RemoteStatus.IDLE)
        self.store.dispatch(Action(ActionType.SET_PROVIDER_CHAIN_ID, None))
        if Phase.PAYMENT_METHOD in self.store.state.steps:
            self.store.set_step(Phase.PAYMENT_METHOD)

        self._release()

    def _on_accounts_changed(self, session: int, accounts: List[str]) -> None:
        if self._is_stale(session, "session_update"):
            return
        token = self.store.begin_request(Resource.ACCOUNT)
        if not self.store.state.account.is_loading:
            self.store.set_status(Resource.ACCOUNT, RemoteStatus.LOADING)
        if accounts:
            self.store.settle(Resource.ACCOUNT, token, RemoteStatus.SUCCESS, accounts[0])
        else:
            self.store.settle(Resource.ACCOUNT, token, RemoteStatus.IDLE)

    def _on_chain_changed(self, session: int, chain_id: Any) -> None:
        if self._is_stale(session, "session_update"):
            return
        self.store.dispatch(Action(ActionType.SET_PROVIDER_CHAIN_ID, from_hex(chain_id)))

    def _release(self) -> None:
        if self.transport is not None:
            self.transport.close()
        self.transport = None
        self.peer_name = None
        self._session += 1

    async def stop(self) -> None:
        """Kill the current session; later events from it are ignored."""
        transport = self.transport
        if transport is None:
            return
        self._release()
        if transport.client.connected:
            try:
                await transport.client.kill_session()
            except Exception as e:
                logger.warning(f"Failed to kill pairing session: {e}")
