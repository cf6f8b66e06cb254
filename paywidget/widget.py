"""
Payment Widget

Composes the wizard store with the wallet, execution and deposit
components, and exposes the operations a rendering layer drives.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from paywidget.core.deposit import DepositAddressGenerator, DepositAddressOrchestrator
from paywidget.core.errors import (
    CatalogError,
    InitializationError,
    MissingAccountError,
    MissingSelectionError,
    TransactionSubmitError,
)
from paywidget.core.execution import (
    TransactionBuilder,
    TransactionPrebuilder,
    TransactionSubmitter,
    TxEstimate,
)
from paywidget.core.store import (
    Action,
    ActionType,
    DepositAddress,
    MethodKind,
    Phase,
    WidgetInputs,
    WizardState,
    WizardStore,
    method_kind,
    plan_steps,
)
from paywidget.core.wallet import (
    ChainSwitchCoordinator,
    ConnectOutcome,
    SwitchOutcome,
    WalletConnectionManager,
    needs_chain_switch,
)
from paywidget.core.wallet.pairing import PairingClientFactory
from paywidget.logging_config import setup_logging
from paywidget.providers import CatalogProvider
from paywidget.types import Asset, Network, PaymentMethod


logger = logging.getLogger(__name__)

# authorize_transaction(from_address, network_code, amount)
TransactionAuthorizer = Callable[[str, str, str], Awaitable[bool]]
# on_success(tx_hash, network_code, address) / on_failure(error, network_code, address)
ResultCallback = Callable[[str, str, Optional[str]], Any]


@dataclass
class WidgetConfig:
    """Host-supplied configuration for one widget instance."""
    generate_deposit_address: DepositAddressGenerator
    authorize_transaction: Optional[TransactionAuthorizer] = None
    on_success: Optional[ResultCallback] = None
    on_failure: Optional[ResultCallback] = None
    theme: Optional[str] = None
    colors: Optional[Dict[str, str]] = None
    fiat: Optional[str] = None
    slug: Optional[str] = None                  # "<network_code>:<asset_symbol>"
    address: Optional[str] = None               # Token contract to preselect
    network_code: Optional[str] = None
    log_level: Optional[str] = None             # Configure logging on create()


async def resolve_initial_selection(
    config: WidgetConfig,
    catalog: CatalogProvider,
) -> Tuple[Optional[Asset], Optional[Network]]:
    """
    Resolve the preselected asset and network from the catalog.

    ``address`` + ``network_code`` take precedence over ``slug``.

    Raises:
        InitializationError: a preselection was requested but could not be
            found, or the catalog could not be queried
    """
    try:
        if config.address and config.network_code:
            networks = await catalog.get_networks()
            assets = await catalog.get_assets_for_org(config.address)
            network = next((n for n in networks if n.network_code == config.network_code), None)
            asset = next(
                (
                    a for a in assets
                    if a.address == config.address and a.network_code == config.network_code
                ),
                None,
            )
            if network is None or asset is None:
                raise InitializationError("We had trouble loading the asset or network selected.")
            return asset, network

        if config.slug:
            network_code, _, symbol = config.slug.partition(":")
            if not symbol:
                return None, None
            assets = await catalog.get_assets_for_org()
            network = None
            if network_code:
                networks = await catalog.get_networks()
                network = next((n for n in networks if n.network_code == network_code), None)
                if network is None:
                    raise InitializationError(f"Unknown network {network_code}")
            asset = next(
                (
                    a for a in assets
                    if a.symbol.lower() == symbol.lower()
                    and (network is None or a.network_code == network.network_code)
                ),
                None,
            )
            if asset is None:
                raise InitializationError(f"Unknown asset {symbol}")
            return asset, network
    except CatalogError as e:
        logger.error(f"Failed to initialize widget selection: {e.message}")
        raise InitializationError(f"Failed to initialize the widget: {e.message}") from e

    return None, None


async def _fire(callback: Optional[ResultCallback], *args: Any) -> None:
    if callback is None:
        return
    try:
        result = callback(*args)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.error(f"Result callback {getattr(callback, '__name__', callback)} failed: {e}")


class PaymentWidget:
    """
    One widget instance: a store plus the components that act on it.

    Components never share the store implicitly; each receives it here.
    """

    def __init__(
        self,
        config: WidgetConfig,
        asset: Optional[Asset] = None,
        network: Optional[Network] = None,
        host: Any = None,
        pairing_client_factory: Optional[PairingClientFactory] = None,
        builder: Optional[TransactionBuilder] = None,
    ):
        self.config = config
        self.store = WizardStore(WidgetInputs(
            asset=asset,
            network=network,
            theme=config.theme,
            colors=config.colors,
            fiat=config.fiat,
            slug=config.slug,
        ))
        self.connection = WalletConnectionManager(self.store, host, pairing_client_factory)
        self.chain_switch = ChainSwitchCoordinator(self._active_transport)
        builder = builder or TransactionBuilder()
        self.submitter = TransactionSubmitter(self.store, self._active_transport, builder)
        self.prebuilder = TransactionPrebuilder(self.store, self._active_transport, builder)
        self.deposit = DepositAddressOrchestrator(self.store, config.generate_deposit_address)

    @classmethod
    async def create(
        cls,
        config: WidgetConfig,
        catalog: CatalogProvider,
        host: Any = None,
        pairing_client_factory: Optional[PairingClientFactory] = None,
    ) -> "PaymentWidget":
        """Resolve the preselection, then build a mounted widget."""
        if config.log_level:
            setup_logging(config.log_level)
        asset, network = await resolve_initial_selection(config, catalog)
        widget = cls(config, asset=asset, network=network, host=host,
                     pairing_client_factory=pairing_client_factory)
        widget.connection.mount()
        return widget

    def _active_transport(self):
        return self.connection.active_transport

    @property
    def state(self) -> WizardState:
        return self.store.state

    # =========================================================================
    # Navigation
    # =========================================================================

    def go_to(self, phase: Phase) -> WizardState:
        if self.state.phase == Phase.QR_CODE and phase != Phase.QR_CODE:
            self.deposit.teardown()
        return self.store.set_step(phase)

    def select_asset(self, asset: Asset) -> WizardState:
        self.store.dispatch(Action(ActionType.SET_ASSET, asset))
        return self.go_to(Phase.NETWORK_SELECTION)

    def select_network(self, network: Network) -> WizardState:
        self.store.dispatch(Action(ActionType.SET_NETWORK, network))
        return self.go_to(Phase.PAYMENT_METHOD)

    async def select_method(self, method: PaymentMethod) -> ConnectOutcome:
        """Choose a payment method and run whatever it needs to start."""
        if self.state.asset is None or self.state.network is None:
            raise MissingSelectionError("Asset and network must be selected first")

        self.store.dispatch(Action(ActionType.SET_PAYMENT_METHOD, method))
        kind = method_kind(method)

        if kind == MethodKind.DEPOSIT:
            self.store.dispatch(Action(ActionType.SET_STEPS, plan_steps(method)))
            self.go_to(Phase.QR_CODE)
            self.deposit.start()
            return ConnectOutcome()

        if kind == MethodKind.PAIRED:
            self.store.dispatch(Action(ActionType.SET_STEPS, plan_steps(method)))
            self.go_to(Phase.WALLET_CONNECT)
            return await self.connection.connect(method)

        outcome = await self.connection.connect(method)
        if not outcome.connected:
            return outcome

        switch = needs_chain_switch(self.state)
        self.store.dispatch(Action(ActionType.SET_STEPS, plan_steps(method, switch)))
        self.go_to(Phase.SWITCH_CHAIN if switch else Phase.ENTER_AMOUNT)
        return outcome

    async def switch_chain(self) -> SwitchOutcome:
        """Switch the wallet to the selected network, then continue."""
        network = self.state.network
        if network is None:
            raise MissingSelectionError("No network selected")

        outcome = await self.chain_switch.request_switch(network)
        if not outcome.switched:
            return outcome
        try:
            await self.connection.refresh_chain_id()
        except Exception as e:
            logger.warning(f"Could not confirm chain after switch: {e}")
        if not needs_chain_switch(self.state) and Phase.ENTER_AMOUNT in self.state.steps:
            self.go_to(Phase.ENTER_AMOUNT)
        return outcome

    def handle_message(self, message: Dict[str, Any]):
        return self.connection.handle_message(message)

    # =========================================================================
    # Payment
    # =========================================================================

    async def _deposit_address(self) -> Optional[DepositAddress]:
        envelope = self.state.deposit_address
        if envelope.is_success:
            return envelope.data
        return await self.deposit.generate(memo_enabled=self.connection.memo_enabled)

    async def estimate(self, amount: str) -> Optional[TxEstimate]:
        deposit = await self._deposit_address()
        if deposit is None:
            return None
        return await self.prebuilder.prebuild(amount, deposit.address, deposit.memo)

    async def confirm_payment(self, amount: str) -> Optional[str]:
        """
        Authorize, submit and report a payment of ``amount``.

        Returns the transaction hash, or None when the payment was declined
        by the authorization gate or failed.
        """
        state = self.state
        account = state.account_address
        if account is None:
            raise MissingAccountError()
        if state.network is None:
            raise MissingSelectionError("No network selected")
        network_code = state.network.network_code

        if self.config.authorize_transaction is not None:
            authorized = await self.config.authorize_transaction(account, network_code, amount)
            if not authorized:
                logger.info(f"Transaction of {amount} from {account} was not authorized")
                return None

        deposit = await self._deposit_address()
        if deposit is None:
            await _fire(self.config.on_failure, "Error generating deposit address.", network_code, account)
            return None

        try:
            tx_hash = await self.submitter.send_transaction(amount, deposit.address, deposit.memo)
        except TransactionSubmitError as e:
            await _fire(self.config.on_failure, e.message, network_code, account)
            self.go_to(Phase.RESULT)
            return None

        await _fire(self.config.on_success, tx_hash, network_code, account)
        self.go_to(Phase.RESULT)
        return tx_hash

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start_over(self) -> WizardState:
        """Drop every resource and return to the first unanswered phase."""
        self.deposit.teardown()
        await self.connection.disconnect()
        return self.store.reset()

    async def close(self) -> None:
        self.deposit.teardown()
        await self.connection.unmount()
