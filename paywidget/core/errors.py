"""
Error Classification

Errors raised by the wallet-session and transaction engine.

- Connection errors are recorded on the account resource and surfaced as a
  form message.
- Chain-switch errors stay local to the switch step.
- Submission errors are recorded on the transaction resource and re-raised.
- Precondition errors are programmer errors and are never caught here.
"""

from typing import Any, Optional


# EIP-1193 / EIP-3085 provider error codes
USER_REJECTED_CODE = 4001
UNRECOGNIZED_CHAIN_CODE = 4902

NO_PROVIDER_FOUND = "No provider found."
PAIRING_SESSION_ERROR = "WalletConnect Error"
CHAIN_MISSING = "Unrecognized chain ID"
USER_REJECTED_MESSAGES = (
    "User rejected the request.",
    "User denied account authorization",
)


class WidgetError(Exception):
    """Base exception for the payment widget engine."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ProviderRpcError(WidgetError):
    """Error returned by a wallet transport (EIP-1193 shaped)."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data

    @property
    def is_user_rejection(self) -> bool:
        return self.code == USER_REJECTED_CODE or self.message in USER_REJECTED_MESSAGES

    @property
    def is_unrecognized_chain(self) -> bool:
        return self.code == UNRECOGNIZED_CHAIN_CODE or CHAIN_MISSING in (self.message or "")


class WalletConnectionError(WidgetError):
    """Wallet connection could not be established."""

    def __init__(self, message: str = "", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NoProviderFoundError(WalletConnectionError):
    """No injected provider matches the selected payment method."""

    def __init__(self, wallet_name: str):
        super().__init__(NO_PROVIDER_FOUND)
        self.wallet_name = wallet_name

    @property
    def form_message(self) -> str:
        return f"Please download the {self.wallet_name} extension."


class AuthorizationRejectedError(WalletConnectionError):
    """The user rejected the account authorization prompt."""
    pass


class PairingSessionError(WalletConnectionError):
    """The pairing session reported a connect or disconnect failure."""
    pass


class ChainSwitchError(WidgetError):
    """Switching (or adding) the wallet's chain failed."""
    pass


class TransactionSubmitError(WidgetError):
    """Transaction submission through the wallet failed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class PreconditionError(WidgetError):
    """An operation was invoked in a state it must never be invoked in."""
    pass


class MissingAccountError(PreconditionError):
    """A transaction was requested without a connected account."""

    def __init__(self, message: str = "No account"):
        super().__init__(message)


class MissingSelectionError(PreconditionError):
    """Asset, network or payment method has not been selected yet."""
    pass


class InitializationError(WidgetError):
    """Pre-supplied asset or network could not be resolved from the catalog."""
    pass


class CatalogError(WidgetError):
    """Catalog query failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AmountError(ValueError):
    """Amount is not a valid decimal for the asset's precision."""
    pass


def error_message(exc: BaseException) -> str:
    """Best-effort human readable message for an arbitrary exception."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__
