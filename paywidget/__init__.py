"""
paywidget

Wallet-session and transaction engine behind an embeddable crypto payment
widget: a wizard store, wallet transports, transfer building and deposit
address generation.
"""

from .widget import PaymentWidget, WidgetConfig, resolve_initial_selection

__version__ = "0.1.0"

__all__ = [
    "PaymentWidget",
    "WidgetConfig",
    "resolve_initial_selection",
]
