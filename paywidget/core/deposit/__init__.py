from .orchestrator import DepositAddressGenerator, DepositAddressOrchestrator

__all__ = [
    "DepositAddressGenerator",
    "DepositAddressOrchestrator",
]
