from abc import ABC, abstractmethod
from typing import List, Optional

from paywidget.types import Asset, Network, PaymentMethod


class CatalogProvider(ABC):
    """Read-only source of assets, networks and payment methods"""

    name: str
    timeout_s: int = 30

    @abstractmethod
    async def get_assets_for_org(self, address: Optional[str] = None) -> List[Asset]:
        """Assets enabled for the organization, optionally filtered by contract address"""
        pass

    @abstractmethod
    async def get_networks(self) -> List[Network]:
        """All supported networks"""
        pass

    @abstractmethod
    async def get_network_by_chain_id(self, chain_id: int) -> Optional[Network]:
        """Network for an EVM chain id, if supported"""
        pass

    @abstractmethod
    async def get_methods_for_network(self, chain_id: Optional[int] = None) -> List[PaymentMethod]:
        """Payment methods usable on a network"""
        pass
