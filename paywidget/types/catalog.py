"""Catalog entities returned by the query service (assets, networks, methods)."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Logo(CatalogModel):
    png: Optional[str] = None
    svg: Optional[str] = None


class NetworkIdentifiers(CatalogModel):
    chain_id: Optional[int] = Field(default=None, description="EIP-155 chain id, EVM networks only")


class NetworkLinks(CatalogModel):
    explorer: Optional[str] = None


class Network(CatalogModel):
    name: str = Field(description="Display name, e.g. Ethereum")
    network_code: str = Field(description="Stable network code, e.g. ethereum")
    network_name: Optional[str] = None
    symbol: str = Field(default="", description="Native currency symbol")
    decimals: int = Field(default=18, description="Native currency decimals")
    identifiers: NetworkIdentifiers = Field(default_factory=NetworkIdentifiers)
    links: NetworkLinks = Field(default_factory=NetworkLinks)
    logo: Optional[Logo] = None

    @property
    def chain_id(self) -> Optional[int]:
        return self.identifiers.chain_id


class Asset(CatalogModel):
    name: str
    symbol: str
    decimals: int = 18
    address: Optional[str] = Field(
        default=None,
        description="Token contract address; None for the network's native asset",
    )
    network_code: Optional[str] = None
    type: Optional[str] = Field(default=None, description="asset or network")
    price: Optional[float] = None
    logo: Optional[Logo] = None

    @property
    def is_token(self) -> bool:
        return bool(self.address)


class WalletConnectLinks(CatalogModel):
    native: Optional[str] = None
    universal: Optional[str] = None


class PaymentMethod(CatalogModel):
    name: str
    value: Optional[str] = Field(
        default=None,
        description="Capability flag (isMetaMask), isWalletConnect, or qr",
    )
    flow: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    logo: Optional[Logo] = None
    wallet_connect: Optional[WalletConnectLinks] = None
    enabled: bool = True
    supported_chains: List[int] = Field(default_factory=list)
