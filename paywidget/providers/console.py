"""Async GraphQL client for the catalog console API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..config import settings
from ..core.errors import CatalogError
from ..types import Asset, Network, PaymentMethod
from .base import CatalogProvider


logger = logging.getLogger(__name__)


NETWORK_FIELDS = """
    name
    networkCode
    networkName
    symbol
    decimals
    identifiers { chainId }
    links { explorer }
    logo { png svg }
"""

GET_NETWORKS = f"""
query GetNetworks {{
  networks {{{NETWORK_FIELDS}  }}
}}
"""

GET_NETWORK_BY_CHAIN_ID = f"""
query GetNetworkByChainId($chainId: Int!) {{
  networkByChainId(chainId: $chainId) {{{NETWORK_FIELDS}  }}
}}
"""

GET_ASSETS_FOR_ORG = """
query GetAssetsForOrg($address: String) {
  assetsForOrganization(address: $address) {
    name
    symbol
    decimals
    address
    networkCode
    type
    price { price }
    logo { png svg }
  }
}
"""

GET_METHODS_FOR_NETWORK = """
query GetMethodsForNetwork($chainId: Int) {
  methodsForNetwork(chainId: $chainId) {
    name
    value
    flow
    description
    icon
    logo { png svg }
    walletConnect { native universal }
    enabled
  }
}
"""


class ConsoleClient(CatalogProvider):
    """Thin wrapper around the console GraphQL endpoint."""

    name = "console"

    def __init__(
        self,
        *,
        api_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        timeout_s: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_url = api_url or settings.console_api_url
        self.anon_key = anon_key if anon_key is not None else settings.console_anon_key
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
        }
        if self.anon_key:
            headers["authorization"] = f"Bearer {self.anon_key}"
        return headers

    async def _query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = {"query": query, "variables": variables or {}}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                response = await client.post(self.api_url, json=payload, headers=self._headers())
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(f"Catalog query failed with HTTP {exc.response.status_code}")
            raise CatalogError(
                f"Catalog request failed: HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            logger.error(f"Catalog request error: {exc}")
            raise CatalogError(f"Catalog request failed: {exc}") from exc
        except ValueError as exc:
            raise CatalogError("Catalog returned a non-JSON response") from exc

        errors = body.get("errors")
        if errors:
            message = "; ".join(str(err.get("message", err)) for err in errors)
            logger.error(f"Catalog query returned errors: {message}")
            raise CatalogError(message)
        return body.get("data") or {}

    @staticmethod
    def _parse(model, items: Optional[List[Any]]) -> List[Any]:
        parsed = []
        for item in items or []:
            if item is None:
                continue
            try:
                parsed.append(model.model_validate(item))
            except ValidationError as exc:
                raise CatalogError(f"Malformed {model.__name__} in catalog response: {exc}") from exc
        return parsed

    async def get_networks(self) -> List[Network]:
        data = await self._query(GET_NETWORKS)
        return self._parse(Network, data.get("networks"))

    async def get_network_by_chain_id(self, chain_id: int) -> Optional[Network]:
        data = await self._query(GET_NETWORK_BY_CHAIN_ID, {"chainId": chain_id})
        found = self._parse(Network, [data.get("networkByChainId")])
        return found[0] if found else None

    async def get_assets_for_org(self, address: Optional[str] = None) -> List[Asset]:
        data = await self._query(GET_ASSETS_FOR_ORG, {"address": address})
        items = []
        for item in data.get("assetsForOrganization") or []:
            if isinstance(item, dict) and isinstance(item.get("price"), dict):
                item = {**item, "price": item["price"].get("price")}
            items.append(item)
        return self._parse(Asset, items)

    async def get_methods_for_network(self, chain_id: Optional[int] = None) -> List[PaymentMethod]:
        data = await self._query(GET_METHODS_FOR_NETWORK, {"chainId": chain_id})
        methods = self._parse(PaymentMethod, data.get("methodsForNetwork"))
        return [method for method in methods if method.enabled]
