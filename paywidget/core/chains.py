"""Chain metadata and EIP-3085 "add chain" parameters."""

from typing import Any, Dict, List, Optional

from paywidget.config import settings
from paywidget.types import Network


CHAIN_METADATA: Dict[int, Dict[str, Any]] = {
    1: {
        'name': 'Ethereum',
        'native_symbol': 'ETH',
        'native_decimals': 18,
        'explorer': 'https://etherscan.io',
    },
    10: {
        'name': 'Optimism',
        'native_symbol': 'ETH',
        'native_decimals': 18,
        'explorer': 'https://optimistic.etherscan.io',
    },
    56: {
        'name': 'BNB Smart Chain',
        'native_symbol': 'BNB',
        'native_decimals': 18,
        'explorer': 'https://bscscan.com',
    },
    137: {
        'name': 'Polygon',
        'native_symbol': 'MATIC',
        'native_decimals': 18,
        'explorer': 'https://polygonscan.com',
    },
    8453: {
        'name': 'Base',
        'native_symbol': 'ETH',
        'native_decimals': 18,
        'explorer': 'https://basescan.org',
    },
    42161: {
        'name': 'Arbitrum',
        'native_symbol': 'ETH',
        'native_decimals': 18,
        'explorer': 'https://arbiscan.io',
    },
    43114: {
        'name': 'Avalanche',
        'native_symbol': 'AVAX',
        'native_decimals': 18,
        'explorer': 'https://snowtrace.io',
    },
}


def to_hex(value: int) -> str:
    """JSON-RPC quantity encoding (no leading zeros)."""
    if value < 0:
        raise ValueError("Quantity must be non-negative")
    return hex(value)


def from_hex(value: Any) -> int:
    if isinstance(value, int):
        return value
    text = str(value)
    if text.lower().startswith("0x"):
        # Empty eth_call results come back as "0x"
        return int(text, 16) if len(text) > 2 else 0
    return int(text)


def build_add_chain_params(
    network: Network,
    rpc_urls: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Build ``wallet_addEthereumChain`` parameters for a catalog network.

    Catalog values win; ``CHAIN_METADATA`` and the configured RPC URLs fill
    the gaps.
    """
    chain_id = network.chain_id
    if chain_id is None:
        raise ValueError(f"Network {network.network_code} has no EVM chain id")

    meta = CHAIN_METADATA.get(chain_id, {})
    explorer = network.links.explorer or meta.get('explorer')

    return {
        "chainId": to_hex(chain_id),
        "chainName": network.name or meta.get('name', ''),
        "nativeCurrency": {
            "name": network.name or meta.get('name', ''),
            "symbol": network.symbol or meta.get('native_symbol', ''),
            "decimals": network.decimals or meta.get('native_decimals', 18),
        },
        "rpcUrls": rpc_urls if rpc_urls is not None else settings.rpc_urls_for(chain_id),
        "blockExplorerUrls": [explorer] if explorer else [],
    }
