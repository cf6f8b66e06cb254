from pathlib import Path
from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Catalog service (assets, networks, payment methods)
    console_api_url: str = Field(
        default="https://console.map3.xyz/graphql",
        description="GraphQL endpoint of the catalog service",
    )
    console_anon_key: str = Field(default="", description="Anonymous key sent as bearer token")
    request_timeout_seconds: int = Field(default=30, description="Catalog request timeout")

    # Gas heuristics
    native_transfer_gas: int = Field(default=21_000, description="Gas limit for native transfers")
    token_transfer_gas: int = Field(default=100_000, description="Gas limit for ERC-20 transfers")
    memo_gas_per_byte: int = Field(default=16, description="Extra gas per non-zero calldata byte of a memo")

    # Wallets
    memo_enabled_wallets: List[str] = Field(
        default_factory=lambda: ["Rainbow"],
        description="Pairing-session peer names trusted to carry a memo",
    )
    vetted_wallet_extensions: Dict[str, str] = Field(
        default_factory=lambda: {
            "isMetaMask": "MetaMask",
            "isCoinbaseWallet": "CoinbaseWallet",
        },
        description="Injected provider capability flag -> wallet kind name",
    )
    chain_rpc_urls: Dict[int, List[str]] = Field(
        default_factory=lambda: {
            1: ["https://cloudflare-eth.com"],
            10: ["https://mainnet.optimism.io"],
            56: ["https://bsc-dataseed.binance.org"],
            137: ["https://polygon-rpc.com"],
            8453: ["https://mainnet.base.org"],
            42161: ["https://arb1.arbitrum.io/rpc"],
            43114: ["https://api.avax.network/ext/bc/C/rpc"],
        },
        description="Default RPC URLs per chain id for wallet_addEthereumChain",
    )

    @property
    def has_console_key(self) -> bool:
        return bool(self.console_anon_key)

    def rpc_urls_for(self, chain_id: int) -> List[str]:
        return list(self.chain_rpc_urls.get(chain_id, []))


# Global settings instance
settings = Settings()
