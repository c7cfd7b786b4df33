"""
Configuration management for walletsend.

Supports configuration via environment variables and .env files.
"""

from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Cluster(str, Enum):
    """Solana clusters."""
    MAINNET_BETA = "mainnet-beta"
    DEVNET = "devnet"
    TESTNET = "testnet"
    LOCALNET = "localnet"


class WalletSendConfig(BaseSettings):
    """
    Configuration settings for walletsend.

    All settings can be configured via environment variables with the WALLETSEND_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="WALLETSEND_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Network settings
    cluster: Cluster = Field(
        default=Cluster.DEVNET,
        description="Solana cluster to connect to"
    )
    rpc_url: Optional[str] = Field(
        default=None,
        description="Custom JSON-RPC endpoint URL (overrides the cluster default)"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout for JSON-RPC calls"
    )
    commitment: Optional[str] = Field(
        default=None,
        description="Commitment level passed to getLatestBlockhash"
    )
    skip_preflight: bool = Field(
        default=False,
        description="Skip the node's preflight simulation on sendTransaction"
    )
    preflight_commitment: Optional[str] = Field(
        default=None,
        description="Commitment level used for preflight simulation"
    )

    # Wallet SDK settings
    signer_timeout_seconds: Optional[float] = Field(
        default=300.0,
        gt=0,
        description="Maximum time to wait for a wallet SDK callback (None waits forever)"
    )
    wallet_keypair_path: Optional[str] = Field(
        default=None,
        description="Path to a solana-keygen JSON keypair for the development wallet"
    )

    # Transfer defaults
    default_recipient: str = Field(
        default="6xEeDTksyAhBz7QBgzPmYxJN2zbmT7twx5rr1ejnaona",
        description="Recipient used when none is given"
    )
    default_lamports: int = Field(
        default=1_000_000,
        gt=0,
        description="Transfer amount in lamports used when none is given"
    )
    default_reason: str = Field(
        default="Transfer 0.001 SOL to recipient",
        description="Reason shown to the user by the wallet SDK"
    )

    explorer_base_url: str = Field(
        default="https://explorer.solana.com",
        description="Block explorer used for transaction links"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @property
    def endpoint_url(self) -> str:
        """Get the JSON-RPC URL based on cluster."""
        if self.rpc_url:
            return self.rpc_url

        cluster_urls = {
            Cluster.MAINNET_BETA: "https://api.mainnet-beta.solana.com",
            Cluster.DEVNET: "https://api.devnet.solana.com",
            Cluster.TESTNET: "https://api.testnet.solana.com",
            Cluster.LOCALNET: "http://127.0.0.1:8899",
        }
        return cluster_urls[self.cluster]

    def explorer_url(self, transaction_id: str) -> str:
        """Get the explorer link for a transaction signature."""
        url = f"{self.explorer_base_url.rstrip('/')}/tx/{transaction_id}"
        if self.cluster == Cluster.MAINNET_BETA:
            return url
        if self.cluster == Cluster.LOCALNET:
            return f"{url}?cluster=custom&customUrl={self.endpoint_url}"
        return f"{url}?cluster={self.cluster.value}"


# Global config instance
_config: Optional[WalletSendConfig] = None


def get_config() -> WalletSendConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = WalletSendConfig()
    return _config


def set_config(config: WalletSendConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
