"""Application configuration using pydantic-settings.

Every value the transfer pipeline depends on (signer key, RPC candidates,
gas reserve, fiat rate) is injected from the environment.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RPC_URLS = ",".join([
    "https://ethereum-rpc.publicnode.com",
    "https://eth.drpc.org",
    "https://rpc.ankr.com/eth",
    "https://eth.llamarpc.com",
    "https://1rpc.io/eth",
    "https://cloudflare-eth.com",
])


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("PORT", "API_PORT", "api_port"),
        description="API server port",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    cors_origins: str = Field(default="*", description="Comma-separated CORS origins")

    # ======================
    # Signer
    # ======================
    treasury_private_key: Optional[str] = Field(
        default=None, description="Hex private key of the custodial wallet"
    )

    # ======================
    # Chain RPC Endpoints
    # ======================
    rpc_urls: str = Field(
        default=DEFAULT_RPC_URLS,
        description="Comma-separated RPC URLs, tried in order",
    )
    chain_id: int = Field(default=1, description="Chain ID the signer is bound to")
    rpc_probe_timeout: float = Field(
        default=5.0, description="Seconds to wait for a candidate's block height"
    )

    # ======================
    # Addresses
    # ======================
    treasury_address: str = Field(
        default="0x4024Fd78E2AD5532FBF3ec2B3eC83870FAe45fC7",
        description="Default destination when a request names none",
    )
    fee_recipient_address: str = Field(
        default="0x89226Fc817904c6E745dF27802d0c9D4c94573F1",
        description="Fee recipient reported by /balance",
    )

    # ======================
    # Amount policy
    # ======================
    eth_usd_rate: Decimal = Field(default=Decimal("3450"), description="Fixed USD per ETH")
    gas_reserve_eth: Decimal = Field(
        default=Decimal("0.002"), description="ETH withheld from every transfer for gas"
    )
    min_balance_eth: Decimal = Field(
        default=Decimal("0.002"), description="Minimum balance before any transfer is attempted"
    )
    default_amount_eth: Decimal = Field(
        default=Decimal("0.01"), description="Amount sent when a request names none"
    )

    # ======================
    # Transaction
    # ======================
    gas_limit: int = Field(default=21000, description="Gas limit of a plain value transfer")
    default_priority_fee_gwei: Decimal = Field(
        default=Decimal("1"),
        description="Priority fee used when the node has no eth_maxPriorityFeePerGas",
    )
    confirmation_timeout: Optional[float] = Field(
        default=None, description="Seconds to wait for inclusion (unset = forever)"
    )

    # ======================
    # Concurrency
    # ======================
    serialize_submissions: bool = Field(
        default=True,
        description="Serialize nonce fetch through broadcast per signer",
    )

    @property
    def rpc_url_list(self) -> list[str]:
        """Parse RPC URLs into an ordered list."""
        return [url.strip() for url in self.rpc_urls.split(",") if url.strip()]

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def has_signer_key(self) -> bool:
        """Check if a signer private key is configured."""
        return bool(self.treasury_private_key and self.treasury_private_key.strip())

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "treasury_private_key": "***" if self.has_signer_key else "(not set)",
            "chain_id": self.chain_id,
            "rpc_urls": self.rpc_url_list,
            "rpc_probe_timeout": self.rpc_probe_timeout,
            "treasury_address": self.treasury_address,
            "fee_recipient_address": self.fee_recipient_address,
            "amounts": {
                "eth_usd_rate": str(self.eth_usd_rate),
                "gas_reserve_eth": str(self.gas_reserve_eth),
                "min_balance_eth": str(self.min_balance_eth),
                "default_amount_eth": str(self.default_amount_eth),
            },
            "transaction": {
                "gas_limit": self.gas_limit,
                "confirmation_timeout": self.confirmation_timeout,
                "serialize_submissions": self.serialize_submissions,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
