"""
Configuration management for Manna Art.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Application
    app_name: str = Field(default="Manna Art")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_workers: int = Field(default=1)
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins.",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="'json' or 'console'")

    # Catalog
    catalog_backend: str = Field(
        default="json", description="'json' (single document) or 'sql'"
    )
    catalog_path: str = Field(default="./data/artworks.json")
    database_url: str = Field(default="sqlite:///./manna_art.db")

    # Skips the billing entitlement check and the usage increment.
    dev_mode_skip_subscription: bool = Field(default=False)

    # Artifact store (permanent storage network)
    artifact_store_url: str = Field(
        default="file://./data/artifacts",
        description="file:// for local development, https:// for an upload gateway",
    )
    artifact_gateway_token: Optional[str] = Field(default=None)
    artifact_public_url: str = Field(default="https://arweave.net")
    artifact_timeout_seconds: float = Field(default=60.0)

    # Billing
    stripe_secret_key: Optional[str] = Field(default=None)
    stripe_price_creador_monthly: Optional[str] = Field(default=None)
    stripe_price_creador_yearly: Optional[str] = Field(default=None)
    stripe_price_profesional_monthly: Optional[str] = Field(default=None)
    stripe_price_profesional_yearly: Optional[str] = Field(default=None)
    stripe_price_elite_monthly: Optional[str] = Field(default=None)
    stripe_price_elite_yearly: Optional[str] = Field(default=None)
    public_url: str = Field(default="http://localhost:3000")

    # IP registry (Story Protocol)
    story_wallet_private_key: Optional[str] = Field(default=None)
    story_rpc_url: str = Field(default="https://mainnet.storyrpc.io")
    story_chain_id: int = Field(default=1514)
    spg_nft_contract: Optional[str] = Field(
        default=None,
        description="Own SPG NFT collection; the public collection is used when unset.",
    )
    ip_token_address: str = Field(
        default="0x1514000000000000000000000000000000000000"
    )
    royalty_policy_address: str = Field(
        default="0xBe54FB168b3c982b7AaE60dB6CF75Bd8447b390E"
    )
    storyscan_url: str = Field(default="https://mainnet.storyscan.xyz")

    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def stripe_price_id(self, plan: str, is_yearly: bool) -> Optional[str]:
        """Return the configured price id for a plan and billing period."""
        period = "yearly" if is_yearly else "monthly"
        return getattr(self, f"stripe_price_{plan.lower()}_{period}", None)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
