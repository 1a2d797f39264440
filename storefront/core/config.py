"""
Core configuration and settings for the Storefront Service
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Service information
    service_name: str = Field(default="storefront-service")
    service_version: str = Field(default="1.0.0")
    api_version: str = Field(default="1.0.0")
    environment: str = Field(default="development")

    # Server configuration
    port: int = Field(default=8000)
    host: str = Field(default="0.0.0.0")

    # Database configuration
    mongodb_host: str = Field(default="localhost")
    mongodb_port: int = Field(default=27017)
    mongodb_username: Optional[str] = Field(default=None)
    mongodb_password: Optional[str] = Field(default=None)
    mongodb_database: str = Field(default="storefrontdb")

    @property
    def mongodb_url(self) -> str:
        """Construct MongoDB connection URL"""
        if self.mongodb_username and self.mongodb_password:
            return (
                f"mongodb://{self.mongodb_username}:{self.mongodb_password}"
                f"@{self.mongodb_host}:{self.mongodb_port}/{self.mongodb_database}?authSource=admin"
            )
        return f"mongodb://{self.mongodb_host}:{self.mongodb_port}/{self.mongodb_database}"

    # Cache configuration
    redis_url: str = Field(default="redis://localhost:6379/0")
    cache_enabled: bool = Field(default=True)
    cache_ttl: int = Field(default=3600)  # seconds

    # Order pricing
    order_currency: str = Field(default="USD")
    order_shipping_amount: float = Field(default=15.00, ge=0)
    order_tax_rate: float = Field(default=0.08, ge=0)

    # Pagination defaults
    public_products_per_page: int = Field(default=12, ge=1)
    admin_per_page: int = Field(default=15, ge=1)

    # Rate limits (slowapi syntax)
    public_rate_limit: str = Field(default="60/minute")
    cart_rate_limit: str = Field(default="30/minute")
    order_rate_limit: str = Field(default="10/minute")

    # Logging configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")
    log_to_file: bool = Field(default=False)
    log_to_console: bool = Field(default=True)
    log_file_path: str = Field(default="logs/storefront-service.log")

    # Dapr configuration
    dapr_http_port: int = Field(default=3500)
    dapr_pubsub_name: str = Field(default="storefront-pubsub")

    # OpenTelemetry spans (export goes through the Dapr sidecar)
    telemetry_enabled: bool = Field(default=True)


# Global config instance
config = Config()
