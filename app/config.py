"""Application configuration."""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Profitwell (subscription analytics)
    profitwell_api_key: str = ""

    # Atlassian Marketplace (vendor reporting)
    atlassian_email: str = ""
    atlassian_api_token: str = ""
    atlassian_vendor_id: str = ""

    # Mercury (banking)
    mercury_api_key: str = ""

    # Macquarie has no API; its balance is entered manually (AUD)
    macquarie_balance: float | None = None

    # API Security
    api_secret_key: str

    # When set, collectors go through another instance's proxy routes
    proxy_base_url: str | None = None

    # Reporting windows
    default_months: int = 6
    burn_rate_months: int = 3
    request_timeout: float = 30.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    @property
    def use_proxy(self) -> bool:
        return bool(self.proxy_base_url)

    @property
    def profitwell_configured(self) -> bool:
        return bool(self.profitwell_api_key)

    @property
    def atlassian_configured(self) -> bool:
        """Atlassian needs all three credentials to build an export URL."""
        return bool(self.atlassian_email and self.atlassian_api_token and self.atlassian_vendor_id)

    @property
    def mercury_configured(self) -> bool:
        return bool(self.mercury_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
