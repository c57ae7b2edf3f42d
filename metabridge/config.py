from pathlib import Path

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

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Bridge API
    bridge_api_base_url: str = Field(
        default="https://bridge.api.cx.metamask.io",
        description="Base URL of the bridge aggregation API",
    )
    bridge_client_id: str = Field(
        default="extension",
        description="Value sent in the X-Client-Id header on every bridge API call",
    )

    # Cache Settings
    cache_ttl_seconds: int = Field(default=300, description="Cache TTL in seconds")
    max_cache_size: int = Field(default=1000, description="Maximum cache size")

    # Networking
    request_timeout_seconds: int = Field(default=30, description="Request timeout")

    @property
    def bridge_api_url(self) -> str:
        return self.bridge_api_base_url.rstrip("/")


# Global settings instance
settings = Settings()
