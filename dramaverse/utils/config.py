# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class AnalyticsSettings(BaseSettings):
    """Delivery settings for the analytics pipeline."""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    endpoint_url: str = Field(
        default="http://localhost:5000/api", description="Base URL of the REST API"
    )
    events_path: str = Field(
        default="/analytics/events", description="Path of the analytics ingestion endpoint"
    )
    auth_token: Optional[str] = Field(
        default=None, description="Optional bearer token sent with every batch"
    )
    batch_size: int = Field(
        default=20, gt=0, description="Queue length that triggers an automatic flush"
    )
    flush_interval_seconds: float = Field(
        default=60.0, gt=0, description="Periodic flush interval in seconds"
    )
    send_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Timeout for a single batch request"
    )
    teardown_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Time allowed for the final flush on teardown"
    )
    app_version: str = Field(default="1.0.0", description="Reported application version")

    @property
    def events_url(self) -> str:
        """Full URL the event batches are posted to."""
        return self.endpoint_url.rstrip("/") + "/" + self.events_path.lstrip("/")


class StorageSettings(BaseSettings):
    """Key-value storage settings for the durable event queue."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    impl: Literal["file", "valkey"] = Field(
        default="file", description="Storage implementation (file, valkey)"
    )
    namespace: str = Field(default="dramaverse", description="Prefix for all storage keys")
    queue_key: str = Field(
        default="analytics_events_queue", description="Key holding the pending event queue"
    )
    device_id_key: str = Field(default="device_id", description="Key holding the device id")
    data_dir: Path = Field(
        default=Path("~/.dramaverse"), description="Directory used by the file store"
    )

    @property
    def queue_storage_key(self) -> str:
        """Namespaced key for the persisted queue."""
        return f"{self.namespace}:{self.queue_key}"

    @property
    def device_id_storage_key(self) -> str:
        """Namespaced key for the persisted device id."""
        return f"{self.namespace}:{self.device_id_key}"

    @property
    def data_dir_path(self) -> Path:
        """Resolve data directory, expanding the user home."""
        return self.data_dir.expanduser()


class ValkeySettings(BaseSettings):
    """Valkey (Redis-compatible) connection settings for the valkey store."""

    model_config = SettingsConfigDict(env_prefix="VALKEY_")

    host: str = Field(default="localhost", description="Valkey host")
    port: int = Field(default=6379, description="Valkey port")
    password: Optional[str] = Field(default=None, description="Valkey password")
    db: int = Field(default=0, description="Valkey database number")
    ssl: bool = Field(default=False, description="Use SSL/TLS connection")

    @property
    def url(self) -> str:
        """Build Valkey connection URL."""
        scheme = "rediss" if self.ssl else "redis"
        if self.password:
            return f"{scheme}://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"{scheme}://{self.host}:{self.port}/{self.db}"


class DeviceSettings(BaseSettings):
    """Device metadata that cannot be discovered from the host platform.

    Language and timezone are detected from the host when left unset.
    """

    model_config = SettingsConfigDict(env_prefix="DEVICE_")

    screen_width: int = Field(default=0, ge=0, description="Screen width in pixels")
    screen_height: int = Field(default=0, ge=0, description="Screen height in pixels")
    language: Optional[str] = Field(default=None, description="Language override (e.g. 'en')")
    timezone: Optional[str] = Field(default=None, description="IANA timezone override")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    valkey: ValkeySettings = Field(default_factory=ValkeySettings)
    device: DeviceSettings = Field(default_factory=DeviceSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
