"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without an object storage account.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    These are the process-wide defaults. Individual attachments can still
    pass their own options (e.g. a callable directory) to SoftLayerStorage.
    """

    app_env: str = Field(
        default="development",
        description="Active environment name. Selects the matching block of the credentials file."
    )

    # Object Storage Configuration
    storage_credentials_path: Optional[str] = Field(
        default=None,
        description="Path to the YAML credentials file. ${VAR} placeholders are filled from the environment."
    )
    storage_directory: str = Field(
        default="attachments",
        description="Container (bucket) holding attachment objects"
    )
    storage_host: Optional[str] = Field(
        default=None,
        description="Custom host serving the container, e.g. https://assets%d.example.com. %d selects one of 4 shards."
    )
    storage_public: bool = Field(
        default=True,
        description="Upload objects with a public-read ACL"
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory storage instead of a real endpoint. Enables local dev without an account."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        """
        missing = []

        if not self.storage_mock_mode and not self.storage_credentials_path:
            missing.append("STORAGE_CREDENTIALS_PATH")

        if not self.storage_directory:
            missing.append("STORAGE_DIRECTORY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
