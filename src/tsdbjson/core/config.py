"""Configuration management for the TSDB JSON decoder."""

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    ENV: str = "local"
    SERVICE_NAME: str = "tsdb-json-decoder"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Storage Configuration
    STORAGE_BACKEND: str = "s3"  # "s3", "gcs" or "local"
    SOURCE_BUCKET: str = "jsonchunksource"
    DESTINATION_BUCKET: str = "jsonchunkdestination"
    LOCAL_STORAGE_PATH: str = "./data/buckets"
    STORAGE_RETRY_ATTEMPTS: int = 3

    # AWS Configuration
    AWS_REGION: str = "us-east-1"
    AWS_PROFILE: str = ""

    # GCP Configuration
    GCP_PROJECT_ID: str = ""

    # Decoder capabilities
    ENABLE_SNAPPY: bool = True
    ENABLE_PROTOBUF: bool = True

    # Deployment metadata (not used by decoding)
    EXECUTION_TIMEOUT_SECONDS: int = 300
    MEMORY_SIZE_MB: int = 256

    @property
    def is_local(self) -> bool:
        """Whether the service runs in a local development environment."""
        return self.ENV == "local"

    @property
    def log_level(self) -> int:
        """Resolve LOG_LEVEL into a logging level number."""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO


# Singleton settings instance
settings = Settings()
