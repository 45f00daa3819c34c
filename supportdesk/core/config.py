"""Application configuration"""

import logging
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_prefix="SUPPORTDESK__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Locks
    lock_timeout: float = Field(default=5.0, gt=0, le=300.0)  # seconds
    lock_max_retries: int = Field(default=10, ge=1, le=1000)
    lock_retry_delay: float = Field(default=0.1, gt=0, le=10.0)  # seconds
    lock_sweep_interval: float = Field(default=10.0, gt=0, le=3600.0)  # seconds

    # Storage
    storage_backend: Literal["file", "memory"] = "file"
    data_dir: str = "data"

    # Fanout
    curator_channel: str = "curators"
    wait_for_delivery: bool = False

    # Logging
    log_level: str = "INFO"

    # Version
    version: str = "0.1.0"


# Create settings instance
settings = AppConfig()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("supportdesk")
