"""Application settings from environment variables."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    """Application settings from environment."""

    # Server
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    # Batch engine
    validation_concurrency: int = Field(default=10, ge=1)
    max_upload_bytes: int = 32 << 20

    # Verifier
    smtp_timeout_seconds: float = 10.0
    smtp_from_email: str = "verify@example.com"
    smtp_helo_name: str = "localhost"
    smtp_port: int = 25
    dns_timeout_seconds: float = 5.0
    gravatar_timeout_seconds: float = 5.0

    model_config = {"env_file": ".env", "env_prefix": "MAILBATCH_"}


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
