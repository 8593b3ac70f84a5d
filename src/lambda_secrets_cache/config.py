"""
Configuration for the parameter and secret cache.

Loads settings from environment variables (and a local .env file when present)
with defaults matching the AWS Parameters and Secrets Lambda Extension.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Side-car and cache settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    # Lambda extension side-car
    SIDECAR_HOST: str = 'localhost'
    PARAMETERS_SECRETS_EXTENSION_HTTP_PORT: int = Field(default=2773, ge=1, le=65535)
    AWS_SESSION_TOKEN: str = ''
    SIDECAR_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0, le=60)

    # Cache
    DEFAULT_REFRESH_AFTER_SECONDS: int = Field(default=5 * 60, ge=0)

    # Logging
    LOG_LEVEL: str = 'INFO'
    LOG_JSON: bool = False

    @property
    def sidecar_base_url(self) -> str:
        """Base URL of the local extension endpoint."""
        return f'http://{self.SIDECAR_HOST}:{self.PARAMETERS_SECRETS_EXTENSION_HTTP_PORT}'


@lru_cache
def get_settings() -> CacheSettings:
    """Cached settings singleton."""
    return CacheSettings()
