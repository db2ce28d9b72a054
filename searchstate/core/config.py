"""Settings for searchstate, read from the environment (and .env).

Search defaults (cache TTL, key prefix, page sizes) are application-wide;
a SearchResource may override the page size for its own route.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings. Every field has a default."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: str = "searchstate"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Bearer tokens are only decoded to read the user id (sub claim).
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"

    # Disabled: the in-process MemoryCache is used instead (one worker only).
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    search_cache_ttl_minutes: int = Field(default=60, ge=1)
    search_cache_prefix: str = Field(default="search_", min_length=1)
    search_default_pagination: int = Field(default=15, ge=1)
    search_max_page_size: int = Field(default=100, ge=1)

    @model_validator(mode="after")
    def check_page_sizes(self) -> "Settings":
        if self.search_default_pagination > self.search_max_page_size:
            raise ValueError(
                f"SEARCH_DEFAULT_PAGINATION ({self.search_default_pagination}) exceeds "
                f"SEARCH_MAX_PAGE_SIZE ({self.search_max_page_size})"
            )
        return self

    @property
    def search_cache_ttl_seconds(self) -> int:
        return self.search_cache_ttl_minutes * 60

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Process-wide Settings, built on first use.

    Tests that change the environment call get_settings.cache_clear() first.
    """
    return Settings()
