"""Application configuration using pydantic-settings."""
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Keycloak - access tokens are issued by a single realm
    keycloak_url: str = Field(default="http://localhost:8480/auth", validation_alias="KEYCLOAK_URL")
    keycloak_realm: str = Field(default="bookmarks", validation_alias="KEYCLOAK_REALM")
    keycloak_audience: str = Field(default="", validation_alias="KEYCLOAK_AUDIENCE")
    admin_role: str = Field(default="ROLE_ADMIN", validation_alias="ADMIN_ROLE")

    # Development mode - bypasses auth for local development
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")
    dev_user_id: str = Field(default="dev-local-user", validation_alias="DEV_USER_ID")

    # Base URL of the API, used to build Location headers
    api_url: str = Field(default="http://localhost:3000/api", validation_alias="API_URL")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:4200",
        validation_alias="CORS_ORIGINS",
    )

    # Only needed when scraping metadata of YouTube videos
    youtube_api_key: str = Field(default="", validation_alias="YOUTUBE_API_KEY")

    # Bookmark input limits
    max_tags: int = Field(default=8, validation_alias="MAX_TAGS")
    blocked_tag_prefix: str = Field(default="awesome", validation_alias="BLOCKED_TAG_PREFIX")
    max_description_length: int = Field(
        default=1500, validation_alias="MAX_DESCRIPTION_LENGTH",
    )
    max_description_lines: int = Field(default=100, validation_alias="MAX_DESCRIPTION_LINES")

    # Pinned bookmarks and history are capped to this many entries
    max_user_list_length: int = Field(default=30, validation_alias="MAX_USER_LIST_LENGTH")

    # Result sizes
    max_results: int = Field(default=100, validation_alias="MAX_RESULTS")
    default_search_limit: int = Field(default=10, validation_alias="DEFAULT_SEARCH_LIMIT")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE completely bypasses authentication, so it may only be used against
        a database running on the local machine.
        """
        if not self.dev_mode:
            return self

        hostname = urlparse(self.database_url).hostname or ""
        local_hosts = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}
        if hostname.lower() not in local_hosts:
            raise ValueError(
                f"DEV_MODE cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database. "
                f"DEV_MODE bypasses all authentication and must only be used locally.",
            )

        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def keycloak_issuer(self) -> str:
        """Get the issuer claim expected in realm access tokens."""
        return f"{self.keycloak_url.rstrip('/')}/realms/{self.keycloak_realm}"

    @property
    def keycloak_jwks_url(self) -> str:
        """Get the realm JWKS URL for fetching public keys."""
        return f"{self.keycloak_issuer}/protocol/openid-connect/certs"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
