"""
Review API Server Settings

Configuration management using pydantic settings.
Loads from environment variables with REVIEW_API_ prefix.
"""

import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import computed_field
from typing import List


# The store lives next to the Flutter app's data, one level above server/
DEFAULT_DATABASE_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    "review_app.db",
)

DEFAULT_SENTINEL_USERNAME = "匿名ラッコ"
DEFAULT_NOT_FOUND_MESSAGE = "匿名ユーザーが存在しません"


class Settings(BaseSettings):
    """
    Server configuration settings.

    Environment variables:
    - REVIEW_API_DATABASE_PATH: Path to the SQLite store (default: ../review_app.db)
    - REVIEW_API_HOST / REVIEW_API_PORT: Listen address (default: 0.0.0.0:3000)
    - REVIEW_API_SENTINEL_USERNAME: Username of the default anonymous user
    - REVIEW_API_NOT_FOUND_MESSAGE: Error text returned with 404 responses
    - REVIEW_API_ALLOWED_ORIGINS_RAW: Comma-separated list of allowed CORS origins (default: *)
    - REVIEW_API_REQUIRE_DATABASE: Abort startup if the store cannot be opened (default: false)
    - REVIEW_API_EXPOSE_STORE_ERRORS: Return raw store error text in 500 bodies (default: true)
    - REVIEW_API_LOG_LEVEL: Root log level (default: INFO)
    - REVIEW_API_DEBUG: Enable debug mode (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="REVIEW_API_",
        env_file=".env",
        extra="ignore",
    )

    database_path: str = DEFAULT_DATABASE_PATH

    host: str = "0.0.0.0"
    port: int = 3000

    sentinel_username: str = DEFAULT_SENTINEL_USERNAME
    not_found_message: str = DEFAULT_NOT_FOUND_MESSAGE

    # Raw string field for comma-separated values
    allowed_origins_raw: str = "*"

    # Startup connect failure is only logged unless this is set
    require_database: bool = False

    # Trusted local-network tool: raw sqlite messages go back to the client
    expose_store_errors: bool = True

    log_level: str = "INFO"
    debug: bool = False

    @computed_field
    @property
    def allowed_origins(self) -> List[str]:
        """Parse comma-separated allowed origins into list."""
        if not self.allowed_origins_raw:
            return []
        return [v.strip() for v in self.allowed_origins_raw.split(",") if v.strip()]


# Global settings instance
settings = Settings()
