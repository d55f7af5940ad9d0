"""
Tests for settings parsing.
"""

import os
from unittest.mock import patch

from review_api.settings import (
    Settings,
    DEFAULT_DATABASE_PATH,
    DEFAULT_NOT_FOUND_MESSAGE,
    DEFAULT_SENTINEL_USERNAME,
)


class TestSettingsParsing:
    """Test settings module parsing."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
            assert settings.port == 3000
            assert settings.database_path == DEFAULT_DATABASE_PATH
            assert settings.sentinel_username == DEFAULT_SENTINEL_USERNAME
            assert settings.not_found_message == DEFAULT_NOT_FOUND_MESSAGE
            assert settings.allowed_origins == ["*"]
            assert settings.require_database is False
            assert settings.expose_store_errors is True

    def test_default_database_sits_beside_server_dir(self):
        server_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        assert DEFAULT_DATABASE_PATH == os.path.join(os.path.dirname(server_dir), "review_app.db")

    def test_values_from_env(self):
        env = {
            "REVIEW_API_DATABASE_PATH": "/data/review_app.db",
            "REVIEW_API_PORT": "8080",
            "REVIEW_API_REQUIRE_DATABASE": "true",
            "REVIEW_API_EXPOSE_STORE_ERRORS": "false",
        }
        with patch.dict(os.environ, env, clear=False):
            settings = Settings(_env_file=None)
            assert settings.database_path == "/data/review_app.db"
            assert settings.port == 8080
            assert settings.require_database is True
            assert settings.expose_store_errors is False

    def test_parse_allowed_origins_from_env(self):
        """Allowed origins should be parsed from comma-separated env var."""
        with patch.dict(os.environ, {"REVIEW_API_ALLOWED_ORIGINS_RAW": "http://localhost:8080, https://review.example.com"}, clear=False):
            settings = Settings(_env_file=None)
            assert settings.allowed_origins == ["http://localhost:8080", "https://review.example.com"]

    def test_empty_origins(self):
        with patch.dict(os.environ, {"REVIEW_API_ALLOWED_ORIGINS_RAW": ""}, clear=False):
            settings = Settings(_env_file=None)
            assert settings.allowed_origins == []
