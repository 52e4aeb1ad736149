"""
API configuration settings.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

# Project root: the directory holding the api package
BASE_DIR = Path(__file__).resolve().parent.parent

STORAGE_ERROR_POLICIES = ("mask", "fail")


class APIConfig(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "Book Collection API"
    api_version: str = "1.0.0"
    api_description: str = "CRUD service over a collection of books stored as a JSON document"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False

    # Storage Settings
    data_file: Path = BASE_DIR / "books.json"
    storage_error_policy: str = "mask"  # "mask" hides storage failures, "fail" returns 500

    # CORS Settings
    cors_allow_origin: str = "*"
    cors_allow_methods: List[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_allow_headers: List[str] = ["Content-Type"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "extra": "ignore"  # Ignore extra fields from .env
    }

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        """Ensure the port is a valid TCP port."""
        if v < 1 or v > 65535:
            raise ValueError('port must be between 1 and 65535')
        return v

    @field_validator('data_file')
    @classmethod
    def resolve_data_file(cls, v):
        """Resolve relative data file paths against the project root."""
        path = Path(v)
        if not path.is_absolute():
            path = BASE_DIR / path
        return path

    @field_validator('storage_error_policy')
    @classmethod
    def validate_storage_error_policy(cls, v):
        """Ensure the storage error policy is known."""
        if v.lower() not in STORAGE_ERROR_POLICIES:
            raise ValueError(f'storage_error_policy must be one of: {list(STORAGE_ERROR_POLICIES)}')
        return v.lower()

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()

    def cors_headers(self) -> dict:
        """Headers attached to every CORS-enabled response."""
        return {
            "Access-Control-Allow-Origin": self.cors_allow_origin,
            "Access-Control-Allow-Methods": ", ".join(self.cors_allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.cors_allow_headers),
        }


# Global config instance
config = APIConfig()
