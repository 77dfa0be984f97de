"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .firebase import FirebaseConfig, get_firebase_config
from .gemini import GeminiConfig, get_gemini_config
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .ingest import CustomFieldSetting, IngestConfig, get_ingest_config
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_storage_config,
    get_store_backend,
)

__all__ = [
    "ConfigurationError",
    "CustomFieldSetting",
    "DatabaseConfig",
    "FirebaseConfig",
    "GeminiConfig",
    "IngestConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_firebase_config",
    "get_gemini_config",
    "get_ingest_config",
    "get_storage_config",
    "get_store_backend",
    "require_env_var",
    "require_env_vars",
]
