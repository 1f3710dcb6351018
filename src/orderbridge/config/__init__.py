"""Application configuration helpers."""

from __future__ import annotations

from .catalog import CatalogApiConfig, get_catalog_api_config
from .env import optional_env_var, positive_int_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .ingest import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, IngestConfig, get_ingest_config
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_http_cache_path,
    get_storage_config,
)

__all__ = [
    "DEFAULT_PAGE",
    "DEFAULT_PAGE_SIZE",
    "CacheConfig",
    "CatalogApiConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "IngestConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_catalog_api_config",
    "get_database_config",
    "get_database_uri",
    "get_http_cache_path",
    "get_ingest_config",
    "get_storage_config",
    "optional_env_var",
    "positive_int_env_var",
    "require_env_vars",
]
