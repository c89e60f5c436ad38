"""Public configuration surface for catalogsync."""

from __future__ import annotations

from .akeneo import AkeneoConfig, get_akeneo_config
from .env import env_flag, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_storage_config,
)
from .sync import get_import_settings
from .woocommerce import WooCommerceConfig, get_woocommerce_config

__all__ = [
    "AkeneoConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "WooCommerceConfig",
    "env_flag",
    "get_akeneo_config",
    "get_database_config",
    "get_import_settings",
    "get_storage_config",
    "get_woocommerce_config",
    "require_env_vars",
]
