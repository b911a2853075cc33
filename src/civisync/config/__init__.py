"""Application configuration helpers."""

from __future__ import annotations

from .civicrm import CiviCrmConfig, get_civicrm_config
from .env import env_flag, env_list, optional_env_int, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .http_resilience import NO_RETRY, RateLimit, ReadCache, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, get_database_config
from .sync import SyncSettings, get_sync_settings
from .woocommerce import WooCommerceConfig, get_woocommerce_config

__all__ = [
    "NO_RETRY",
    "CiviCrmConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ReadCache",
    "ResilienceConfig",
    "RetryPolicy",
    "SyncSettings",
    "WooCommerceConfig",
    "configure_logging",
    "env_flag",
    "env_list",
    "get_civicrm_config",
    "get_database_config",
    "get_sync_settings",
    "get_woocommerce_config",
    "optional_env_int",
    "require_env_vars",
]
