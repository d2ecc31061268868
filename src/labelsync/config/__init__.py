"""Application configuration helpers."""

from __future__ import annotations

from .codec import get_codec_config, get_pool_config
from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .registry import RegistryConfig, get_registry_config
from .storage import DatabaseConfig, get_data_dir, get_database_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "RegistryConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "SyncConfig",
    "get_codec_config",
    "get_data_dir",
    "get_database_config",
    "get_pool_config",
    "get_registry_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_vars",
]
