"""Application configuration helpers."""

from __future__ import annotations

from .audit import AuditConfig, get_audit_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .stats import STATS_DIR_ENV, StatsConfig, get_stats_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "STATS_DIR_ENV",
    "AuditConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "StatsConfig",
    "StorageConfig",
    "configure_logging",
    "get_audit_config",
    "get_database_config",
    "get_stats_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
