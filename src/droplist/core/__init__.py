"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging (Loguru)
- Console management (Rich)

Clean architecture principle: The core layer has no dependencies on
the domain layer.
"""

# Configuration
from .config import (
    Config,
    DriveConfig,
    QueueConfig,
    CacheConfig,
    LoggingConfig,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_duration_cache_path,
    create_default_config,
    ensure_directories,
)

# Output
from .output import setup_loguru, log, set_quiet

# Console
from .console import get_console, safe_print, status

__all__ = [
    # Config
    "Config",
    "DriveConfig",
    "QueueConfig",
    "CacheConfig",
    "LoggingConfig",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_duration_cache_path",
    "create_default_config",
    "ensure_directories",
    # Output
    "setup_loguru",
    "log",
    "set_quiet",
    # Console
    "get_console",
    "safe_print",
    "status",
]
