"""
Core module for show-sync.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with multiple outputs
    - progress: Rich progress bar for the sync run

Usage:
    from show_sync.core import (
        Config, load_config,
        setup_logging, get_logger,
        ShowSyncError, ConfigError, CmsError
    )
"""

from show_sync.core.config import (
    CatalogConfig,
    CmsConfig,
    Config,
    OutputConfig,
    SyncConfig,
    load_config,
)
from show_sync.core.exceptions import (
    CatalogError,
    CmsError,
    ConfigError,
    HttpStatusError,
    IndexBuildError,
    RetryExhaustedError,
    ShowSyncError,
    UploadError,
)
from show_sync.core.logger import (
    get_logger,
    log_duration,
    log_sync_failure,
    setup_logging,
    shutdown_logging,
)
from show_sync.core.progress import SyncProgressBar

__all__ = [
    # Config
    "Config",
    "CatalogConfig",
    "CmsConfig",
    "SyncConfig",
    "OutputConfig",
    "load_config",
    # Exceptions
    "ShowSyncError",
    "ConfigError",
    "HttpStatusError",
    "CatalogError",
    "CmsError",
    "UploadError",
    "IndexBuildError",
    "RetryExhaustedError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_duration",
    "log_sync_failure",
    "shutdown_logging",
    # Progress
    "SyncProgressBar",
]
