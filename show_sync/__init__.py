"""
show-sync: Mirror a public TV show catalog into a headless CMS.

This package reconciles the shows of a paginated JSON catalog with the
show nodes stored in a CMS content API, so that after a run the CMS holds
one node per catalog show with up-to-date title, summary, image and genres.

Architecture:
    A run has two stages:

    INDEX (cms/): Read the CMS
        - Discover the root container of the shows
        - Count and download every child node
        - Build a read-only index keyed by catalog id

    SYNC (sync/): Walk the catalog with a pool of workers
        - Fetch catalog pages (catalog/)
        - Compare each show with the index
        - Upload missing images to the CMS media library
        - Create new nodes and update changed ones
        - Retry transient failures with exponential backoff

Modules:
    core/       - Configuration, logging, progress, exceptions
    catalog/    - Source catalog client
    cms/        - CMS client, index builder, media upload, block lists
    sync/       - Retry policy, reconciler, worker pool, run orchestration
    models.py   - Show, Tag and result types
    cli.py      - Command-line interface

Usage:
    Command Line:
        show-sync
        show-sync --first-page 0 --last-page 9 --workers 8

    Python API:
        from show_sync.core import load_config, setup_logging
        from show_sync.sync import run_sync

        config = load_config()
        setup_logging(config.output.log_directory)
        stats = run_sync(config)
        print(stats.created, stats.updated, stats.failed)

Dependencies:
    - requests: HTTP for the catalog, the CMS and image downloads
    - yt-dlp: Filename sanitization for uploaded images
    - click / rich-click: CLI framework and colors
    - rich: Progress bar
    - tqdm: Log output that does not break progress bars
    - pyyaml: Configuration file parsing
    - python-dotenv: CMS credentials from .env
"""

__version__ = "0.1.0"
__author__ = "show-sync"
__license__ = "MIT"

# Convenience imports for common usage
from show_sync.core import (
    CatalogError,
    CmsError,
    Config,
    ConfigError,
    IndexBuildError,
    RetryExhaustedError,
    ShowSyncError,
    UploadError,
    get_logger,
    load_config,
    setup_logging,
)
from show_sync.models import EntityResult, PageResult, Show, SyncAction, SyncStats, Tag

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "ShowSyncError",
    "ConfigError",
    "CatalogError",
    "CmsError",
    "UploadError",
    "IndexBuildError",
    "RetryExhaustedError",
    # Models
    "Show",
    "Tag",
    "SyncAction",
    "EntityResult",
    "PageResult",
    "SyncStats",
]
