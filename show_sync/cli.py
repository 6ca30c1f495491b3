"""
Command-line interface for show-sync.

This module implements the CLI using Click, with rich-click for the
output colors. A single command runs one complete sync from the catalog
into the CMS.

Usage:
    # Sync every catalog page until the catalog ends
    show-sync

    # Sync a bounded range of pages with 8 workers
    show-sync --first-page 0 --last-page 9 --workers 8

    # Use a specific configuration file and debug console output
    show-sync --config ./prod.yaml --verbose

Configuration:
    The CLI reads config.yaml from the current directory when present.
    CMS credentials can also come from UMB_PROJECT_ALIAS and API_KEY
    (a .env file is loaded). Command-line options override the file.

Exit codes:
    0   Sync completed (individual show failures are reported, not fatal)
    1   Configuration error
    2   CMS discovery or index build failed, nothing was written
    130 Interrupted by user
"""

import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import rich_click as click

from show_sync import __version__
from show_sync.core.config import Config, load_config
from show_sync.core.exceptions import ConfigError, IndexBuildError, ShowSyncError
from show_sync.core.logger import get_logger, setup_logging, shutdown_logging
from show_sync.models import SyncStats
from show_sync.sync.runner import run_sync

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "cli": [
        {
            "name": "Page Range",
            "options": ["--first-page", "--last-page"],
        },
        {
            "name": "Run Options",
            "options": ["--config", "--workers", "--no-progress", "--verbose"],
        },
        {
            "name": "Info",
            "options": ["--version", "--help"],
        },
    ],
}

logger = get_logger(__name__)


EXIT_CONFIG_ERROR = 1
EXIT_INDEX_ERROR = 2
EXIT_INTERRUPTED = 130


@click.command()
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml if present)"
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of concurrent page workers"
)
@click.option(
    "--first-page",
    type=click.IntRange(min=0),
    default=None,
    help="First catalog page to sync (0-indexed)"
)
@click.option(
    "--last-page",
    type=click.IntRange(min=0),
    default=None,
    help="Last catalog page to sync (default: until the catalog ends)"
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable the progress bar"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show debug messages on the console"
)
@click.version_option(__version__, "--version", prog_name="show-sync")
def cli(
    config_path: Optional[Path],
    workers: Optional[int],
    first_page: Optional[int],
    last_page: Optional[int],
    no_progress: bool,
    verbose: bool
) -> None:
    """
    show-sync: Mirror the TV show catalog into the CMS.

    Reads every show stored in the CMS, then walks the catalog page by
    page and creates missing shows, updates changed ones and uploads
    missing images. Running it twice in a row writes nothing the second
    time.

    \b
    EXAMPLES:
        show-sync                                  # Full sync
        show-sync --first-page 10 --last-page 20   # Pages 10-20 only
        show-sync --workers 8 --no-progress        # More workers, plain log
    """
    try:
        config = _load_configuration(config_path, workers, first_page, last_page)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    try:
        setup_logging(config.output.log_directory, verbose=verbose)
        logger.info(f"show-sync {__version__} starting")

        stats = run_sync(config, show_progress=not no_progress)
        _print_summary(stats)

    except IndexBuildError as e:
        click.echo(f"Could not read the CMS: {e.message}", err=True)
        logger.error(f"Index build failed: {e}")
        sys.exit(EXIT_INDEX_ERROR)

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    except ShowSyncError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.exception("Sync aborted")
        sys.exit(EXIT_CONFIG_ERROR)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.warning("Interrupted by user")
        sys.exit(EXIT_INTERRUPTED)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(EXIT_CONFIG_ERROR)

    finally:
        shutdown_logging()


def _load_configuration(
    config_path: Optional[Path],
    workers: Optional[int],
    first_page: Optional[int],
    last_page: Optional[int]
) -> Config:
    """
    Load config.yaml and apply command-line overrides.

    Raises:
        ConfigError: If configuration is invalid or the page range is empty.
    """
    config = load_config(config_path)

    overrides = {}
    if workers is not None:
        overrides["workers"] = workers
    if first_page is not None:
        overrides["first_page"] = first_page
    if last_page is not None:
        overrides["last_page"] = last_page
    if not overrides:
        return config

    sync = replace(config.sync, **overrides)
    if sync.last_page is not None and sync.last_page < sync.first_page:
        raise ConfigError(
            f"Last page {sync.last_page} is before first page {sync.first_page}",
            details={"first_page": sync.first_page, "last_page": sync.last_page}
        )
    return replace(config, sync=sync)


def _print_summary(stats: SyncStats) -> None:
    click.echo()
    click.secho("Sync summary", bold=True)
    click.echo(f"  Created:          {stats.created}")
    click.echo(f"  Updated:          {stats.updated}")
    click.echo(f"  Unchanged:        {stats.unchanged}")
    click.echo(f"  Skipped:          {stats.skipped}")
    click.echo(f"  Failed:           {stats.failed}")
    click.echo(f"  Images uploaded:  {stats.images_uploaded}")
    click.echo(f"  Pages processed:  {stats.pages_processed}")
    if stats.pages_failed:
        click.secho(f"  Pages failed:     {stats.pages_failed}", fg="yellow")

    if stats.failures:
        click.secho(f"\n{len(stats.failures)} shows failed (see sync_failures log):", fg="red")
        for failure in stats.failures[:10]:
            click.echo(f"  - [{failure.external_id}] {failure.title}: {failure.reason}")
        if len(stats.failures) > 10:
            click.echo(f"  ... and {len(stats.failures) - 10} more")


if __name__ == "__main__":
    cli()
