"""
Sync run orchestration.

run_sync() wires the components together for one complete run:

    1. Discover the CMS root container and count its children
    2. Build the read-only CMS index (fatal on failure)
    3. Process catalog pages with the worker pool:
       fetch page -> reconcile each show -> upload image / write node
    4. Return aggregated SyncStats

Nothing is persisted locally between runs. Every run rebuilds the index
from the CMS, so an interrupted run is resumed by running again.
"""

import time
from typing import Callable, Mapping

import requests

from show_sync.catalog.client import CatalogClient
from show_sync.cms.client import CmsClient, CmsRoot
from show_sync.cms.index import build_destination_index
from show_sync.cms.media import MediaUploader
from show_sync.core.config import Config
from show_sync.core.exceptions import CmsError, IndexBuildError, RetryExhaustedError
from show_sync.core.logger import get_logger, log_duration
from show_sync.core.progress import SyncProgressBar
from show_sync.models import EntityResult, PageResult, Show, SyncAction, SyncStats
from show_sync.sync.reconciler import Reconciler
from show_sync.sync.retry import RetryPolicy
from show_sync.sync.scheduler import WorkerPool

logger = get_logger(__name__)


class SyncRunner:
    """
    One sync run from catalog to CMS.

    Sessions can be injected so tests can replace the HTTP layer.

    Attributes:
        _config: Application configuration.
        _catalog: Source catalog client.
        _cms: Destination CMS client.
        _uploader: Media uploader.
        _retry: Retry policy for page fetches, uploads and writes.
    """

    def __init__(
        self,
        config: Config,
        catalog_session: requests.Session | None = None,
        cms_session: requests.Session | None = None,
        download_session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep
    ) -> None:
        timeout = config.sync.request_timeout
        self._config = config
        self._catalog = CatalogClient(config.catalog.base_url, catalog_session, timeout)
        self._cms = CmsClient(config.cms, cms_session, timeout)
        self._uploader = MediaUploader(self._cms, download_session, timeout)
        self._retry = RetryPolicy(
            attempts=config.sync.retry_attempts,
            initial_delay=config.sync.retry_initial_delay,
            max_delay=config.sync.retry_max_delay,
            sleep=sleep,
        )

    def load_index(self) -> tuple[CmsRoot, Mapping[int, Show]]:
        """
        Discover the CMS root and build the index of stored shows.

        Raises:
            IndexBuildError: If discovery, counting or any page fails.
        """
        try:
            root = self._cms.discover_root()
            total = self._cms.count_children(root)
        except (CmsError, requests.RequestException) as e:
            raise IndexBuildError(
                f"Failed to read CMS root: {e}",
                details={"original_error": str(e)}
            ) from e

        with log_duration(logger, "Download and parse all CMS shows"):
            index = build_destination_index(self._cms, root, total)
        return root, index

    def run(self, show_progress: bool = True) -> SyncStats:
        """
        Execute the full sync.

        Args:
            show_progress: Display a progress bar on the console.

        Returns:
            SyncStats of the run.

        Raises:
            IndexBuildError: If the CMS index could not be built. No
                             catalog page is processed in that case.
        """
        if not self._config.cms.genre_element_type_key:
            logger.warning("cms.genre_element_type_key is not set: genres will not be written")

        root, index = self.load_index()
        reconciler = Reconciler(index, self._cms, self._uploader, root, self._retry)

        sync = self._config.sync
        stats = SyncStats()
        pool = WorkerPool(workers=sync.workers)
        total_pages = None if sync.last_page is None else sync.last_page - sync.first_page + 1

        def process_page(page: int) -> PageResult:
            return self._process_page(reconciler, page)

        logger.info(f"Beginning upload with {sync.workers} workers")
        with log_duration(logger, "Total time to upload"):
            if show_progress:
                with SyncProgressBar(total=total_pages) as progress:
                    def on_result(result: PageResult) -> None:
                        stats.add_page(result)
                        progress.update(result)

                    pool.run(process_page, sync.first_page, sync.last_page, on_result)
            else:
                pool.run(process_page, sync.first_page, sync.last_page, stats.add_page)

        logger.info(
            f"Sync complete: {stats.created} created, {stats.updated} updated, "
            f"{stats.unchanged} unchanged, {stats.skipped} skipped, {stats.failed} failed "
            f"({stats.images_uploaded} images uploaded, {stats.pages_failed} pages failed)"
        )
        return stats

    def _process_page(self, reconciler: Reconciler, page: int) -> PageResult:
        try:
            shows = self._retry.run(
                lambda: self._catalog.fetch_page(page),
                description=f"catalog page {page}"
            )
        except RetryExhaustedError as e:
            logger.error(f"Skipping catalog page {page}: {e}")
            return PageResult(page=page, error=str(e))

        if shows is None:
            logger.info(f"Catalog ended before page {page}")
            return PageResult(page=page, end_of_data=True)

        logger.debug(f"Catalog page {page}: {len(shows)} shows")
        results = tuple(self._reconcile(reconciler, show) for show in shows)
        return PageResult(page=page, results=results)

    @staticmethod
    def _reconcile(reconciler: Reconciler, show: Show) -> EntityResult:
        """Reconcile one show; an unexpected error fails only this show."""
        try:
            return reconciler.reconcile(show)
        except Exception as e:
            logger.error(
                f"Unexpected error reconciling show {show.external_id} ({show.title}): {e}",
                exc_info=True
            )
            return EntityResult(show.external_id, show.title, SyncAction.FAILED, reason=str(e))


def run_sync(config: Config, show_progress: bool = True) -> SyncStats:
    """
    Convenience entry point called by the CLI.

    Raises:
        IndexBuildError: If the CMS index could not be built.
    """
    return SyncRunner(config).run(show_progress=show_progress)
