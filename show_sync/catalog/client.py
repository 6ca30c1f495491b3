"""
Source catalog client for show-sync.

The catalog is a read-only paginated listing of shows:

    GET {base_url}?page=N   ->  JSON array of shows

Pages are 0-indexed. The catalog signals that there is no more data by
answering 404 for a page index past the end; this client reports that as
a None page rather than an error, so callers stop paging without retrying.

Usage:
    client = CatalogClient("https://api.tvmaze.com/shows")

    page = client.fetch_page(0)
    if page is None:
        ...  # end of catalog
"""

from typing import Any

import requests

from show_sync.core.exceptions import CatalogError
from show_sync.core.logger import get_logger
from show_sync.models import Show

logger = get_logger(__name__)


class CatalogClient:
    """
    Fetches and decodes catalog pages.

    Attributes:
        _base_url: Listing endpoint.
        _session: requests session (shared connection pool, thread-safe
                  enough for concurrent GETs).
        _timeout: Timeout of each request in seconds.
    """

    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout: float = 10.0
    ) -> None:
        self._base_url = base_url
        self._session = session or requests.Session()
        self._timeout = timeout

    def fetch_page(self, page: int) -> list[Show] | None:
        """
        Fetch one page of the catalog.

        Args:
            page: 0-indexed page number.

        Returns:
            The shows on the page, or None if the page does not exist
            (end of catalog).

        Raises:
            CatalogError: On non-200/404 status or an undecodable body.
            requests.RequestException: On network failures.
        """
        response = self._session.get(
            self._base_url,
            params={"page": page},
            timeout=self._timeout
        )

        if response.status_code == 404:
            logger.debug(f"Catalog page {page} not found: end of catalog")
            return None

        if response.status_code != 200:
            raise CatalogError(
                f"Catalog returned status {response.status_code} for page {page}",
                details={"url": self._base_url, "page": page},
                status_code=response.status_code
            )

        try:
            items = response.json()
        except ValueError as e:
            raise CatalogError(
                f"Catalog page {page} is not valid JSON",
                details={"page": page, "original_error": str(e)},
                status_code=response.status_code
            ) from e

        if not isinstance(items, list):
            raise CatalogError(
                f"Catalog page {page} is not a JSON array",
                details={"page": page},
                status_code=response.status_code
            )

        return self._parse_items(items, page)

    @staticmethod
    def _parse_items(items: list[Any], page: int) -> list[Show]:
        shows = []
        skipped = 0

        for item in items:
            if not isinstance(item, dict):
                skipped += 1
                continue
            try:
                shows.append(Show.from_catalog_api(item))
            except (KeyError, TypeError, ValueError, AttributeError):
                skipped += 1

        if skipped:
            logger.warning(f"Skipped {skipped} malformed shows on catalog page {page}")

        return shows
