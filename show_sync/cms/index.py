"""
Destination index builder.

Before any catalog page is processed, every show stored in the CMS is
downloaded and folded into a mapping keyed by catalog id. The mapping is
returned as a read-only view and shared by all workers without locking.

The index is all-or-nothing: if any page fails, no index is returned,
because reconciling against a partial index would create duplicates of
the shows on the missing pages.
"""

from types import MappingProxyType
from typing import Mapping

from show_sync.cms.client import CmsClient, CmsRoot
from show_sync.core.exceptions import IndexBuildError
from show_sync.core.logger import get_logger
from show_sync.models import Show

logger = get_logger(__name__)


def page_count(total_items: int, page_size: int) -> int:
    """
    Number of children pages to request.

    CMS pages are 1-indexed and the division rounds down, so one page is
    always added. An exact multiple therefore requests one empty page:
    250 items with page size 250 means 2 requests.
    """
    return total_items // page_size + 1


def build_destination_index(
    client: CmsClient,
    root: CmsRoot,
    total_items: int
) -> Mapping[int, Show]:
    """
    Download all CMS shows and index them by external id.

    Args:
        client: CMS client.
        root: Container node of the shows.
        total_items: Number of children reported by the CMS.

    Returns:
        Read-only mapping external_id -> Show. If the CMS holds two nodes
        with the same external id the later one wins; duplicates are
        logged but not resolved.

    Raises:
        IndexBuildError: If any page could not be fetched.
    """
    pages = page_count(total_items, client.config.page_size)
    logger.info(f"Reading {total_items} CMS shows in {pages} pages")

    index: dict[int, Show] = {}
    duplicates = 0

    for page in range(1, pages + 1):
        try:
            shows = client.fetch_children_page(root, page)
        except Exception as e:
            raise IndexBuildError(
                f"Failed to fetch CMS page {page}/{pages}: {e}",
                details={"page": page, "pages": pages, "original_error": str(e)}
            ) from e

        for show in shows:
            if show.external_id in index:
                duplicates += 1
                logger.warning(
                    f"Duplicate showId {show.external_id} in CMS: "
                    f"{index[show.external_id].destination_id} shadowed by {show.destination_id}"
                )
            index[show.external_id] = show

    if duplicates:
        logger.warning(f"{duplicates} CMS shows are shadowed by duplicates and will not be reconciled")

    logger.info(f"Indexed {len(index)} CMS shows")
    return MappingProxyType(index)
