"""
Catalog module for show-sync.

Read-only client of the source TV show catalog. Pages are 0-indexed; a
404 marks the end of the catalog.

Usage:
    from show_sync.catalog import CatalogClient

    client = CatalogClient("https://api.tvmaze.com/shows")
    shows = client.fetch_page(0)   # list[Show], or None past the end
"""

from show_sync.catalog.client import CatalogClient

__all__ = [
    "CatalogClient",
]
