"""
CMS module for show-sync.

This module provides everything that talks to or formats data for the
CMS content API:
    - client: Authenticated content and media endpoints
    - index: Read-only index of all stored shows
    - media: Image download and media upload
    - blocks: Request bodies, including the genre block list

Usage:
    from show_sync.cms import CmsClient, MediaUploader, build_destination_index

    client = CmsClient(config.cms)
    root = client.discover_root()
    index = build_destination_index(client, root, client.count_children(root))
"""

from show_sync.cms.blocks import build_show_document, serialize_tags
from show_sync.cms.client import CmsClient, CmsRoot
from show_sync.cms.index import build_destination_index, page_count
from show_sync.cms.media import MediaUploader, image_filename

__all__ = [
    # Client
    "CmsClient",
    "CmsRoot",
    # Index
    "build_destination_index",
    "page_count",
    # Media
    "MediaUploader",
    "image_filename",
    # Documents
    "build_show_document",
    "serialize_tags",
]
