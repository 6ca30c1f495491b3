"""
Destination CMS client for show-sync.

Wraps the content management endpoints of the headless CMS used as the
destination store. Every request carries the two static authentication
headers from CmsConfig.

Endpoints:
    GET  {base}content                              root discovery
    GET  {root_url}/children                        _totalItems
    GET  {root_url}/children?page=N&pageSize=S      _embedded.content[]
    POST {base}content                              create show (201)
    PUT  {base}content/{id}                         update show (200)
    POST {base}media                                upload image (201)

Children pages are 1-indexed.

Usage:
    client = CmsClient(config.cms, timeout=10)
    root = client.discover_root()
    total = client.count_children(root)
    shows = client.fetch_children_page(root, 1)
"""

import json
from dataclasses import dataclass
from typing import Any

import requests

from show_sync.core.config import CmsConfig
from show_sync.core.exceptions import CmsError
from show_sync.core.logger import get_logger
from show_sync.models import Show

logger = get_logger(__name__)


@dataclass(frozen=True)
class CmsRoot:
    """
    The container node under which all shows live.

    Discovered once per run and passed explicitly to the components that
    need it.

    Attributes:
        url: Absolute URL of the root node.
        id: Last path segment of url, used as parentId of new shows.
    """
    url: str
    id: str

    @classmethod
    def from_url(cls, url: str) -> "CmsRoot":
        url = url.rstrip("/")
        return cls(url=url, id=url.rsplit("/", 1)[-1])


class CmsClient:
    """
    Authenticated access to the CMS content and media APIs.

    Attributes:
        _config: CMS settings (base URL, credentials, language, page size).
        _session: requests session with the auth headers installed.
        _timeout: Timeout of each request in seconds.
    """

    def __init__(
        self,
        config: CmsConfig,
        session: requests.Session | None = None,
        timeout: float = 10.0
    ) -> None:
        self._config = config
        self._session = session or requests.Session()
        self._session.headers.update(config.auth_headers)
        self._timeout = timeout

    @property
    def config(self) -> CmsConfig:
        return self._config

    # =========================================================================
    # Read Operations
    # =========================================================================

    def discover_root(self) -> CmsRoot:
        """
        Find the root container of the show nodes.

        Reads '_links.content' of the content listing and takes its second
        entry, which is the show container in this project's content tree.
        A single link object is accepted as well.

        Raises:
            CmsError: On non-200 status or if the link is missing.
        """
        data = self._get_json(self._config.base_url + "content")

        links = (data.get("_links") or {}).get("content")
        href = ""
        if isinstance(links, list) and len(links) > 1:
            href = (links[1] or {}).get("href") or ""
        elif isinstance(links, dict):
            href = links.get("href") or ""

        if not href:
            raise CmsError(
                "Could not find the root content link in the CMS response",
                details={"url": self._config.base_url + "content"}
            )

        root = CmsRoot.from_url(href)
        logger.debug(f"CMS root: {root.url} (id {root.id})")
        return root

    def count_children(self, root: CmsRoot) -> int:
        """
        Return the number of shows under root ('_totalItems').

        Raises:
            CmsError: On non-200 status or a missing/invalid count.
        """
        data = self._get_json(f"{root.url}/children")
        total = data.get("_totalItems")
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            raise CmsError(
                f"Invalid _totalItems in CMS response: {total!r}",
                details={"url": f"{root.url}/children"}
            )
        return total

    def fetch_children_page(self, root: CmsRoot, page: int) -> list[Show]:
        """
        Fetch one page of shows stored under root.

        Args:
            root: The show container.
            page: 1-indexed page number.

        Returns:
            The shows on the page. Nodes without a usable showId are
            dropped with a warning.

        Raises:
            CmsError: On non-200 status or an undecodable body.
            requests.RequestException: On network failures.
        """
        url = f"{root.url}/children"
        data = self._get_json(url, params={"page": page, "pageSize": self._config.page_size})

        items = (data.get("_embedded") or {}).get("content") or []
        shows = []
        for item in items:
            try:
                shows.append(Show.from_cms_api(item, self._config.language))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Ignoring CMS node on page {page}: {e}")
        return shows

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create_content(self, document: dict[str, Any]) -> bool:
        """
        Create a show node.

        Returns:
            True when the CMS answered 201. False when no response was
            received at all, which callers treat as a skipped write.

        Raises:
            CmsError: On any other status.
            requests.RequestException: On network failures.
        """
        response = self._session.post(
            self._config.base_url + "content",
            json=document,
            timeout=self._timeout
        )
        return self._check_write(response, expected=201, operation="create")

    def update_content(self, destination_id: str, document: dict[str, Any]) -> bool:
        """
        Replace the properties of an existing show node.

        Returns:
            True when the CMS answered 200, False when no response was
            received.

        Raises:
            CmsError: On any other status, or if destination_id is empty.
            requests.RequestException: On network failures.
        """
        if not destination_id:
            raise CmsError("Cannot update a show without a CMS id")

        response = self._session.put(
            f"{self._config.base_url}content/{destination_id}",
            json=document,
            timeout=self._timeout
        )
        return self._check_write(response, expected=200, operation="update")

    def create_media(self, filename: str, metadata: dict[str, Any], data: bytes) -> str:
        """
        Upload an image as a media item.

        The request is multipart/form-data with two parts:
            content      JSON metadata (media type alias, name, file src)
            umbracoFile  the image bytes

        Returns:
            The '_id' of the new media item.

        Raises:
            CmsError: On non-201 status or a response without '_id'.
            requests.RequestException: On network failures.
        """
        files = {
            "content": (None, json.dumps(metadata), "application/json"),
            "umbracoFile": (filename, data, "image/jpeg"),
        }
        response = self._session.post(
            self._config.base_url + "media",
            files=files,
            timeout=self._timeout
        )

        if response.status_code != 201:
            raise CmsError(
                f"Media upload returned status {response.status_code}",
                details={"filename": filename},
                status_code=response.status_code
            )

        try:
            media_id = response.json().get("_id")
        except (ValueError, AttributeError) as e:
            raise CmsError(
                "Media upload response is not a JSON object",
                details={"filename": filename, "original_error": str(e)},
                status_code=response.status_code
            ) from e

        if not media_id:
            raise CmsError(
                "Media upload response has no '_id'",
                details={"filename": filename},
                status_code=response.status_code
            )
        return str(media_id)

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._session.get(url, params=params, timeout=self._timeout)

        if response.status_code != 200:
            raise CmsError(
                f"CMS returned status {response.status_code} for {url}",
                details={"url": url, "params": params},
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise CmsError(
                f"CMS response from {url} is not valid JSON",
                details={"url": url, "original_error": str(e)},
                status_code=response.status_code
            ) from e

        if not isinstance(data, dict):
            raise CmsError(
                f"CMS response from {url} is not a JSON object",
                details={"url": url},
                status_code=response.status_code
            )
        return data

    @staticmethod
    def _check_write(response: requests.Response | None, expected: int, operation: str) -> bool:
        if response is None:
            logger.warning(f"CMS {operation} returned no response")
            return False

        if response.status_code != expected:
            raise CmsError(
                f"CMS {operation} returned status {response.status_code}, expected {expected}",
                details={"operation": operation, "body": response.text[:500]},
                status_code=response.status_code
            )
        return True
