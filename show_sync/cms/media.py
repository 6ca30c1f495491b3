"""
Image upload for show-sync.

Copies a show's image from the catalog's image host into the CMS media
library and returns the media key to reference from the show node.

Workflow:
    1. Check the URL scheme (only http/https are downloadable)
    2. Build a filesystem-safe filename from the show name + ".jpg"
    3. Download the image bytes
    4. POST them to the CMS as multipart (JSON metadata + file part)
    5. Return the media '_id'

An unsupported or empty URL can never succeed, so upload() returns an
empty key instead of raising. Retrying it would only waste attempts.
"""

from urllib.parse import urlparse

import requests
from yt_dlp.utils import sanitize_filename

from show_sync.cms.client import CmsClient
from show_sync.core.exceptions import CmsError, UploadError
from show_sync.core.logger import get_logger

logger = get_logger(__name__)


IMAGE_EXTENSION = ".jpg"
IMAGE_MEDIA_TYPE = "Image"
SUPPORTED_SCHEMES = ("http", "https")


def image_filename(name: str) -> str:
    """
    Build the media filename for a show name.

    Uses yt-dlp's restricted sanitization, which replaces every character
    that is unsafe in filenames with an underscore.

    Example:
        image_filename("Breaking Bad")  # "Breaking_Bad.jpg"
    """
    safe_name = sanitize_filename(name, restricted=True) or "image"
    return safe_name + IMAGE_EXTENSION


class MediaUploader:
    """
    Downloads images and uploads them as CMS media.

    Attributes:
        _client: CMS client used for the media endpoint.
        _download_session: Plain session for the image host. It must not
                           carry the CMS auth headers.
        _timeout: Timeout of the image download in seconds.
    """

    def __init__(
        self,
        client: CmsClient,
        download_session: requests.Session | None = None,
        timeout: float = 10.0
    ) -> None:
        self._client = client
        self._download_session = download_session or requests.Session()
        self._timeout = timeout

    def upload(self, name: str, image_url: str) -> str:
        """
        Upload the image at image_url and return its media key.

        Args:
            name: Human-readable name (the show title).
            image_url: Absolute image URL.

        Returns:
            The media key, or "" if the URL is empty or its scheme is
            not http(s).

        Raises:
            UploadError: If download or upload failed. Retryable.
        """
        scheme = urlparse(image_url).scheme.lower() if image_url else ""
        if scheme not in SUPPORTED_SCHEMES:
            logger.debug(f"Skipping image for '{name}': unsupported URL {image_url!r}")
            return ""

        filename = image_filename(name)
        data = self._download(image_url)

        metadata = {
            "mediaTypeAlias": IMAGE_MEDIA_TYPE,
            "name": filename,
            "umbracoFile": {"src": filename},
        }

        try:
            key = self._client.create_media(filename, metadata, data)
        except (CmsError, requests.RequestException) as e:
            raise UploadError(
                f"Failed to upload image for '{name}': {e}",
                details={"url": image_url, "filename": filename, "original_error": str(e)}
            ) from e

        logger.debug(f"Uploaded image for '{name}' as {key}")
        return key

    def _download(self, image_url: str) -> bytes:
        try:
            response = self._download_session.get(image_url, timeout=self._timeout)
        except requests.RequestException as e:
            raise UploadError(
                f"Failed to download image: {e}",
                details={"url": image_url, "original_error": str(e)}
            ) from e

        if response.status_code != 200:
            raise UploadError(
                f"Image download returned status {response.status_code}",
                details={"url": image_url, "status_code": response.status_code}
            )
        return response.content
