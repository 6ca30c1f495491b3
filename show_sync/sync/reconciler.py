"""
Reconciliation of catalog shows against the CMS.

For each catalog show the Reconciler looks up the CMS index by external id
and decides what to do:

    Exists in CMS:
        - no image yet      -> try to upload one; a new key makes it dirty
        - title or summary differ -> copy catalog values, dirty
        - dirty             -> PUT the node          (UPDATED)
        - otherwise         -> no request at all     (UNCHANGED)

    Absent from CMS:
        - try to upload the image (failure is not fatal)
        - POST a new node                            (CREATED)

Genres of existing shows are neither compared nor refreshed; the update
body carries the genres currently stored in the CMS.

The index is read-only. Changes are made on a copy of the CMS show and
written straight to the CMS, so a second catalog show with the same id in
the same run still sees the pre-run state.
"""

from dataclasses import replace
from typing import Mapping

from show_sync.cms.blocks import build_show_document
from show_sync.cms.client import CmsClient, CmsRoot
from show_sync.cms.media import MediaUploader
from show_sync.core.exceptions import RetryExhaustedError
from show_sync.core.logger import get_logger, log_sync_failure
from show_sync.models import EntityResult, Show, SyncAction
from show_sync.sync.retry import RetryPolicy

logger = get_logger(__name__)


class Reconciler:
    """
    Decides and performs the CMS writes for catalog shows.

    Attributes:
        _index: Read-only CMS index (external_id -> Show).
        _client: CMS client for writes.
        _uploader: Media uploader for images.
        _root: Container node of the shows (parentId of new nodes).
        _retry: Retry policy applied to uploads and writes.

    Thread Safety:
        reconcile() may run concurrently; it only reads shared state.
    """

    def __init__(
        self,
        index: Mapping[int, Show],
        client: CmsClient,
        uploader: MediaUploader,
        root: CmsRoot,
        retry: RetryPolicy
    ) -> None:
        self._index = index
        self._client = client
        self._uploader = uploader
        self._root = root
        self._retry = retry

    def reconcile(self, source: Show) -> EntityResult:
        """
        Bring the CMS in line with one catalog show.

        Returns:
            EntityResult describing what was done. Never raises for
            upload or write failures; those are reported in the result.
        """
        existing = self._index.get(source.external_id)
        if existing is None:
            return self._create(source)
        return self._update(existing, source)

    def _update(self, existing: Show, source: Show) -> EntityResult:
        dirty = False
        image_uploaded = False
        target = existing

        if not existing.image_key:
            key = self._upload_image(source)
            if key:
                target = replace(target, image_key=key)
                image_uploaded = True
                dirty = True

        if existing.title != source.title or existing.summary != source.summary:
            target = replace(target, title=source.title, summary=source.summary)
            dirty = True

        if not dirty:
            return EntityResult(source.external_id, source.title, SyncAction.UNCHANGED)

        logger.debug(f"Updating show {source.external_id} ({source.title})")
        document = self._document(target)
        return self._write(
            target,
            "update",
            lambda: self._client.update_content(existing.destination_id, document),
            SyncAction.UPDATED,
            image_uploaded
        )

    def _create(self, source: Show) -> EntityResult:
        target = source
        image_uploaded = False

        key = self._upload_image(source)
        if key:
            target = replace(source, image_key=key)
            image_uploaded = True

        logger.debug(f"Creating show {source.external_id} ({source.title})")
        document = self._document(target)
        return self._write(
            target,
            "create",
            lambda: self._client.create_content(document),
            SyncAction.CREATED,
            image_uploaded
        )

    def _upload_image(self, source: Show) -> str:
        """Upload the catalog image; "" when skipped or failed."""
        try:
            return self._retry.run(
                lambda: self._uploader.upload(source.title, source.image_url),
                description=f"image upload for show {source.external_id}"
            )
        except RetryExhaustedError as e:
            logger.warning(f"Image upload failed for show {source.external_id} ({source.title}): {e}")
            return ""

    def _write(self, target, operation, send, success_action, image_uploaded) -> EntityResult:
        try:
            responded = self._retry.run(
                send, description=f"{operation} of show {target.external_id}"
            )
        except RetryExhaustedError as e:
            log_sync_failure(logger, target.external_id, target.title, operation, str(e))
            return EntityResult(
                target.external_id, target.title, SyncAction.FAILED, image_uploaded, str(e)
            )

        if not responded:
            return EntityResult(
                target.external_id,
                target.title,
                SyncAction.SKIPPED,
                image_uploaded,
                f"{operation} returned no response"
            )
        return EntityResult(target.external_id, target.title, success_action, image_uploaded)

    def _document(self, show: Show) -> dict:
        config = self._client.config
        return build_show_document(
            show,
            parent_id=self._root.id,
            language=config.language,
            content_type_alias=config.content_type_alias,
            element_type_key=config.genre_element_type_key,
        )
