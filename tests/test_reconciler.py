"""Test per-show reconciliation"""

from types import MappingProxyType
from unittest.mock import Mock

import pytest

from show_sync.core.exceptions import CmsError, UploadError
from show_sync.models import Show, SyncAction, tags_from_titles
from show_sync.sync.reconciler import Reconciler


@pytest.fixture
def cms_client(cms_config):
    client = Mock()
    client.config = cms_config
    client.create_content.return_value = True
    client.update_content.return_value = True
    return client


@pytest.fixture
def uploader():
    uploader = Mock()
    uploader.upload.return_value = "media-new"
    return uploader


@pytest.fixture
def catalog_show(sample_catalog_item):
    return Show.from_catalog_api(sample_catalog_item)


def _reconciler(index, cms_client, uploader, cms_root, retry_policy):
    return Reconciler(MappingProxyType(index), cms_client, uploader, cms_root, retry_policy)


def _stored(document, destination_id, language="en-US"):
    """What the CMS would return for a node written with document"""
    return Show.from_cms_api(dict(document, _id=destination_id), language)


class TestCreate:
    """Shows absent from the CMS"""

    def test_creates_with_image(self, cms_client, uploader, cms_root, retry_policy, catalog_show):
        reconciler = _reconciler({}, cms_client, uploader, cms_root, retry_policy)

        result = reconciler.reconcile(catalog_show)

        assert result.action is SyncAction.CREATED
        assert result.image_uploaded is True
        uploader.upload.assert_called_once_with("Breaking Bad", "https://static.test/images/169.jpg")
        cms_client.update_content.assert_not_called()

        document = cms_client.create_content.call_args[0][0]
        assert document["parentId"] == "root-1"
        assert document["showId"] == {"$invariant": 169}
        assert document["showImage"] == {"$invariant": [{"mediaKey": "media-new"}]}
        titles = [d["title"] for d in document["genres"]["$invariant"]["contentData"]]
        assert titles == ["Drama", "Crime", "Thriller"]

    def test_upload_failure_is_not_fatal(
        self, cms_client, uploader, cms_root, retry_policy, catalog_show
    ):
        uploader.upload.side_effect = UploadError("image host down")
        reconciler = _reconciler({}, cms_client, uploader, cms_root, retry_policy)

        result = reconciler.reconcile(catalog_show)

        assert result.action is SyncAction.CREATED
        assert result.image_uploaded is False
        assert uploader.upload.call_count == 3
        document = cms_client.create_content.call_args[0][0]
        assert document["showImage"] == {"$invariant": []}

    def test_write_failure_after_retries(
        self, cms_client, uploader, cms_root, retry_policy, catalog_show
    ):
        cms_client.create_content.side_effect = CmsError("server error", status_code=500)
        reconciler = _reconciler({}, cms_client, uploader, cms_root, retry_policy)

        result = reconciler.reconcile(catalog_show)

        assert result.action is SyncAction.FAILED
        assert "all 3 retry attempts failed" in result.reason
        assert cms_client.create_content.call_count == 3

    def test_no_response_is_skipped(self, cms_client, uploader, cms_root, retry_policy, catalog_show):
        cms_client.create_content.return_value = False
        reconciler = _reconciler({}, cms_client, uploader, cms_root, retry_policy)

        result = reconciler.reconcile(catalog_show)

        assert result.action is SyncAction.SKIPPED
        cms_client.create_content.assert_called_once()


class TestUpdate:
    """Shows already present in the CMS"""

    def test_unchanged_show_sends_nothing(
        self, cms_client, uploader, cms_root, retry_policy, catalog_show
    ):
        existing = Show(
            external_id=169,
            destination_id="node-169",
            title=catalog_show.title,
            summary=catalog_show.summary,
            image_key="media-169",
        )
        reconciler = _reconciler({169: existing}, cms_client, uploader, cms_root, retry_policy)

        result = reconciler.reconcile(catalog_show)

        assert result.action is SyncAction.UNCHANGED
        uploader.upload.assert_not_called()
        cms_client.create_content.assert_not_called()
        cms_client.update_content.assert_not_called()

    def test_changed_title_updates_and_keeps_genres(
        self, cms_client, uploader, cms_root, retry_policy, catalog_show
    ):
        existing = Show(
            external_id=169,
            destination_id="node-169",
            title="Breaking Bad (old)",
            summary=catalog_show.summary,
            image_key="media-169",
            tags=tags_from_titles(["Drama"]),
        )
        reconciler = _reconciler({169: existing}, cms_client, uploader, cms_root, retry_policy)

        result = reconciler.reconcile(catalog_show)

        assert result.action is SyncAction.UPDATED
        uploader.upload.assert_not_called()
        destination_id, document = cms_client.update_content.call_args[0]
        assert destination_id == "node-169"
        assert document["name"] == {"en-US": "Breaking Bad"}
        assert document["showImage"] == {"$invariant": [{"mediaKey": "media-169"}]}
        titles = [d["title"] for d in document["genres"]["$invariant"]["contentData"]]
        assert titles == ["Drama"]

    def test_missing_image_is_uploaded(
        self, cms_client, uploader, cms_root, retry_policy, catalog_show
    ):
        existing = Show(
            external_id=169,
            destination_id="node-169",
            title=catalog_show.title,
            summary=catalog_show.summary,
        )
        reconciler = _reconciler({169: existing}, cms_client, uploader, cms_root, retry_policy)

        result = reconciler.reconcile(catalog_show)

        assert result.action is SyncAction.UPDATED
        assert result.image_uploaded is True
        document = cms_client.update_content.call_args[0][1]
        assert document["showImage"] == {"$invariant": [{"mediaKey": "media-new"}]}

    def test_missing_image_without_url_stays_unchanged(
        self, cms_client, uploader, cms_root, retry_policy
    ):
        uploader.upload.return_value = ""
        existing = Show(external_id=5, destination_id="node-5", title="Obscure")
        reconciler = _reconciler({5: existing}, cms_client, uploader, cms_root, retry_policy)

        result = reconciler.reconcile(Show(external_id=5, title="Obscure"))

        assert result.action is SyncAction.UNCHANGED
        uploader.upload.assert_called_once()
        cms_client.update_content.assert_not_called()


class TestIdempotence:
    """A second run over unchanged data writes nothing"""

    def test_second_run_has_no_writes(
        self, cms_client, uploader, cms_root, retry_policy, catalog_show
    ):
        first = _reconciler({}, cms_client, uploader, cms_root, retry_policy)
        assert first.reconcile(catalog_show).action is SyncAction.CREATED
        stored = _stored(cms_client.create_content.call_args[0][0], "node-169")

        cms_client.reset_mock()
        uploader.reset_mock()
        second = _reconciler({169: stored}, cms_client, uploader, cms_root, retry_policy)

        result = second.reconcile(catalog_show)

        assert result.action is SyncAction.UNCHANGED
        uploader.upload.assert_not_called()
        cms_client.create_content.assert_not_called()
        cms_client.update_content.assert_not_called()
