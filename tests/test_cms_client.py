"""Test destination CMS client"""

import json

import pytest

from show_sync.cms.client import CmsClient, CmsRoot
from show_sync.core.exceptions import CmsError

ROOT_URL = "https://cms.test/content/root-1"


class TestCmsRoot:
    """Test CmsRoot parsing"""

    def test_from_url(self):
        root = CmsRoot.from_url("https://cms.test/content/root-1/")
        assert root.url == ROOT_URL
        assert root.id == "root-1"


class TestCmsClientReads:
    """Test discovery, counting and children pages"""

    def test_auth_headers_installed(self, cms_config, mock_session):
        CmsClient(cms_config, mock_session)

        assert mock_session.headers["umb-project-alias"] == "test-project"
        assert mock_session.headers["Api-Key"] == "test-key"

    def test_discover_root_uses_second_link(self, cms_config, mock_session, make_response):
        mock_session.get.return_value = make_response(200, {
            "_links": {"content": [
                {"href": "https://cms.test/content/home"},
                {"href": ROOT_URL},
            ]}
        })
        client = CmsClient(cms_config, mock_session)

        root = client.discover_root()

        assert root == CmsRoot(url=ROOT_URL, id="root-1")
        assert mock_session.get.call_args[0][0] == "https://cms.test/content"

    def test_discover_root_missing_link(self, cms_config, mock_session, make_response):
        mock_session.get.return_value = make_response(200, {"_links": {}})
        client = CmsClient(cms_config, mock_session)

        with pytest.raises(CmsError):
            client.discover_root()

    def test_discover_root_error_status(self, cms_config, mock_session, make_response):
        mock_session.get.return_value = make_response(401)
        client = CmsClient(cms_config, mock_session)

        with pytest.raises(CmsError) as exc_info:
            client.discover_root()
        assert exc_info.value.status_code == 401

    def test_count_children(self, cms_config, cms_root, mock_session, make_response):
        mock_session.get.return_value = make_response(200, {"_totalItems": 512})
        client = CmsClient(cms_config, mock_session)

        assert client.count_children(cms_root) == 512
        assert mock_session.get.call_args[0][0] == ROOT_URL + "/children"

    def test_count_children_invalid(self, cms_config, cms_root, mock_session, make_response):
        mock_session.get.return_value = make_response(200, {"_totalItems": "many"})
        client = CmsClient(cms_config, mock_session)

        with pytest.raises(CmsError):
            client.count_children(cms_root)

    def test_fetch_children_page(
        self, cms_config, cms_root, mock_session, make_response, sample_cms_item
    ):
        broken = dict(sample_cms_item, _id="node-x", showId={"$invariant": None})
        mock_session.get.return_value = make_response(
            200, {"_embedded": {"content": [sample_cms_item, broken]}}
        )
        client = CmsClient(cms_config, mock_session)

        shows = client.fetch_children_page(cms_root, 2)

        assert [show.destination_id for show in shows] == ["node-169"]
        mock_session.get.assert_called_once_with(
            ROOT_URL + "/children",
            params={"page": 2, "pageSize": 250},
            timeout=10.0
        )

    def test_fetch_children_page_without_embedded(
        self, cms_config, cms_root, mock_session, make_response
    ):
        mock_session.get.return_value = make_response(200, {"_totalItems": 0})
        client = CmsClient(cms_config, mock_session)

        assert client.fetch_children_page(cms_root, 1) == []


class TestCmsClientWrites:
    """Test content and media writes"""

    def test_create_content(self, cms_config, mock_session, make_response):
        mock_session.post.return_value = make_response(201)
        client = CmsClient(cms_config, mock_session)

        assert client.create_content({"name": {"en-US": "X"}}) is True
        args, kwargs = mock_session.post.call_args
        assert args[0] == "https://cms.test/content"
        assert kwargs["json"] == {"name": {"en-US": "X"}}

    def test_create_content_wrong_status(self, cms_config, mock_session, make_response):
        mock_session.post.return_value = make_response(400, text="Bad request")
        client = CmsClient(cms_config, mock_session)

        with pytest.raises(CmsError) as exc_info:
            client.create_content({})
        assert exc_info.value.status_code == 400

    def test_update_content(self, cms_config, mock_session, make_response):
        mock_session.put.return_value = make_response(200)
        client = CmsClient(cms_config, mock_session)

        assert client.update_content("node-169", {"x": 1}) is True
        assert mock_session.put.call_args[0][0] == "https://cms.test/content/node-169"

    def test_update_requires_id(self, cms_config, mock_session):
        client = CmsClient(cms_config, mock_session)

        with pytest.raises(CmsError):
            client.update_content("", {})
        mock_session.put.assert_not_called()

    def test_no_response_is_not_a_success(self, cms_config, mock_session):
        mock_session.put.return_value = None
        client = CmsClient(cms_config, mock_session)

        assert client.update_content("node-1", {}) is False

    def test_create_media(self, cms_config, mock_session, make_response):
        mock_session.post.return_value = make_response(201, {"_id": "media-9"})
        client = CmsClient(cms_config, mock_session)

        key = client.create_media("Show.jpg", {"name": "Show.jpg"}, b"\xff\xd8")

        assert key == "media-9"
        args, kwargs = mock_session.post.call_args
        assert args[0] == "https://cms.test/media"
        files = kwargs["files"]
        assert json.loads(files["content"][1]) == {"name": "Show.jpg"}
        assert files["content"][2] == "application/json"
        assert files["umbracoFile"] == ("Show.jpg", b"\xff\xd8", "image/jpeg")

    def test_create_media_without_id(self, cms_config, mock_session, make_response):
        mock_session.post.return_value = make_response(201, {})
        client = CmsClient(cms_config, mock_session)

        with pytest.raises(CmsError):
            client.create_media("Show.jpg", {}, b"")
