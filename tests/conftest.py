"""Test configuration and fixtures"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from show_sync.cms.client import CmsRoot
from show_sync.core.config import (
    CatalogConfig,
    CmsConfig,
    Config,
    OutputConfig,
    SyncConfig,
)
from show_sync.sync.retry import RetryPolicy

CMS_BASE = "https://cms.test/"
CATALOG_URL = "https://catalog.test/shows"
ROOT_URL = "https://cms.test/content/root-1"


@pytest.fixture
def cms_config():
    """CMS settings pointing at a fake host"""
    return CmsConfig(
        base_url=CMS_BASE,
        project_alias="test-project",
        api_key="test-key",
        genre_element_type_key="genre-type-key",
    )


@pytest.fixture
def config(cms_config, tmp_path):
    """Complete configuration with fast retries"""
    return Config(
        catalog=CatalogConfig(base_url=CATALOG_URL),
        cms=cms_config,
        sync=SyncConfig(workers=2, retry_attempts=3, retry_initial_delay=0.01, retry_max_delay=0.04),
        output=OutputConfig(log_directory=Path(tmp_path) / "logs"),
    )


@pytest.fixture
def cms_root():
    """The show container node"""
    return CmsRoot.from_url(ROOT_URL)


@pytest.fixture
def retry_policy():
    """Retry policy that records sleeps instead of sleeping"""
    return RetryPolicy(attempts=3, initial_delay=0.1, max_delay=1.0, sleep=Mock())


@pytest.fixture
def make_response():
    """Factory for fake requests.Response objects"""
    def _make(status_code=200, json_data=None, text="", content=b""):
        response = Mock()
        response.status_code = status_code
        response.text = text
        response.content = content
        if json_data is None:
            response.json.side_effect = ValueError("No JSON object could be decoded")
        else:
            response.json.return_value = json_data
        return response
    return _make


@pytest.fixture
def mock_session():
    """requests.Session stand-in with a real headers dict"""
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def sample_catalog_item():
    """One show as delivered by the catalog"""
    return {
        "id": 169,
        "name": "Breaking Bad",
        "summary": "<p>A chemistry instructor turns to crime.</p>",
        "image": {
            "medium": "https://static.test/images/169.jpg",
            "original": "https://static.test/images/169-original.jpg",
        },
        "genres": ["Drama", "Crime", "Thriller"],
        "language": "English",
    }


@pytest.fixture
def sample_cms_item():
    """One show node as returned in the CMS children listing"""
    return {
        "_id": "node-169",
        "name": {"en-US": "Breaking Bad"},
        "showId": {"$invariant": "169"},
        "showSummary": {"en-US": {"markup": "<p>A chemistry instructor turns to crime.</p>"}},
        "showImage": {"$invariant": [{"mediaKey": "media-169"}]},
        "genres": {
            "$invariant": {
                "layout": {"Umbraco.BlockList": [{"contentUdi": "umb://element/aa"}]},
                "contentData": [
                    {"udi": "umb://element/aa", "indexNumber": "0", "title": "Drama"},
                    {"udi": "umb://element/bb", "indexNumber": "1", "title": "Crime"},
                ],
            }
        },
    }
