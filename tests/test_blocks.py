"""Test CMS request bodies and the genre block list"""

import itertools
import json
import re

from show_sync.cms.blocks import build_show_document, new_block_id, serialize_tags
from show_sync.models import Show, tags_from_titles


def _counter_ids():
    counter = itertools.count(1)
    return lambda: f"{next(counter):032x}"


class TestSerializeTags:
    """Test serialize_tags()"""

    def test_layout_and_content_are_aligned(self):
        tags = tags_from_titles(["Drama", "Action", "Comedy"])
        blocks = serialize_tags(tags, "genre-key", _counter_ids())

        layout = blocks["layout"]["Umbraco.BlockList"]
        content = blocks["contentData"]

        assert len(layout) == 3
        assert len(content) == 3
        for i, (entry, data) in enumerate(zip(layout, content)):
            assert entry["contentUdi"] == data["udi"]
            assert data["udi"].startswith("umb://element/")
            assert data["indexNumber"] == str(i)
            assert data["contentTypeKey"] == "genre-key"
        assert [data["title"] for data in content] == ["Drama", "Action", "Comedy"]

    def test_empty_tags_return_none(self):
        assert serialize_tags((), "genre-key") is None

    def test_ids_are_unique_hex(self):
        tags = tags_from_titles(["A", "B", "C", "D"])
        blocks = serialize_tags(tags, "genre-key")

        ids = [data["udi"][len("umb://element/"):] for data in blocks["contentData"]]
        assert len(set(ids)) == 4
        for block_id in ids:
            assert re.fullmatch(r"[0-9a-f]{32}", block_id)

    def test_new_block_id(self):
        assert re.fullmatch(r"[0-9a-f]{32}", new_block_id())


class TestBuildShowDocument:
    """Test build_show_document()"""

    def _build(self, show):
        return build_show_document(
            show,
            parent_id="root-1",
            language="en-US",
            content_type_alias="tVShow",
            element_type_key="genre-key",
            id_factory=_counter_ids(),
        )

    def test_full_document(self):
        show = Show(
            external_id=169,
            title="Breaking Bad",
            summary="<p>Chemistry.</p>",
            image_key="media-1",
            tags=tags_from_titles(["Drama"]),
        )
        document = self._build(show)

        assert document["parentId"] == "root-1"
        assert document["sortOrder"] == 0
        assert document["contentTypeAlias"] == "tVShow"
        assert document["name"] == {"en-US": "Breaking Bad"}
        assert document["showId"] == {"$invariant": 169}
        assert document["showSummary"] == {"en-US": "<p>Chemistry.</p>"}
        assert document["showImage"] == {"$invariant": [{"mediaKey": "media-1"}]}
        assert document["genres"]["$invariant"]["contentData"][0]["title"] == "Drama"

    def test_show_without_tags_omits_genres(self):
        document = self._build(Show(external_id=1, title="Untagged"))

        assert "genres" not in document
        assert document["showImage"] == {"$invariant": []}

    def test_quotes_survive_json_encoding(self):
        """Titles with quotes must still produce valid JSON"""
        show = Show(external_id=2, title='The "Office"', summary='<p class="x">He said "hi"</p>')
        encoded = json.dumps(self._build(show))

        decoded = json.loads(encoded)
        assert decoded["name"]["en-US"] == 'The "Office"'
        assert decoded["showSummary"]["en-US"] == '<p class="x">He said "hi"</p>'

    def test_without_element_type_genres_are_omitted(self):
        show = Show(external_id=3, title="Tagged", tags=tags_from_titles(["Drama", "Comedy"]))

        document = build_show_document(
            show,
            parent_id="root-1",
            language="en-US",
            content_type_alias="tVShow",
            element_type_key="",
        )

        assert "genres" not in document
        assert document["name"] == {"en-US": "Tagged"}
