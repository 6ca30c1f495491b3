"""
CMS document serialization.

The CMS stores repeated nested content (the genres of a show) as a block
list: two index-aligned arrays, a layout listing element references and a
contentData array holding one record per element. Every element needs a
fresh reference, so each serialization generates new ids.

    "genres": {
      "$invariant": {
        "layout": {
          "Umbraco.BlockList": [
            {"contentUdi": "umb://element/9f1c...e2"}
          ]
        },
        "contentData": [
          {
            "contentTypeKey": "<genre element type key>",
            "udi": "umb://element/9f1c...e2",
            "indexNumber": "0",
            "title": "Drama"
          }
        ]
      }
    }

A show without genres omits the "genres" property entirely.
"""

import uuid
from typing import Any, Callable, Sequence

from show_sync.models import Show, Tag


ELEMENT_UDI_PREFIX = "umb://element/"
BLOCK_LIST_EDITOR = "Umbraco.BlockList"
INVARIANT = "$invariant"


def new_block_id() -> str:
    """Return a random 128-bit id as 32 lowercase hex characters."""
    return uuid.uuid4().hex


def serialize_tags(
    tags: Sequence[Tag],
    element_type_key: str,
    id_factory: Callable[[], str] = new_block_id
) -> dict[str, Any] | None:
    """
    Serialize tags into the block list shape.

    Args:
        tags: Ordered tags. Order of the output follows this order.
        element_type_key: contentTypeKey of the genre element type.
        id_factory: Generator of element ids, replaced in tests.

    Returns:
        {"layout": {...}, "contentData": [...]} or None for no tags.
    """
    if not tags:
        return None

    layout = []
    content_data = []
    for tag in tags:
        udi = ELEMENT_UDI_PREFIX + id_factory()
        layout.append({"contentUdi": udi})
        content_data.append({
            "contentTypeKey": element_type_key,
            "udi": udi,
            "indexNumber": str(tag.index),
            "title": tag.title,
        })

    return {
        "layout": {BLOCK_LIST_EDITOR: layout},
        "contentData": content_data,
    }


def build_show_document(
    show: Show,
    parent_id: str,
    language: str,
    content_type_alias: str,
    element_type_key: str,
    id_factory: Callable[[], str] = new_block_id
) -> dict[str, Any]:
    """
    Build the JSON body for creating or updating a show node.

    Args:
        show: The show to write.
        parent_id: Id of the root node the show lives under.
        language: Culture key of localized properties.
        content_type_alias: Document type alias of show nodes.
        element_type_key: contentTypeKey of the genre element type. Empty
                          leaves genres out of the document.
        id_factory: Generator of block element ids.

    Returns:
        A dict ready to be sent as JSON. String values are escaped by the
        JSON encoder, so titles and summaries may contain quotes.
    """
    document: dict[str, Any] = {
        "parentId": parent_id,
        "sortOrder": 0,
        "contentTypeAlias": content_type_alias,
        "name": {language: show.title},
        "showId": {INVARIANT: show.external_id},
        "showSummary": {language: show.summary},
        "showImage": {
            INVARIANT: [{"mediaKey": show.image_key}] if show.image_key else []
        },
    }

    # Genre blocks need the CMS element type; without it genres are left out
    if not element_type_key:
        return document

    genres = serialize_tags(show.tags, element_type_key, id_factory)
    if genres is not None:
        document["genres"] = {INVARIANT: genres}

    return document
