"""
Data models for show-sync.

This module defines the canonical Show entity shared by both APIs, and the
result types produced by a sync run.

Design Decisions:
    - Show and Tag are frozen (immutable). The destination index is shared
      by all workers; a worker that needs to change a show works on a copy
      made with dataclasses.replace(), so the index is never mutated.
    - Factories map each API's field layout to the same canonical shape.
    - Outcomes are explicit values (EntityResult, PageResult) aggregated in
      SyncStats, instead of being visible only in log output.

Usage:
    from show_sync.models import Show

    show = Show.from_catalog_api(catalog_item)
    existing = Show.from_cms_api(cms_item, language="en-US")
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Tag:
    """
    One genre of a show.

    Attributes:
        index: Position within the owning show's tag list (display order).
        title: Genre name, e.g. "Drama".
    """
    index: int
    title: str


def _field(value: Any, key: str) -> Any:
    """value[key] if value is an object, else None."""
    return value.get(key) if isinstance(value, dict) else None


def _text(value: Any) -> str:
    """Strings pass through; null and any other JSON type become ""."""
    return value if isinstance(value, str) else ""


def tags_from_titles(titles: list[Any]) -> tuple[Tag, ...]:
    """Build an ordered tag tuple where tags[i].index == i."""
    return tuple(Tag(index=i, title=str(title)) for i, title in enumerate(titles))


@dataclass(frozen=True)
class Show:
    """
    Immutable canonical representation of a show.

    Attributes:
        external_id: Catalog id, the join key between catalog and CMS.
                     Example: 169
        destination_id: Id assigned by the CMS. Empty for catalog shows
                        that were never created.
        title: Show name.
                Example: "Breaking Bad"
        summary: HTML summary as delivered by the catalog.
        image_url: Absolute URL of the medium resolution image. May be empty.
        image_key: CMS media key of the uploaded image. Empty until an
                   upload succeeded.
        tags: Ordered genres.
    """
    external_id: int
    title: str
    summary: str = ""
    destination_id: str = ""
    image_url: str = ""
    image_key: str = ""
    tags: tuple[Tag, ...] = field(default_factory=tuple)

    @classmethod
    def from_catalog_api(cls, item: dict[str, Any]) -> "Show":
        """
        Create a Show from one element of a catalog page.

        Consumed fields: id, name, summary, image.medium, genres.
        The catalog sends null for a missing summary or image. Optional
        fields of the wrong JSON type are treated as missing.

        Raises:
            KeyError: If 'id' is missing.
            ValueError: If 'id' is not an integer.
        """
        genres = item.get("genres")
        return cls(
            external_id=int(item["id"]),
            title=_text(item.get("name")),
            summary=_text(item.get("summary")),
            image_url=_text(_field(item.get("image"), "medium")),
            tags=tags_from_titles(genres if isinstance(genres, list) else []),
        )

    @classmethod
    def from_cms_api(cls, item: dict[str, Any], language: str) -> "Show":
        """
        Create a Show from one element of '_embedded.content' in the CMS.

        Field paths:
            _id                                   -> destination_id
            showId.$invariant                     -> external_id
            name.{language}                       -> title
            showSummary.{language}.markup         -> summary
            genres.$invariant.contentData[].title -> tags
            showImage.$invariant[0].mediaKey      -> image_key

        Raises:
            ValueError: If showId is missing or not numeric. Such nodes
                        cannot be joined with the catalog.
        """
        raw_id = _field(item.get("showId"), "$invariant")
        if raw_id is None or not str(raw_id).strip().lstrip("-").isdigit():
            raise ValueError(f"CMS node {item.get('_id', '?')} has no valid showId: {raw_id!r}")

        summary = _field(item.get("showSummary"), language)
        if isinstance(summary, dict):
            summary = summary.get("markup")

        content_data = _field(_field(item.get("genres"), "$invariant"), "contentData")
        if not isinstance(content_data, list):
            content_data = []
        titles = [_text(entry.get("title")) for entry in content_data if isinstance(entry, dict)]

        images = _field(item.get("showImage"), "$invariant")
        image_key = ""
        if isinstance(images, list) and images and isinstance(images[0], dict):
            image_key = _text(images[0].get("mediaKey"))

        return cls(
            external_id=int(str(raw_id).strip()),
            destination_id=_text(item.get("_id")),
            title=_text(_field(item.get("name"), language)),
            summary=_text(summary),
            image_key=image_key,
            tags=tags_from_titles(titles),
        )


class SyncAction(Enum):
    """Outcome of reconciling one catalog show."""
    UNCHANGED = "unchanged"  # Present in CMS and up to date, no write
    UPDATED = "updated"      # Present in CMS, PUT succeeded
    CREATED = "created"      # Absent from CMS, POST succeeded
    SKIPPED = "skipped"      # Write produced no response at all
    FAILED = "failed"        # Write failed after all retries


@dataclass(frozen=True)
class EntityResult:
    """
    Result of reconciling one show.

    Attributes:
        external_id: Catalog id of the show.
        title: Show title (for reports).
        action: What happened.
        image_uploaded: True if a media upload succeeded for this show.
        reason: Error description for FAILED / SKIPPED results.
    """
    external_id: int
    title: str
    action: SyncAction
    image_uploaded: bool = False
    reason: str | None = None


@dataclass(frozen=True)
class PageResult:
    """
    Result of processing one catalog page.

    Attributes:
        page: Catalog page index.
        results: One EntityResult per show on the page.
        end_of_data: True if the catalog reported there is no such page.
        error: Description of a page-level failure (fetch/decode), if any.
    """
    page: int
    results: tuple[EntityResult, ...] = ()
    end_of_data: bool = False
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class SyncStats:
    """
    Aggregate statistics of a sync run.

    Thread Safety:
        add_page() may be called concurrently from worker threads.
    """
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    images_uploaded: int = 0
    pages_processed: int = 0
    pages_failed: int = 0
    failures: list[EntityResult] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_page(self, page_result: PageResult) -> None:
        """Fold one page's outcome into the totals."""
        with self._lock:
            if page_result.end_of_data:
                return
            if page_result.failed:
                self.pages_failed += 1
                return
            self.pages_processed += 1
            for result in page_result.results:
                self._add_entity(result)

    def _add_entity(self, result: EntityResult) -> None:
        if result.image_uploaded:
            self.images_uploaded += 1

        if result.action is SyncAction.CREATED:
            self.created += 1
        elif result.action is SyncAction.UPDATED:
            self.updated += 1
        elif result.action is SyncAction.UNCHANGED:
            self.unchanged += 1
        elif result.action is SyncAction.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
            self.failures.append(result)

    @property
    def total(self) -> int:
        return self.created + self.updated + self.unchanged + self.skipped + self.failed

    @property
    def writes(self) -> int:
        """Number of successful CMS writes (creates plus updates)."""
        return self.created + self.updated
