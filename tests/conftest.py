"""
Pytest configuration and shared fixtures for linkding CLI tests.

This module provides an in-memory implementation of the bookmark service
and sample data shared across test modules.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

import pytest

from linkding_cli.core.data_models import (
    BookmarkRecord,
    Bundle,
    Page,
    RemoteBookmark,
    RemoteTag,
    ResourceKind,
)
from linkding_cli.utils.error_handler import APIClientError, NotFoundError

BASE_URL = "https://links.example.com"
TEST_TOKEN = "abcdef1234567890"

FIXED_DATE = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_bookmark(bookmark_id: int, url: str, **kwargs: Any) -> RemoteBookmark:
    """Build a RemoteBookmark with stable timestamps."""
    values: Dict[str, Any] = {
        "title": f"Bookmark {bookmark_id}",
        "date_added": FIXED_DATE,
        "date_modified": FIXED_DATE,
    }
    values.update(kwargs)
    return RemoteBookmark(id=bookmark_id, url=url, **values)


# ============================================================================
# In-memory Service
# ============================================================================


class FakeLinkdingService:
    """
    In-memory stand-in for the linkding API client.

    Implements the BookmarkService protocol plus the single-resource calls
    used by the CLI, and records every call in ``calls``.
    """

    base_url = BASE_URL

    def __init__(
        self,
        bookmarks: Optional[Iterable[RemoteBookmark]] = None,
        tags: Optional[Iterable[RemoteTag]] = None,
        bundles: Optional[Iterable[Bundle]] = None,
    ):
        self.bookmarks: List[RemoteBookmark] = list(bookmarks or [])
        self.tags: List[RemoteTag] = list(tags or [])
        self.bundles: List[Bundle] = list(bundles or [])
        self.calls: List[tuple] = []
        self.fail_urls: Set[str] = set()
        self.fail_ids: Set[int] = set()
        self.fetch_error: Optional[Exception] = None
        self.profile: Dict[str, Any] = {"theme": "auto", "enable_sharing": True}
        self._next_id = max((b.id for b in self.bookmarks), default=0) + 1

    # -- BookmarkService ---------------------------------------------------

    def fetch_page(
        self,
        kind: ResourceKind,
        filters: Optional[Dict[str, Any]],
        offset: int,
        limit: int,
    ) -> Page:
        self.calls.append(("fetch_page", kind, offset, limit))
        if self.fetch_error is not None:
            raise self.fetch_error

        if kind is ResourceKind.BUNDLES:
            items: List[Any] = list(self.bundles)
        elif kind is ResourceKind.TAGS:
            items = list(self.tags)
        else:
            archived = kind is ResourceKind.ARCHIVED_BOOKMARKS
            items = [b for b in self.bookmarks if b.is_archived == archived]
            wanted = [t.lower() for t in (filters or {}).get("tags") or []]
            if wanted:
                items = [
                    b
                    for b in items
                    if all(t in {n.lower() for n in b.tag_names} for t in wanted)
                ]
            if (filters or {}).get("unread"):
                items = [b for b in items if b.unread]

        return Page(
            count=len(items),
            items=tuple(items[offset : offset + limit]),
            has_next=offset + limit < len(items),
        )

    def create_bookmark(self, record: BookmarkRecord) -> RemoteBookmark:
        self.calls.append(("create", record.url))
        if record.url in self.fail_urls:
            raise APIClientError(
                "Bad request: enter a valid URL", status_code=400, body="{}"
            )
        bookmark = make_bookmark(
            self._next_id,
            record.url,
            title=record.title,
            description=record.description,
            notes=record.notes,
            tag_names=list(record.tag_names),
            unread=record.unread,
            shared=record.shared,
            is_archived=record.archived,
        )
        self._next_id += 1
        self.bookmarks.append(bookmark)
        return bookmark

    def update_bookmark(self, bookmark_id: int, fields: Dict[str, Any]) -> RemoteBookmark:
        self.calls.append(("update", bookmark_id, dict(fields)))
        bookmark = self.get_bookmark(bookmark_id)
        if bookmark_id in self.fail_ids or bookmark.url in self.fail_urls:
            raise APIClientError(
                "API error (status 422): rejected", status_code=422, body="rejected"
            )
        for key, value in fields.items():
            setattr(bookmark, key, list(value) if key == "tag_names" else value)
        return bookmark

    # -- CLI extras ----------------------------------------------------------

    def test_connection(self) -> None:
        self.calls.append(("test_connection",))

    def get_user_profile(self) -> Dict[str, Any]:
        self.calls.append(("profile",))
        return dict(self.profile)

    def get_bookmarks(
        self,
        query: str = "",
        tags: Iterable[str] = (),
        unread: bool = False,
        archived: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> Page:
        kind = ResourceKind.ARCHIVED_BOOKMARKS if archived else ResourceKind.BOOKMARKS
        filters = {"query": query, "tags": list(tags), "unread": unread}
        return self.fetch_page(kind, filters, offset, limit)

    def get_bookmark(self, bookmark_id: int) -> RemoteBookmark:
        for bookmark in self.bookmarks:
            if bookmark.id == bookmark_id:
                return bookmark
        raise NotFoundError(
            f"Bookmark with ID {bookmark_id} not found", status_code=404
        )

    def delete_bookmark(self, bookmark_id: int) -> None:
        self.calls.append(("delete", bookmark_id))
        bookmark = self.get_bookmark(bookmark_id)
        self.bookmarks.remove(bookmark)

    # -- Bundles -------------------------------------------------------------

    def get_bundle(self, bundle_id: int) -> Bundle:
        for bundle in self.bundles:
            if bundle.id == bundle_id:
                return bundle
        raise NotFoundError(f"Bundle with ID {bundle_id} not found", status_code=404)

    def create_bundle(self, name: str, **fields: Any) -> Bundle:
        self.calls.append(("create_bundle", name, dict(fields)))
        bundle = Bundle(
            id=max((b.id for b in self.bundles), default=0) + 1,
            name=name,
            date_created=FIXED_DATE,
            date_modified=FIXED_DATE,
            **fields,
        )
        self.bundles.append(bundle)
        return bundle

    def update_bundle(self, bundle_id: int, fields: Dict[str, Any]) -> Bundle:
        self.calls.append(("update_bundle", bundle_id, dict(fields)))
        bundle = self.get_bundle(bundle_id)
        for key, value in fields.items():
            setattr(bundle, key, value)
        return bundle

    def delete_bundle(self, bundle_id: int) -> None:
        self.calls.append(("delete_bundle", bundle_id))
        self.bundles.remove(self.get_bundle(bundle_id))

    # -- Inspection ------------------------------------------------------------

    @property
    def mutations(self) -> List[tuple]:
        """Every create, update and delete call, in order."""
        return [c for c in self.calls if c[0] in ("create", "update", "delete")]

    @property
    def fetch_calls(self) -> List[tuple]:
        return [c for c in self.calls if c[0] == "fetch_page"]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def bookmark_factory():
    """Factory for RemoteBookmark instances."""
    return make_bookmark


@pytest.fixture
def service_factory():
    """The FakeLinkdingService class, for tests that need a custom dataset."""
    return FakeLinkdingService


@pytest.fixture
def sample_bookmarks() -> List[RemoteBookmark]:
    """Two active bookmarks and one archived bookmark."""
    return [
        make_bookmark(
            1,
            "https://example.com/python",
            title="Python",
            tag_names=["python", "programming"],
            unread=True,
        ),
        make_bookmark(
            2,
            "https://example.com/rust",
            title="Rust",
            description="Systems programming",
            tag_names=["rust", "programming"],
            shared=True,
        ),
        make_bookmark(
            3,
            "https://example.com/archive",
            title="Old Python notes",
            notes="kept for reference",
            tag_names=["Python"],
            is_archived=True,
        ),
    ]


@pytest.fixture
def sample_tags() -> List[RemoteTag]:
    return [
        RemoteTag(id=1, name="python", date_added=FIXED_DATE),
        RemoteTag(id=2, name="programming", date_added=FIXED_DATE),
        RemoteTag(id=3, name="rust", date_added=FIXED_DATE),
        RemoteTag(id=4, name="unused", date_added=FIXED_DATE),
    ]


@pytest.fixture
def sample_bundles() -> List[Bundle]:
    return [
        Bundle(
            id=1,
            name="Work",
            search="project",
            any_tags="python rust",
            order=1,
            date_created=FIXED_DATE,
            date_modified=FIXED_DATE,
        ),
        Bundle(id=2, name="Reading", excluded_tags="archive", order=2),
    ]


@pytest.fixture
def empty_service() -> FakeLinkdingService:
    """Service with no bookmarks and no tags."""
    return FakeLinkdingService()


@pytest.fixture
def populated_service(
    sample_bookmarks, sample_tags, sample_bundles
) -> FakeLinkdingService:
    """Service holding the sample bookmarks, tags and bundles."""
    return FakeLinkdingService(sample_bookmarks, sample_tags, sample_bundles)
