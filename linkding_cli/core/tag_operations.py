"""
Tag listing, renaming and removal.

Counting fetches all tags and all bookmarks once and counts in memory.
Rename and removal rewrite the tag list of every affected bookmark.
"""

import logging
from collections import Counter
from typing import Any, Callable, Dict, List, Optional

from .data_models import RemoteBookmark, TagCount, merge_tags
from .pagination import PaginationAggregator, fetch_all_bookmarks, fetch_all_tags
from .protocol import BookmarkService, BulkUpdateResult
from ..utils.error_handler import ServiceError

SORT_KEYS = ("name", "count")

TagProgressCallback = Callable[[int, int, RemoteBookmark], None]


class TagManager:
    """
    Bulk tag operations.

    Tag names are matched case-insensitively, as linkding does.
    """

    def __init__(
        self,
        service: BookmarkService,
        aggregator: Optional[PaginationAggregator] = None,
    ):
        self.service = service
        self.aggregator = aggregator or PaginationAggregator()
        self.logger = logging.getLogger(__name__)

    def count_tags(self, sort: str = "name", unused_only: bool = False) -> List[TagCount]:
        """
        Count bookmarks per tag.

        Args:
            sort: "name" (alphabetical) or "count" (most used first)
            unused_only: Only return tags with no bookmarks

        Returns:
            List of TagCount
        """
        if sort not in SORT_KEYS:
            raise ValueError(f"Invalid sort option: {sort} (use 'name' or 'count')")

        tags = fetch_all_tags(self.service, aggregator=self.aggregator)
        bookmarks = fetch_all_bookmarks(
            self.service, include_archived=True, aggregator=self.aggregator
        )

        usage: Counter = Counter()
        display_names: Dict[str, str] = {}
        for tag in tags:
            display_names.setdefault(tag.name.lower(), tag.name)
        for bookmark in bookmarks:
            for name in set(t.lower() for t in bookmark.tag_names):
                usage[name] += 1
            for name in bookmark.tag_names:
                display_names.setdefault(name.lower(), name)

        counts = [
            TagCount(name=display, count=usage.get(key, 0))
            for key, display in display_names.items()
        ]
        if unused_only:
            counts = [tag for tag in counts if tag.count == 0]

        if sort == "count":
            counts.sort(key=lambda tag: (-tag.count, tag.name.lower()))
        else:
            counts.sort(key=lambda tag: tag.name.lower())
        return counts

    def bookmarks_with_tag(self, name: str) -> List[RemoteBookmark]:
        """All bookmarks, archived included, carrying ``name``."""
        bookmarks = fetch_all_bookmarks(
            self.service, tags=[name], include_archived=True, aggregator=self.aggregator
        )
        key = name.lower()
        return [b for b in bookmarks if any(t.lower() == key for t in b.tag_names)]

    def rename_tag(
        self,
        old_name: str,
        new_name: str,
        bookmarks: Optional[List[RemoteBookmark]] = None,
        progress_callback: Optional[TagProgressCallback] = None,
    ) -> BulkUpdateResult:
        """
        Replace ``old_name`` with ``new_name`` on every bookmark carrying it.

        Args:
            old_name: Existing tag
            new_name: Replacement tag
            bookmarks: Affected bookmarks, when already fetched
            progress_callback: Called with (index, total, bookmark)

        Returns:
            BulkUpdateResult
        """
        key = old_name.lower()

        def rewrite(tags: List[str]) -> List[str]:
            return list(merge_tags(new_name if t.lower() == key else t for t in tags))

        return self._rewrite_tags(
            old_name, rewrite, bookmarks, progress_callback
        )

    def remove_tag(
        self,
        name: str,
        bookmarks: Optional[List[RemoteBookmark]] = None,
        progress_callback: Optional[TagProgressCallback] = None,
    ) -> BulkUpdateResult:
        """Remove ``name`` from every bookmark carrying it."""
        key = name.lower()

        def rewrite(tags: List[str]) -> List[str]:
            return [t for t in tags if t.lower() != key]

        return self._rewrite_tags(name, rewrite, bookmarks, progress_callback)

    def _rewrite_tags(
        self,
        name: str,
        rewrite: Callable[[List[str]], List[str]],
        bookmarks: Optional[List[RemoteBookmark]],
        progress_callback: Optional[TagProgressCallback],
    ) -> BulkUpdateResult:
        if bookmarks is None:
            bookmarks = self.bookmarks_with_tag(name)

        succeeded = 0
        errors: List[Dict[str, Any]] = []
        total = len(bookmarks)

        for index, bookmark in enumerate(bookmarks, start=1):
            if progress_callback:
                progress_callback(index, total, bookmark)
            try:
                self.service.update_bookmark(
                    bookmark.id, {"tag_names": rewrite(bookmark.tag_names)}
                )
                succeeded += 1
            except ServiceError as e:
                self.logger.warning(f"Failed to update bookmark {bookmark.id}: {e}")
                errors.append({"id": bookmark.id, "url": bookmark.url, "error": str(e)})

        result = BulkUpdateResult(
            total=total, succeeded=succeeded, failed=len(errors), errors=errors
        )
        self.logger.info(f"Tag '{name}': {result}")
        return result
