"""
Pagination aggregator.

Walks an offset/limit list endpoint until the service reports that no
further pages remain, concatenating items in page order.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .data_models import Bundle, Page, RemoteBookmark, RemoteTag, ResourceKind
from .protocol import BookmarkService

DEFAULT_PAGE_SIZE = 100

PageFetcher = Callable[[int, int], Page]


class PaginationAggregator:
    """
    Collect every item of a paginated endpoint.

    Any failing page fetch aborts the walk and the error propagates
    unchanged; no partial result is returned.

    Example:
        >>> aggregator = PaginationAggregator(page_size=100)
        >>> tags = aggregator.collect(
        ...     lambda offset, limit: client.fetch_page(
        ...         ResourceKind.TAGS, None, offset, limit
        ...     )
        ... )
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size
        self.logger = logging.getLogger(__name__)

    def collect(self, fetch: PageFetcher) -> List[Any]:
        """
        Fetch pages from offset 0 until ``has_next`` is false.

        Args:
            fetch: Callable taking (offset, limit) and returning a Page

        Returns:
            All items across all pages, in page order
        """
        items: List[Any] = []
        offset = 0
        pages = 0

        while True:
            page = fetch(offset, self.page_size)
            pages += 1
            items.extend(page.items)

            if not page.has_next:
                break

            # A page that claims more results but is empty would loop forever
            if not page.items:
                self.logger.warning(
                    f"Page at offset {offset} was empty but reported more "
                    f"results; stopping after {len(items)} items"
                )
                break

            offset += self.page_size

        self.logger.debug(f"Collected {len(items)} items from {pages} page(s)")
        return items

    def collect_resource(
        self,
        service: BookmarkService,
        kind: ResourceKind,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Any]:
        """Collect every item of one service list endpoint."""
        return self.collect(
            lambda offset, limit: service.fetch_page(kind, filters, offset, limit)
        )


def fetch_all_bookmarks(
    service: BookmarkService,
    tags: Iterable[str] = (),
    include_archived: bool = True,
    aggregator: Optional[PaginationAggregator] = None,
) -> List[RemoteBookmark]:
    """
    Fetch the full remote bookmark set.

    Active bookmarks come first, followed by archived ones when requested.

    Args:
        service: Remote bookmark service
        tags: Only include bookmarks carrying all of these tags
        include_archived: Also walk the archived endpoint
        aggregator: Aggregator to use (default page size when omitted)

    Returns:
        List of RemoteBookmark in fetch order
    """
    aggregator = aggregator or PaginationAggregator()
    tag_list = list(tags)
    filters = {"tags": tag_list} if tag_list else None

    bookmarks = aggregator.collect_resource(service, ResourceKind.BOOKMARKS, filters)
    if include_archived:
        bookmarks.extend(
            aggregator.collect_resource(
                service, ResourceKind.ARCHIVED_BOOKMARKS, filters
            )
        )
    return bookmarks


def fetch_all_tags(
    service: BookmarkService, aggregator: Optional[PaginationAggregator] = None
) -> List[RemoteTag]:
    """Fetch every tag known to the service."""
    aggregator = aggregator or PaginationAggregator()
    return aggregator.collect_resource(service, ResourceKind.TAGS)


def fetch_all_bundles(
    service: BookmarkService, aggregator: Optional[PaginationAggregator] = None
) -> List[Bundle]:
    """Fetch every saved-search bundle, in server order."""
    aggregator = aggregator or PaginationAggregator()
    return aggregator.collect_resource(service, ResourceKind.BUNDLES)
