"""
Service protocol for the import/export engine.

The engine depends only on this capability surface, so any implementation
(the HTTP client, an in-memory fake in tests) is interchangeable.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .data_models import BookmarkRecord, Page, RemoteBookmark, ResourceKind


@dataclass
class BulkUpdateResult:
    """
    Outcome of rewriting tags across many bookmarks.

    Attributes:
        total: Bookmarks selected for the rewrite
        succeeded: Bookmarks whose update call succeeded
        failed: Bookmarks whose update call failed
        errors: ``{"id", "url", "error"}`` per failed bookmark
    """

    total: int
    succeeded: int
    failed: int
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Percentage of selected bookmarks updated."""
        return (self.succeeded / self.total) * 100 if self.total else 0.0

    @property
    def has_errors(self) -> bool:
        return self.failed > 0

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
        }
        if self.errors:
            data["errors"] = list(self.errors)
        return data

    def __str__(self) -> str:
        return (
            f"{self.succeeded}/{self.total} updated, {self.failed} failed "
            f"({self.success_rate:.1f}%)"
        )


@runtime_checkable
class BookmarkService(Protocol):
    """
    Protocol for the remote bookmark service.

    Example Usage:
        >>> service = LinkdingClient("https://links.example.com", token)
        >>> page = service.fetch_page(ResourceKind.BOOKMARKS, None, 0, 100)
        >>> created = service.create_bookmark(record)
        >>> service.update_bookmark(created.id, record.to_payload())
    """

    @abstractmethod
    def fetch_page(
        self,
        kind: ResourceKind,
        filters: Optional[Dict[str, Any]],
        offset: int,
        limit: int,
    ) -> Page:
        """
        Fetch one page of a list endpoint.

        Args:
            kind: Which list endpoint to read
            filters: Filter parameters passed through unchanged
                (supported keys: ``query``, ``tags``, ``unread``)
            offset: Index of the first item
            limit: Maximum number of items

        Returns:
            Page of RemoteBookmark or RemoteTag items

        Raises:
            ServiceError: If the request fails
        """
        ...

    @abstractmethod
    def create_bookmark(self, record: BookmarkRecord) -> RemoteBookmark:
        """
        Create a bookmark from a parsed record.

        Raises:
            ServiceError: If the request fails
        """
        ...

    @abstractmethod
    def update_bookmark(self, bookmark_id: int, fields: Dict[str, Any]) -> RemoteBookmark:
        """
        Update an existing bookmark.

        Args:
            bookmark_id: Server id of the bookmark
            fields: Fields to replace

        Raises:
            ServiceError: If the request fails
        """
        ...
