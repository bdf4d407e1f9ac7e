"""
Data models for the linkding CLI.

This module defines the structures that flow through the import/export
engine: format-agnostic parsed records, server-owned bookmarks and tags,
the option bags built once per command, and the import result.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar, Union

from .formats import BookmarkFormat

logger = logging.getLogger(__name__)

T = TypeVar("T")


def merge_tags(*tag_groups: Iterable[str]) -> Tuple[str, ...]:
    """
    Union of tag names preserving first-seen order.

    Blank names are dropped and surrounding whitespace is stripped.

    Args:
        *tag_groups: Any number of tag name iterables

    Returns:
        Tuple of unique tag names
    """
    seen = {}
    for group in tag_groups:
        for tag in group:
            name = tag.strip()
            if name and name not in seen:
                seen[name] = None
    return tuple(seen)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as returned by linkding."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Unparseable timestamp: {value!r}")
        return None


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Inverse of parse_timestamp; UTC values are written with a Z suffix."""
    if value is None:
        return None
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


class ResourceKind(Enum):
    """Paginated list endpoints exposed by the service."""

    BOOKMARKS = "bookmarks"
    ARCHIVED_BOOKMARKS = "archived_bookmarks"
    TAGS = "tags"
    BUNDLES = "bundles"


@dataclass(frozen=True)
class BookmarkRecord:
    """
    Format-agnostic bookmark parsed from an import file.

    One record is built from one input unit: a JSON array element, an
    HTML anchor or a CSV row. ``source_line`` is the 1-based position of
    that unit and is used to attribute errors.
    """

    url: str
    title: str = ""
    description: str = ""
    notes: str = ""
    tag_names: Tuple[str, ...] = ()
    unread: bool = False
    shared: bool = False
    archived: bool = False
    source_line: int = 0

    def __post_init__(self):
        if not self.url or not self.url.strip():
            raise ValueError("BookmarkRecord.url must not be empty")
        object.__setattr__(self, "tag_names", merge_tags(self.tag_names))

    def with_tags(self, extra_tags: Iterable[str]) -> "BookmarkRecord":
        """Return a copy with ``extra_tags`` merged into the tag set."""
        merged = merge_tags(self.tag_names, extra_tags)
        if merged == self.tag_names:
            return self
        return replace(self, tag_names=merged)

    def to_payload(self) -> Dict[str, Any]:
        """Full-replace request body for create and update calls."""
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "notes": self.notes,
            "tag_names": list(self.tag_names),
            "unread": self.unread,
            "shared": self.shared,
            "is_archived": self.archived,
        }


@dataclass
class RemoteBookmark:
    """Bookmark as stored by the linkding service."""

    id: int
    url: str
    title: str = ""
    description: str = ""
    notes: str = ""
    website_title: str = ""
    website_description: str = ""
    tag_names: List[str] = field(default_factory=list)
    unread: bool = False
    shared: bool = False
    is_archived: bool = False
    date_added: Optional[datetime] = None
    date_modified: Optional[datetime] = None

    @property
    def display_title(self) -> str:
        """Title to show a user, falling back to the scraped page title."""
        return self.title or self.website_title or self.url

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RemoteBookmark":
        """
        Build a bookmark from an API response object.

        Args:
            data: Decoded JSON object from ``/api/bookmarks/``

        Returns:
            RemoteBookmark instance
        """
        return cls(
            id=int(data["id"]),
            url=data.get("url") or "",
            title=data.get("title") or "",
            description=data.get("description") or "",
            notes=data.get("notes") or "",
            website_title=data.get("website_title") or "",
            website_description=data.get("website_description") or "",
            tag_names=list(data.get("tag_names") or []),
            unread=bool(data.get("unread", False)),
            shared=bool(data.get("shared", False)),
            is_archived=bool(data.get("is_archived", False)),
            date_added=parse_timestamp(data.get("date_added")),
            date_modified=parse_timestamp(data.get("date_modified")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with every field present, matching the API shape."""
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "notes": self.notes,
            "website_title": self.website_title,
            "website_description": self.website_description,
            "tag_names": list(self.tag_names),
            "unread": self.unread,
            "shared": self.shared,
            "is_archived": self.is_archived,
            "date_added": format_timestamp(self.date_added),
            "date_modified": format_timestamp(self.date_modified),
        }

    def to_payload(self) -> Dict[str, Any]:
        """Writable fields only, for full-replace updates."""
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "notes": self.notes,
            "tag_names": list(self.tag_names),
            "unread": self.unread,
            "shared": self.shared,
            "is_archived": self.is_archived,
        }


@dataclass
class RemoteTag:
    """Tag as stored by the linkding service."""

    id: int
    name: str
    date_added: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RemoteTag":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            date_added=parse_timestamp(data.get("date_added")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date_added": format_timestamp(self.date_added),
        }


@dataclass
class Bundle:
    """
    Saved search shown as a bundle in the linkding sidebar.

    The three tag filters are space-separated tag names, as stored by the
    server.
    """

    id: int
    name: str
    search: str = ""
    any_tags: str = ""
    all_tags: str = ""
    excluded_tags: str = ""
    order: int = 0
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Bundle":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            search=data.get("search") or "",
            any_tags=data.get("any_tags") or "",
            all_tags=data.get("all_tags") or "",
            excluded_tags=data.get("excluded_tags") or "",
            order=int(data.get("order") or 0),
            date_created=parse_timestamp(data.get("date_created")),
            date_modified=parse_timestamp(data.get("date_modified")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "search": self.search,
            "any_tags": self.any_tags,
            "all_tags": self.all_tags,
            "excluded_tags": self.excluded_tags,
            "order": self.order,
            "date_created": format_timestamp(self.date_created),
            "date_modified": format_timestamp(self.date_modified),
        }


@dataclass(frozen=True)
class TagCount:
    """Tag name with the number of bookmarks carrying it."""

    name: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "count": self.count}


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    One page of a paginated list endpoint.

    Attributes:
        count: Total number of items known to the server
        items: Items on this page, in server order
        has_next: Whether more pages remain
    """

    count: int
    items: Tuple[T, ...]
    has_next: bool


@dataclass(frozen=True)
class ImportOptions:
    """
    Options for one import invocation.

    Attributes:
        format: Explicit BookmarkFormat, or "auto" to detect from the extension
        dry_run: Classify records without issuing any mutating call
        skip_duplicates: Leave bookmarks whose URL already exists untouched
        add_tags: Tag names merged into every imported record
    """

    format: Union[BookmarkFormat, str] = "auto"
    dry_run: bool = False
    skip_duplicates: bool = False
    add_tags: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "add_tags", merge_tags(self.add_tags))


@dataclass(frozen=True)
class ExportOptions:
    """
    Options for one export invocation.

    Attributes:
        format: Output format
        tags: Only export bookmarks carrying all of these tags
        include_archived: Also export archived bookmarks
    """

    format: BookmarkFormat = BookmarkFormat.JSON
    tags: Tuple[str, ...] = ()
    include_archived: bool = True

    def __post_init__(self):
        object.__setattr__(self, "tags", merge_tags(self.tags))


@dataclass(frozen=True)
class ImportErrorDetail:
    """A record that failed to parse or whose mutating call failed."""

    line: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"line": self.line, "message": self.message}


@dataclass(frozen=True)
class ImportResult:
    """
    Summary of one import run.

    The four counts sum to the number of records that reached
    reconciliation. Records rejected by a parser only appear in ``errors``.
    """

    added: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    errors: Tuple[ImportErrorDetail, ...] = ()

    @property
    def total(self) -> int:
        return self.added + self.updated + self.skipped + self.failed

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Machine-readable form; ``errors`` is omitted when empty."""
        data: Dict[str, Any] = {
            "added": self.added,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
        }
        if self.errors:
            data["errors"] = [error.to_dict() for error in self.errors]
        return data
