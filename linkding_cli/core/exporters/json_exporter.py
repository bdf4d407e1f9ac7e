"""
JSON bookmark exporter.

Writes every field of every bookmark so that an export can be imported
back without loss.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TextIO

from .base import BookmarkExporter
from ..data_models import RemoteBookmark, format_timestamp
from ..formats import BookmarkFormat

EXPORT_VERSION = "1"
EXPORT_SOURCE = "linkding"


class JSONExporter(BookmarkExporter):
    """
    Export bookmarks to JSON format.

    Output shape::

        {
          "version": "1",
          "exported_at": "2024-01-01T12:00:00Z",
          "source": "linkding",
          "bookmarks": [ {...}, ... ]
        }

    Example:
        >>> exporter = JSONExporter(indent=2)
        >>> result = exporter.export(bookmarks, Path("bookmarks.json"))
    """

    def __init__(self, indent: Optional[int] = 2, ensure_ascii: bool = False):
        """
        Initialize the JSON exporter.

        Args:
            indent: Number of spaces for indentation (None for compact output)
            ensure_ascii: Whether to escape non-ASCII characters
        """
        super().__init__()
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    @property
    def format(self) -> BookmarkFormat:
        return BookmarkFormat.JSON

    def write(self, bookmarks: List[RemoteBookmark], stream: TextIO) -> None:
        json.dump(
            self.build_export_data(bookmarks),
            stream,
            indent=self.indent,
            ensure_ascii=self.ensure_ascii,
        )
        stream.write("\n")

    def build_export_data(
        self, bookmarks: List[RemoteBookmark], exported_at: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Build the export data structure.

        Args:
            bookmarks: List of bookmarks
            exported_at: Export timestamp (defaults to now, UTC)

        Returns:
            Dictionary with export data
        """
        exported_at = exported_at or datetime.now(timezone.utc).replace(microsecond=0)
        return {
            "version": EXPORT_VERSION,
            "exported_at": format_timestamp(exported_at),
            "source": EXPORT_SOURCE,
            "bookmarks": [bookmark.to_dict() for bookmark in bookmarks],
        }
