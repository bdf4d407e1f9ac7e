"""
CSV bookmark exporter.

Every field is quoted; tags are joined with the semicolon delimiter
understood by the CSV parser.
"""

import csv
from typing import Any, Dict, List, TextIO

from .base import BookmarkExporter
from ..data_models import RemoteBookmark, format_timestamp
from ..formats import BookmarkFormat
from ..parsers.csv_parser import join_tag_cell


class CSVExporter(BookmarkExporter):
    """Export bookmarks to CSV format."""

    EXPORT_COLUMNS = [
        "url",
        "title",
        "description",
        "notes",
        "tags",
        "unread",
        "shared",
        "archived",
        "date_added",
    ]

    @property
    def format(self) -> BookmarkFormat:
        return BookmarkFormat.CSV

    def write(self, bookmarks: List[RemoteBookmark], stream: TextIO) -> None:
        writer = csv.DictWriter(
            stream,
            fieldnames=self.EXPORT_COLUMNS,
            quoting=csv.QUOTE_ALL,
            extrasaction="ignore",
        )
        writer.writeheader()
        for bookmark in bookmarks:
            writer.writerow(self._bookmark_to_row(bookmark))

    def _bookmark_to_row(self, bookmark: RemoteBookmark) -> Dict[str, Any]:
        """
        Convert a bookmark to a CSV row.

        Args:
            bookmark: Bookmark to convert

        Returns:
            Dictionary suitable for csv.DictWriter
        """
        return {
            "url": bookmark.url,
            "title": bookmark.title,
            "description": bookmark.description,
            "notes": bookmark.notes,
            "tags": join_tag_cell(bookmark.tag_names),
            "unread": "true" if bookmark.unread else "false",
            "shared": "true" if bookmark.shared else "false",
            "archived": "true" if bookmark.is_archived else "false",
            "date_added": format_timestamp(bookmark.date_added) or "",
        }
