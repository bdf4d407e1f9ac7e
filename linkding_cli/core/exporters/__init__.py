"""
Bookmark exporters.

This module provides one exporter per BookmarkFormat: JSON, Netscape HTML
and CSV.
"""

from typing import Union

from .base import BookmarkExporter, ExportResult
from .csv_exporter import CSVExporter
from .html_exporter import HTMLExporter
from .json_exporter import JSONExporter
from ..formats import BookmarkFormat
from ...utils.error_handler import ExportError

__all__ = [
    "BookmarkExporter",
    "ExportResult",
    "ExportError",
    "JSONExporter",
    "HTMLExporter",
    "CSVExporter",
    "EXPORTERS",
    "get_exporter",
]


# Format registry; must cover every BookmarkFormat member
EXPORTERS = {
    BookmarkFormat.JSON: JSONExporter,
    BookmarkFormat.HTML: HTMLExporter,
    BookmarkFormat.CSV: CSVExporter,
}


def get_exporter(format: Union[str, BookmarkFormat]) -> BookmarkExporter:
    """
    Get an exporter instance by format.

    Args:
        format: BookmarkFormat or format name (json, html, csv)

    Returns:
        Exporter for the specified format

    Raises:
        UnsupportedFormatError: If the format is not supported
    """
    return EXPORTERS[BookmarkFormat.from_name(format)]()
