"""
High-level bookmark export and backup.

The remote bookmark set is fetched once through the pagination aggregator
and handed to the exporter for the requested format.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO, Union

from .data_models import ExportOptions, RemoteBookmark
from .exporters import ExportResult, get_exporter
from .formats import BookmarkFormat
from .pagination import PaginationAggregator, fetch_all_bookmarks
from .protocol import BookmarkService
from ..utils.error_handler import ExportError

BACKUP_PREFIX = "linkding-backup"
BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%dT%H%M%S"


class BookmarkExportManager:
    """
    Export the remote bookmark set.

    Example:
        >>> manager = BookmarkExportManager(client, ExportOptions(format=BookmarkFormat.HTML))
        >>> manager.export_to_file(Path("bookmarks.html"))
    """

    def __init__(
        self,
        service: BookmarkService,
        options: Optional[ExportOptions] = None,
        aggregator: Optional[PaginationAggregator] = None,
    ):
        self.service = service
        self.options = options or ExportOptions()
        self.aggregator = aggregator or PaginationAggregator()
        self.logger = logging.getLogger(__name__)

    def fetch_bookmarks(self) -> List[RemoteBookmark]:
        """Fetch every bookmark selected by the export options."""
        bookmarks = fetch_all_bookmarks(
            self.service,
            tags=self.options.tags,
            include_archived=self.options.include_archived,
            aggregator=self.aggregator,
        )
        self.logger.info(f"Fetched {len(bookmarks)} bookmarks for export")
        return bookmarks

    def export_to_stream(self, stream: TextIO) -> int:
        """
        Write the export to an open text stream.

        Returns:
            Number of bookmarks written
        """
        bookmarks = self.fetch_bookmarks()
        get_exporter(self.options.format).write(bookmarks, stream)
        return len(bookmarks)

    def export_to_file(self, output_path: Union[str, Path]) -> ExportResult:
        """
        Write the export to a file.

        Raises:
            ExportError: If the file cannot be written
        """
        bookmarks = self.fetch_bookmarks()
        return get_exporter(self.options.format).export(bookmarks, output_path)


def backup_filename(prefix: str = BACKUP_PREFIX, now: Optional[datetime] = None) -> str:
    """Timestamped backup file name, e.g. linkding-backup-2024-01-31T142500.json."""
    now = now or datetime.now()
    return f"{prefix}-{now.strftime(BACKUP_TIMESTAMP_FORMAT)}.json"


def create_backup(
    service: BookmarkService,
    output_dir: Union[str, Path] = ".",
    prefix: str = BACKUP_PREFIX,
    aggregator: Optional[PaginationAggregator] = None,
    now: Optional[datetime] = None,
) -> ExportResult:
    """
    Write a full JSON backup, archived bookmarks included.

    A partially written file is removed when the backup fails.

    Args:
        service: Remote bookmark service
        output_dir: Directory for the backup file (created if missing)
        prefix: File name prefix
        aggregator: Aggregator to use for fetching
        now: Timestamp for the file name

    Returns:
        ExportResult describing the backup file
    """
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(
            "Failed to create output directory",
            format_name="JSON",
            path=str(output_dir),
            original_error=e,
        )

    path = output_dir / backup_filename(prefix, now)
    manager = BookmarkExportManager(
        service,
        ExportOptions(format=BookmarkFormat.JSON, include_archived=True),
        aggregator=aggregator,
    )

    try:
        return manager.export_to_file(path)
    except Exception:
        if path.exists():
            path.unlink()
        raise
