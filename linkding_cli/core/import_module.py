"""
High-level bookmark import.

Ties together format detection, parsing and reconciliation: the whole file
is parsed before any network call, then records are reconciled against the
remote bookmark set.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .data_models import ImportOptions, ImportResult
from .formats import detect_format
from .pagination import PaginationAggregator
from .parsers import ParseResult, get_parser
from .protocol import BookmarkService
from .reconciler import ImportReconciler, ProgressCallback


class BookmarkImporter:
    """
    Import a bookmark file into linkding.

    Example:
        >>> importer = BookmarkImporter(client, ImportOptions(dry_run=True))
        >>> result = importer.import_file("bookmarks.html")
        >>> print(result.to_dict())
    """

    def __init__(
        self,
        service: BookmarkService,
        options: Optional[ImportOptions] = None,
        aggregator: Optional[PaginationAggregator] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize the bookmark importer.

        Args:
            service: Remote bookmark service
            options: Import configuration options
            aggregator: Aggregator for the dedup fetch
            progress_callback: Called with (processed, total) per record
        """
        self.service = service
        self.options = options or ImportOptions()
        self.aggregator = aggregator or PaginationAggregator()
        self.progress_callback = progress_callback
        self.logger = logging.getLogger(__name__)

        # Import statistics
        self.reset_statistics()

    def reset_statistics(self) -> None:
        """Reset import statistics."""
        self.stats: Dict[str, Any] = {
            "format": None,
            "records_parsed": 0,
            "parse_errors": 0,
            "processing_time": 0.0,
        }

    def import_file(self, file_path: Union[str, Path]) -> ImportResult:
        """
        Import a bookmark file.

        Args:
            file_path: Path to a JSON, HTML or CSV bookmark file

        Returns:
            ImportResult for the run

        Raises:
            FormatError: If the format cannot be determined
            FileParseError: If the file cannot be read or parsed
            NetworkError: If the existing bookmarks cannot be fetched
        """
        start_time = time.time()
        parse_result = self.load_file(file_path)
        result = self.import_parsed(parse_result)

        self.stats["processing_time"] = time.time() - start_time
        self.logger.info(
            f"Import of {file_path} completed in "
            f"{self.stats['processing_time']:.2f}s"
        )
        return result

    def load_file(self, file_path: Union[str, Path]) -> ParseResult:
        """
        Detect the format of a bookmark file and parse it completely.

        No network call is made, so callers can validate a file before
        changing anything on the server.

        Raises:
            FormatError: If the format cannot be determined
            FileParseError: If the file cannot be read or parsed
        """
        self.reset_statistics()
        file_path = Path(file_path)

        # Resolved before touching the file
        bookmark_format = detect_format(file_path, self.options.format)
        self.stats["format"] = bookmark_format.value
        self.logger.info(f"Starting {bookmark_format.value.upper()} import: {file_path}")

        parse_result = get_parser(bookmark_format).parse_file(file_path)
        self.stats["records_parsed"] = len(parse_result.records)
        self.stats["parse_errors"] = len(parse_result.errors)
        return parse_result

    def import_parsed(self, parse_result: ParseResult) -> ImportResult:
        """
        Reconcile already parsed records against the remote bookmark set.

        Raises:
            NetworkError: If the existing bookmarks cannot be fetched
        """
        reconciler = ImportReconciler(
            self.service,
            self.options,
            aggregator=self.aggregator,
            progress_callback=self.progress_callback,
        )
        return reconciler.reconcile(parse_result.records, parse_result.errors)

    def get_import_statistics(self) -> Dict[str, Any]:
        """Get statistics from the last import."""
        return self.stats.copy()


def import_bookmarks(
    service: BookmarkService,
    file_path: Union[str, Path],
    options: Optional[ImportOptions] = None,
) -> ImportResult:
    """
    Convenience function to import a bookmark file.

    Args:
        service: Remote bookmark service
        file_path: Path to the bookmark file
        options: Import options

    Returns:
        ImportResult for the run
    """
    return BookmarkImporter(service, options).import_file(file_path)
