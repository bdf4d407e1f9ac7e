"""
Import reconciler.

Decides, for every parsed record, whether the remote service should create
a bookmark, update an existing one, or leave it alone, and issues the
corresponding calls one record at a time. A failing record never stops the
records after it and nothing is rolled back.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from .data_models import (
    BookmarkRecord,
    ImportErrorDetail,
    ImportOptions,
    ImportResult,
    RemoteBookmark,
)
from .pagination import PaginationAggregator, fetch_all_bookmarks
from .protocol import BookmarkService
from .result_reporter import ImportOutcome, ImportResultBuilder
from ..utils.error_handler import MutationError, NetworkError, ServiceError

ProgressCallback = Callable[[int, int], None]


class ImportReconciler:
    """
    Reconcile parsed records against the remote bookmark set.

    The remote set is fetched exactly once per run, dry runs included,
    because classification depends on it.

    Example:
        >>> reconciler = ImportReconciler(client, ImportOptions(skip_duplicates=True))
        >>> result = reconciler.reconcile(parse_result.records, parse_result.errors)
        >>> print(result.added, result.skipped)
    """

    def __init__(
        self,
        service: BookmarkService,
        options: ImportOptions,
        aggregator: Optional[PaginationAggregator] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize the reconciler.

        Args:
            service: Remote bookmark service
            options: Options for this import
            aggregator: Aggregator used for the dedup fetch
            progress_callback: Called with (processed, total) after each record
        """
        self.service = service
        self.options = options
        self.aggregator = aggregator or PaginationAggregator()
        self.progress_callback = progress_callback
        self.logger = logging.getLogger(__name__)

    def reconcile(
        self,
        records: Sequence[BookmarkRecord],
        parse_errors: Sequence[ImportErrorDetail] = (),
    ) -> ImportResult:
        """
        Run the import.

        Args:
            records: Valid records in input order
            parse_errors: Errors for records rejected by the parser

        Returns:
            ImportResult for this run

        Raises:
            NetworkError: If the existing bookmarks cannot be fetched
        """
        lookup = self._load_existing()

        builder = ImportResultBuilder()
        builder.add_parse_errors(parse_errors)

        total = len(records)
        mode = " (dry run)" if self.options.dry_run else ""
        self.logger.info(
            f"Reconciling {total} records against {len(lookup)} existing "
            f"bookmarks{mode}"
        )

        for index, record in enumerate(records, start=1):
            record = record.with_tags(self.options.add_tags)
            try:
                outcome = self._apply(record, lookup)
                builder.record(outcome, record.source_line)
            except MutationError as e:
                self.logger.warning(f"Line {e.line}: {e}")
                builder.record(ImportOutcome.FAILED, e.line, str(e))

            if self.progress_callback:
                self.progress_callback(index, total)

        result = builder.build()
        self.logger.info(
            f"Import finished: {result.added} added, {result.updated} updated, "
            f"{result.skipped} skipped, {result.failed} failed"
        )
        return result

    def _load_existing(self) -> Dict[str, RemoteBookmark]:
        """
        Build the url -> bookmark lookup.

        Later entries win when the service reports the same URL twice.
        """
        try:
            existing = fetch_all_bookmarks(
                self.service, include_archived=True, aggregator=self.aggregator
            )
        except ServiceError as e:
            raise NetworkError(f"Failed to fetch existing bookmarks: {e}")

        lookup: Dict[str, RemoteBookmark] = {}
        for bookmark in existing:
            lookup[bookmark.url] = bookmark
        return lookup

    def _apply(
        self, record: BookmarkRecord, lookup: Dict[str, RemoteBookmark]
    ) -> ImportOutcome:
        """
        Classify one record and issue the matching call.

        Raises:
            MutationError: If the create or update call fails
        """
        existing = lookup.get(record.url)

        if existing is not None:
            if self.options.skip_duplicates:
                self.logger.debug(f"Line {record.source_line}: skipping {record.url}")
                return ImportOutcome.SKIPPED

            if not self.options.dry_run:
                try:
                    lookup[record.url] = self.service.update_bookmark(
                        existing.id, record.to_payload()
                    )
                except ServiceError as e:
                    raise MutationError(record.source_line, "update", e)
            self.logger.debug(f"Line {record.source_line}: updated {record.url}")
            return ImportOutcome.UPDATED

        if self.options.dry_run:
            lookup[record.url] = self._simulated(record)
        else:
            try:
                lookup[record.url] = self.service.create_bookmark(record)
            except ServiceError as e:
                raise MutationError(record.source_line, "create", e)
        self.logger.debug(f"Line {record.source_line}: created {record.url}")
        return ImportOutcome.CREATED

    @staticmethod
    def _simulated(record: BookmarkRecord) -> RemoteBookmark:
        """Stand-in for a bookmark a dry run would have created."""
        return RemoteBookmark(
            id=-record.source_line,
            url=record.url,
            title=record.title,
            description=record.description,
            notes=record.notes,
            tag_names=list(record.tag_names),
            unread=record.unread,
            shared=record.shared,
            is_archived=record.archived,
        )


def reconcile_records(
    service: BookmarkService,
    records: List[BookmarkRecord],
    options: ImportOptions,
    parse_errors: Sequence[ImportErrorDetail] = (),
) -> ImportResult:
    """Convenience wrapper around ImportReconciler."""
    return ImportReconciler(service, options).reconcile(records, parse_errors)
