"""
Import result aggregation.

Collects the terminal state of every reconciled record together with parse
errors and produces a single immutable ImportResult. Rendering is left to
utils.output_formatter.
"""

import heapq
from enum import Enum
from typing import Iterable, List, Optional

from .data_models import ImportErrorDetail, ImportResult


class ImportOutcome(Enum):
    """Terminal state of one reconciled record."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class ImportResultBuilder:
    """
    Accumulate record outcomes into an ImportResult.

    Example:
        >>> builder = ImportResultBuilder()
        >>> builder.add_parse_errors(parse_result.errors)
        >>> builder.record(ImportOutcome.CREATED, line=1)
        >>> builder.record(ImportOutcome.FAILED, line=3, message="Failed to create: ...")
        >>> result = builder.build()
    """

    def __init__(self):
        self._counts = {outcome: 0 for outcome in ImportOutcome}
        self._parse_errors: List[ImportErrorDetail] = []
        self._record_errors: List[ImportErrorDetail] = []

    def add_parse_errors(self, errors: Iterable[ImportErrorDetail]) -> None:
        """Attach errors for records that never reached reconciliation."""
        self._parse_errors.extend(errors)

    def record(
        self, outcome: ImportOutcome, line: int, message: Optional[str] = None
    ) -> None:
        """
        Count one reconciled record.

        Args:
            outcome: Terminal state of the record
            line: Source line of the record
            message: Error message, required for FAILED outcomes
        """
        self._counts[outcome] += 1
        if outcome is ImportOutcome.FAILED:
            self._record_errors.append(
                ImportErrorDetail(line=line, message=message or "Unknown error")
            )

    @property
    def processed(self) -> int:
        return sum(self._counts.values())

    def build(self) -> ImportResult:
        """
        Produce the final result.

        Parse and mutation errors are each in input order already; merging
        them keeps the combined list ascending by line.
        """
        errors = heapq.merge(
            self._parse_errors, self._record_errors, key=lambda error: error.line
        )
        return ImportResult(
            added=self._counts[ImportOutcome.CREATED],
            updated=self._counts[ImportOutcome.UPDATED],
            skipped=self._counts[ImportOutcome.SKIPPED],
            failed=self._counts[ImportOutcome.FAILED],
            errors=tuple(errors),
        )
