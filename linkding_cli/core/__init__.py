"""
Core import/export modules.

This package contains the pagination aggregator, the format parsers and
exporters, the import reconciler and the linkding API client.
"""

from .data_models import (
    BookmarkRecord,
    ExportOptions,
    ImportErrorDetail,
    ImportOptions,
    ImportResult,
    Page,
    RemoteBookmark,
    RemoteTag,
    ResourceKind,
)
from .formats import BookmarkFormat, detect_format
from .pagination import PaginationAggregator
from .reconciler import ImportReconciler
from .result_reporter import ImportOutcome, ImportResultBuilder

__all__ = [
    "BookmarkFormat",
    "BookmarkRecord",
    "ExportOptions",
    "ImportErrorDetail",
    "ImportOptions",
    "ImportOutcome",
    "ImportReconciler",
    "ImportResult",
    "ImportResultBuilder",
    "Page",
    "PaginationAggregator",
    "RemoteBookmark",
    "RemoteTag",
    "ResourceKind",
    "detect_format",
]
