"""
Base classes for bookmark exporters.

An exporter serializes the fetched bookmark list into one file format. The
same ``write`` implementation backs stdout output, string output and
files.
"""

import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

from ..data_models import RemoteBookmark
from ..formats import BookmarkFormat
from ...utils.error_handler import ExportError


@dataclass
class ExportResult:
    """
    A finished export file.

    Attributes:
        path: Written file
        count: Bookmarks written
        format_name: Upper-case format name, e.g. "CSV"
        additional_info: Extra details such as ``file_size``
    """

    path: Path
    count: int
    format_name: str
    additional_info: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": str(self.path),
            "count": self.count,
            "format": self.format_name,
        }


class BookmarkExporter(ABC):
    """
    Abstract base class for bookmark exporters.

    Subclasses implement ``write`` against an open text stream; writing to
    a path and to a string are provided here.

    Example:
        >>> exporter = JSONExporter()
        >>> result = exporter.export(bookmarks, Path("output.json"))
        >>> print(f"Exported {result.count} bookmarks to {result.path}")
    """

    def __init__(self):
        """Initialize the exporter."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def format(self) -> BookmarkFormat:
        """Format produced by this exporter."""
        pass

    @property
    def format_name(self) -> str:
        """Human-readable name of the export format."""
        return self.format.value.upper()

    @property
    def file_extension(self) -> str:
        """Default file extension, without a leading dot."""
        return self.format.file_extension

    @abstractmethod
    def write(self, bookmarks: List[RemoteBookmark], stream: TextIO) -> None:
        """
        Serialize bookmarks to an open text stream.

        Args:
            bookmarks: Bookmarks in fetch order
            stream: Writable text stream
        """
        pass

    def serialize(self, bookmarks: List[RemoteBookmark]) -> str:
        """Serialize bookmarks to a string."""
        buffer = io.StringIO(newline="")
        self.write(bookmarks, buffer)
        return buffer.getvalue()

    def export(
        self, bookmarks: List[RemoteBookmark], output_path: Union[str, Path]
    ) -> ExportResult:
        """
        Export bookmarks to the specified path.

        Args:
            bookmarks: List of bookmarks to export
            output_path: Target path for the export

        Returns:
            ExportResult with details about the export

        Raises:
            ExportError: If export fails
        """
        path = self.prepare_output_path(output_path)

        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                self.write(bookmarks, f)
        except PermissionError as e:
            raise ExportError(
                f"Permission denied writing to {path}",
                format_name=self.format_name,
                path=str(path),
                original_error=e,
            )
        except OSError as e:
            raise ExportError(
                f"Failed to write {self.format_name} export",
                format_name=self.format_name,
                path=str(path),
                original_error=e,
            )

        self.logger.info(f"Exported {len(bookmarks)} bookmarks to {path}")

        return ExportResult(
            path=path,
            count=len(bookmarks),
            format_name=self.format_name,
            additional_info={"file_size": path.stat().st_size},
        )

    def prepare_output_path(self, output_path: Union[str, Path]) -> Path:
        """
        Prepare and validate the output path.

        Raises:
            ExportError: If the parent directory cannot be created
        """
        path = Path(output_path)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError(
                f"Failed to prepare output path: {path}",
                format_name=self.format_name,
                path=str(path),
                original_error=e,
            )

        return path

    @staticmethod
    def unix_timestamp(value: Optional[datetime]) -> int:
        """Seconds since the epoch, 0 when unknown."""
        if value is None:
            return 0
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
