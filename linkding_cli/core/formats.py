"""
Bookmark file formats and format detection.

The set of formats is closed; parser and exporter registries are keyed by
BookmarkFormat and must cover every member.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..utils.error_handler import FormatRequiredError, UnsupportedFormatError

AUTO = "auto"


class BookmarkFormat(Enum):
    """Supported bookmark file formats."""

    JSON = "json"
    HTML = "html"
    CSV = "csv"

    @property
    def file_extension(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: Union[str, "BookmarkFormat"]) -> "BookmarkFormat":
        """
        Resolve a user-supplied format name.

        Args:
            name: Format name (case-insensitive) or a BookmarkFormat

        Returns:
            Matching BookmarkFormat

        Raises:
            UnsupportedFormatError: If the name is not a known format
        """
        if isinstance(name, cls):
            return name
        normalized = str(name).strip().lower()
        if normalized == "htm":
            normalized = "html"
        for member in cls:
            if member.value == normalized:
                return member
        raise UnsupportedFormatError(str(name))


EXTENSION_MAP = {
    ".json": BookmarkFormat.JSON,
    ".html": BookmarkFormat.HTML,
    ".htm": BookmarkFormat.HTML,
    ".csv": BookmarkFormat.CSV,
}


def detect_format(
    path: Union[str, Path],
    override: Optional[Union[str, BookmarkFormat]] = None,
) -> BookmarkFormat:
    """
    Determine the format of a bookmark file.

    An explicit override other than "auto" always wins. Otherwise the file
    extension decides, compared case-insensitively. No I/O is performed.

    Args:
        path: Path of the bookmark file
        override: Explicit format, "auto" or None

    Returns:
        Detected BookmarkFormat

    Raises:
        FormatRequiredError: If the extension is unknown and no override given
        UnsupportedFormatError: If the override names an unknown format
    """
    if isinstance(override, BookmarkFormat):
        return override
    if override and override.strip().lower() != AUTO:
        return BookmarkFormat.from_name(override)

    suffix = Path(path).suffix.lower()
    detected = EXTENSION_MAP.get(suffix)
    if detected is None:
        raise FormatRequiredError(str(path))
    return detected
