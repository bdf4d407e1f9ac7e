"""
Base classes for bookmark file parsers.

Parsers turn raw file bytes into BookmarkRecords. They never touch the
network and report malformed records through a separate error channel so
that valid records can still be imported.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

import chardet

from ..data_models import BookmarkRecord, ImportErrorDetail
from ..formats import BookmarkFormat
from ...utils.error_handler import FileParseError, ParseError

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off", ""})


@dataclass
class ParseResult:
    """
    Output of a parser.

    Attributes:
        records: Valid records in input order
        errors: One entry per rejected record, in input order
    """

    records: List[BookmarkRecord] = field(default_factory=list)
    errors: List[ImportErrorDetail] = field(default_factory=list)

    def add_error(self, error: ParseError) -> None:
        self.errors.append(ImportErrorDetail(line=error.line, message=error.message))


def parse_bool(value: object) -> bool:
    """
    Interpret a textual boolean cell.

    Raises:
        ValueError: If the value is not a recognized boolean spelling
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


class BookmarkParser(ABC):
    """
    Abstract base class for bookmark parsers.

    Example:
        >>> parser = JSONParser()
        >>> result = parser.parse_file(Path("bookmarks.json"))
        >>> print(f"{len(result.records)} records, {len(result.errors)} errors")
    """

    def __init__(self):
        """Initialize the parser."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def format(self) -> BookmarkFormat:
        """Format handled by this parser."""
        pass

    @abstractmethod
    def parse_text(self, text: str) -> ParseResult:
        """
        Parse decoded file content.

        Args:
            text: Full file content

        Returns:
            ParseResult with records and per-record errors

        Raises:
            FileParseError: If the content cannot be parsed at all
        """
        pass

    def parse(self, content: Union[bytes, str]) -> ParseResult:
        """Parse raw file content, decoding bytes first."""
        if isinstance(content, bytes):
            content = self.decode_content(content)
        result = self.parse_text(content)
        self.logger.info(
            f"Parsed {len(result.records)} {self.format.value.upper()} records "
            f"({len(result.errors)} errors)"
        )
        return result

    def parse_file(self, path: Union[str, Path]) -> ParseResult:
        """
        Read and parse a bookmark file.

        Raises:
            FileParseError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise FileParseError(f"Failed to read {path}: {e}")
        return self.parse(content)

    def decode_content(self, content: bytes) -> str:
        """
        Decode file bytes to text.

        UTF-8 (with or without a BOM) is tried first; otherwise the encoding
        is detected with chardet and falls back to UTF-8 with replacement
        when detection confidence is low.
        """
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError:
            pass

        result = chardet.detect(content[:65536])
        encoding = result.get("encoding") or "utf-8"
        confidence = result.get("confidence") or 0.0

        self.logger.debug(
            f"Detected encoding: {encoding} (confidence: {confidence:.2f})"
        )

        if confidence < 0.7:
            self.logger.warning(
                f"Low encoding confidence ({confidence:.2f}), using utf-8"
            )
            encoding = "utf-8"

        try:
            return content.decode(encoding, errors="replace")
        except LookupError:
            return content.decode("utf-8", errors="replace")
