"""
CSV bookmark parser.

The first row is a header naming at least a ``url`` column. Column names
are matched case-insensitively and unknown columns are ignored.

Tags share one cell separated by semicolons. Inside a tag name a literal
semicolon or backslash is escaped with a backslash, so ``a\\;b;c`` holds
the two tags ``a;b`` and ``c``. Commas need no escaping because the cell
itself is quoted by the CSV layer.
"""

import csv
import io
from typing import Dict, Iterable, List

from .base import BookmarkParser, ParseResult, parse_bool
from ..data_models import BookmarkRecord
from ..formats import BookmarkFormat
from ...utils.error_handler import FileParseError, ParseError

TAG_DELIMITER = ";"
ESCAPE_CHAR = "\\"

TEXT_COLUMNS = ("title", "description", "notes")
BOOL_COLUMNS = ("unread", "shared", "archived")
KNOWN_COLUMNS = ("url", *TEXT_COLUMNS, "tags", *BOOL_COLUMNS)


def split_tag_cell(cell: str) -> List[str]:
    """
    Split a tags cell on unescaped semicolons.

    Args:
        cell: Raw cell text

    Returns:
        Tag names with escapes resolved and whitespace stripped
    """
    tags: List[str] = []
    current: List[str] = []
    chars = iter(cell)
    for char in chars:
        if char == ESCAPE_CHAR:
            # A trailing lone backslash is kept literally
            current.append(next(chars, ESCAPE_CHAR))
        elif char == TAG_DELIMITER:
            tags.append("".join(current))
            current = []
        else:
            current.append(char)
    tags.append("".join(current))
    return [tag.strip() for tag in tags if tag.strip()]


def join_tag_cell(tags: Iterable[str]) -> str:
    """Inverse of split_tag_cell."""
    return TAG_DELIMITER.join(
        tag.replace(ESCAPE_CHAR, ESCAPE_CHAR * 2).replace(
            TAG_DELIMITER, ESCAPE_CHAR + TAG_DELIMITER
        )
        for tag in tags
    )


class CSVParser(BookmarkParser):
    """
    Parse CSV bookmark files.

    Rows are numbered from 1 starting after the header. A row with fewer
    cells than the header, an empty url or an unparseable boolean cell is
    rejected with an error and skipped.
    """

    @property
    def format(self) -> BookmarkFormat:
        return BookmarkFormat.CSV

    def parse_text(self, text: str) -> ParseResult:
        reader = csv.reader(io.StringIO(text, newline=""))
        result = ParseResult()

        try:
            header = next(reader, None)
            if header is None:
                raise FileParseError("Failed to read CSV header: file is empty")

            columns = self._map_columns(header)

            for row_number, row in enumerate(reader, start=1):
                if not row or all(not cell.strip() for cell in row):
                    continue
                try:
                    result.records.append(
                        self._parse_row(row, columns, len(header), row_number)
                    )
                except ParseError as e:
                    self.logger.debug(f"Skipping CSV row: {e}")
                    result.add_error(e)
        except csv.Error as e:
            raise FileParseError(f"Failed to parse CSV: {e}")

        return result

    def _map_columns(self, header: List[str]) -> Dict[str, int]:
        """Map lowercased column names to their index."""
        columns: Dict[str, int] = {}
        for index, name in enumerate(header):
            key = name.strip().lower()
            if key and key not in columns:
                columns[key] = index

        if "url" not in columns:
            raise FileParseError('CSV header must contain a "url" column')

        unknown = [name for name in columns if name not in KNOWN_COLUMNS]
        if unknown:
            self.logger.debug(f"Ignoring unknown CSV columns: {', '.join(unknown)}")

        return columns

    def _parse_row(
        self,
        row: List[str],
        columns: Dict[str, int],
        header_width: int,
        row_number: int,
    ) -> BookmarkRecord:
        """
        Convert one data row into a record.

        Raises:
            ParseError: If the row is malformed
        """
        if len(row) < header_width:
            raise ParseError(
                row_number,
                f"Expected {header_width} columns, found {len(row)}",
            )

        def cell(name: str) -> str:
            index = columns.get(name)
            return row[index] if index is not None else ""

        url = cell("url").strip()
        if not url:
            raise ParseError(row_number, 'Missing required field "url"')

        flags = {}
        for name in BOOL_COLUMNS:
            try:
                flags[name] = parse_bool(cell(name))
            except ValueError:
                raise ParseError(
                    row_number, f'Invalid boolean in column "{name}": {cell(name)!r}'
                )

        return BookmarkRecord(
            url=url,
            title=cell("title"),
            description=cell("description"),
            notes=cell("notes"),
            tag_names=tuple(split_tag_cell(cell("tags"))),
            source_line=row_number,
            **flags,
        )
