"""
Bookmark file parsers.

One parser per BookmarkFormat; ``get_parser`` resolves a format to a
parser instance.
"""

from typing import Union

from .base import BookmarkParser, ParseResult
from .csv_parser import CSVParser
from .html_parser import HTMLParser
from .json_parser import JSONParser
from ..formats import BookmarkFormat

__all__ = [
    "BookmarkParser",
    "ParseResult",
    "JSONParser",
    "HTMLParser",
    "CSVParser",
    "PARSERS",
    "get_parser",
]


# Format registry; must cover every BookmarkFormat member
PARSERS = {
    BookmarkFormat.JSON: JSONParser,
    BookmarkFormat.HTML: HTMLParser,
    BookmarkFormat.CSV: CSVParser,
}


def get_parser(format: Union[str, BookmarkFormat]) -> BookmarkParser:
    """
    Get a parser instance for a format.

    Args:
        format: BookmarkFormat or format name (json, html, csv)

    Returns:
        Parser for the format

    Raises:
        UnsupportedFormatError: If the format name is unknown
    """
    return PARSERS[BookmarkFormat.from_name(format)]()
