"""
JSON bookmark parser.

Accepts either a top-level array of bookmark objects or the envelope object
written by the JSON exporter (``{"version": ..., "bookmarks": [...]}``).
"""

import json
from typing import Any, Dict, List

from .base import BookmarkParser, ParseResult
from ..data_models import BookmarkRecord
from ..formats import BookmarkFormat
from ...utils.error_handler import FileParseError, ParseError

TEXT_FIELDS = ("title", "description", "notes")

# Canonical field name -> accepted spellings, first match wins
FIELD_ALIASES = {
    "tag_names": ("tag_names", "tags"),
    "unread": ("unread",),
    "shared": ("shared",),
    "archived": ("is_archived", "archived"),
}


class JSONParser(BookmarkParser):
    """
    Parse bookmark JSON files.

    The 1-based index of each element in the bookmark array is used as its
    source line.
    """

    @property
    def format(self) -> BookmarkFormat:
        return BookmarkFormat.JSON

    def parse_text(self, text: str) -> ParseResult:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise FileParseError(f"Failed to parse JSON: {e}")

        entries = self._extract_entries(data)
        result = ParseResult()

        for index, entry in enumerate(entries, start=1):
            try:
                result.records.append(self._parse_entry(entry, index))
            except ParseError as e:
                self.logger.debug(f"Skipping JSON entry: {e}")
                result.add_error(e)

        return result

    def _extract_entries(self, data: Any) -> List[Any]:
        """Locate the bookmark array in the decoded document."""
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("bookmarks"), list):
            return data["bookmarks"]
        raise FileParseError(
            "Failed to parse JSON: expected an array of bookmarks or an "
            "object with a \"bookmarks\" array"
        )

    def _parse_entry(self, entry: Any, line: int) -> BookmarkRecord:
        """
        Convert one array element into a record.

        Raises:
            ParseError: If the element is malformed
        """
        if not isinstance(entry, dict):
            raise ParseError(line, "Bookmark entry must be an object")

        url = entry.get("url")
        if url is None or (isinstance(url, str) and not url.strip()):
            raise ParseError(line, 'Missing required field "url"')
        if not isinstance(url, str):
            raise ParseError(line, 'Field "url" must be a string')

        fields: Dict[str, Any] = {}
        for name in TEXT_FIELDS:
            value = entry.get(name)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ParseError(line, f'Field "{name}" must be a string')
            fields[name] = value

        tags = self._lookup(entry, "tag_names")
        if tags is None:
            tags = []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ParseError(line, 'Field "tag_names" must be an array of strings')

        for name in ("unread", "shared", "archived"):
            value = self._lookup(entry, name)
            if value is None:
                value = False
            if not isinstance(value, bool):
                raise ParseError(line, f'Field "{name}" must be a boolean')
            fields[name] = value

        return BookmarkRecord(
            url=url.strip(),
            tag_names=tuple(tags),
            source_line=line,
            **fields,
        )

    @staticmethod
    def _lookup(entry: Dict[str, Any], name: str) -> Any:
        for key in FIELD_ALIASES[name]:
            if key in entry:
                return entry[key]
        return None
