"""
Netscape bookmark file parser.

Handles the HTML bookmark format exported by browsers and by linkding
itself. Folder structure (``<DL>``/``<H3>``) is ignored; every
``<DT><A HREF>`` anchor becomes one record.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .base import BookmarkParser, ParseResult
from ..data_models import BookmarkRecord
from ..formats import BookmarkFormat
from ...utils.error_handler import FileParseError, ParseError

# Whitespace at either end that spans a line break comes from the file
# layout rather than from the bookmark text
LAYOUT_WHITESPACE = re.compile(r"^\s*\n\s*|\s*\n\s*$")


def strip_layout(text: str) -> str:
    """Remove layout whitespace around ``text``, keeping inline padding."""
    return LAYOUT_WHITESPACE.sub("", text)


class HTMLParser(BookmarkParser):
    """
    Parse Netscape-style HTML bookmark files.

    Attribute mapping:
        HREF -> url, TAGS (comma-separated) -> tag_names,
        TOREAD="1" -> unread, PRIVATE="0" -> shared,
        following <DD> text -> description
    """

    DOCTYPE_PATTERN = r"<!DOCTYPE\s+NETSCAPE-Bookmark-file-1>"

    @property
    def format(self) -> BookmarkFormat:
        return BookmarkFormat.HTML

    def parse_text(self, text: str) -> ParseResult:
        if not re.search(self.DOCTYPE_PATTERN, text[:2048], re.IGNORECASE):
            self.logger.warning(
                "Missing Netscape bookmark DOCTYPE, parsing anchors anyway"
            )

        try:
            soup = BeautifulSoup(text, "html.parser")
        except Exception as e:
            raise FileParseError(f"Failed to parse HTML: {e}")

        result = ParseResult()
        for anchor in soup.find_all("a"):
            if anchor.parent is None or anchor.parent.name != "dt":
                continue
            try:
                result.records.append(self._parse_anchor(anchor))
            except ParseError as e:
                self.logger.debug(f"Skipping HTML anchor: {e}")
                result.add_error(e)

        return result

    def _parse_anchor(self, anchor: Tag) -> BookmarkRecord:
        """
        Build a record from one ``<A>`` element.

        Raises:
            ParseError: If the anchor has no usable HREF
        """
        line = anchor.sourceline or 0
        href = (anchor.get("href") or "").strip()
        if not href:
            raise ParseError(line, 'Missing required attribute "HREF"')

        tags_attr = anchor.get("tags") or ""
        tags = tuple(tag.strip() for tag in tags_attr.split(",") if tag.strip())

        return BookmarkRecord(
            url=href,
            title=strip_layout(anchor.get_text()),
            description=self._find_description(anchor) or "",
            tag_names=tags,
            unread=(anchor.get("toread") or "").strip() == "1",
            shared=(anchor.get("private") or "").strip() == "0",
            source_line=line,
        )

    def _find_description(self, anchor: Tag) -> Optional[str]:
        """
        Return the text of a ``<DD>`` that follows the anchor.

        The description belongs to the anchor only when the ``<DD>`` comes
        before the next ``<DT>`` or anchor. html.parser nests the following
        entries inside an unclosed ``<DD>``, so text is collected up to the
        first nested ``<DT>`` or ``<DL>``. Inline markup contributes its text.
        """
        following = anchor.find_next(["dd", "dt", "a"])
        if following is None or following.name != "dd":
            return None

        parts = []
        for child in following.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                parts.append(str(child))
            elif child.name in ("dt", "dl") or child.find(["dt", "dl"]) is not None:
                break
            else:
                parts.append(child.get_text())
        return strip_layout("".join(parts))
