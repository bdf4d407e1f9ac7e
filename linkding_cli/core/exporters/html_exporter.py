"""
Netscape HTML bookmark exporter.

Generates the bookmark file format understood by browsers and by the
HTML parser in this package.
"""

from typing import List, TextIO

from .base import BookmarkExporter
from ..data_models import RemoteBookmark
from ..formats import BookmarkFormat


def escape_html(text: str) -> str:
    """
    Escape HTML special characters.

    Args:
        text: Text to escape

    Returns:
        HTML-escaped text
    """
    if not text:
        return ""

    text = text.replace("&", "&amp;")
    text = text.replace("<", "&lt;")
    text = text.replace(">", "&gt;")
    text = text.replace('"', "&quot;")
    text = text.replace("'", "&#x27;")

    return text


class HTMLExporter(BookmarkExporter):
    """Export bookmarks as a flat Netscape bookmark file."""

    HEADER_LINES = [
        "<!DOCTYPE NETSCAPE-Bookmark-file-1>",
        "<!-- This is an automatically generated file.",
        "     It will be read and overwritten.",
        "     DO NOT EDIT! -->",
        '<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">',
    ]

    def __init__(self, title: str = "Bookmarks"):
        super().__init__()
        self.title = title

    @property
    def format(self) -> BookmarkFormat:
        return BookmarkFormat.HTML

    def write(self, bookmarks: List[RemoteBookmark], stream: TextIO) -> None:
        lines = list(self.HEADER_LINES)
        lines.append(f"<TITLE>{escape_html(self.title)}</TITLE>")
        lines.append(f"<H1>{escape_html(self.title)}</H1>")
        lines.append("<DL><p>")

        for bookmark in bookmarks:
            lines.extend(self._bookmark_lines(bookmark))

        lines.append("</DL><p>")
        stream.write("\n".join(lines) + "\n")

    def _bookmark_lines(self, bookmark: RemoteBookmark) -> List[str]:
        """Render one ``<DT>`` entry and its optional ``<DD>``."""
        attributes = [
            f'HREF="{escape_html(bookmark.url)}"',
            f'ADD_DATE="{self.unix_timestamp(bookmark.date_added)}"',
            f'LAST_MODIFIED="{self.unix_timestamp(bookmark.date_modified)}"',
        ]
        if bookmark.tag_names:
            tags = ",".join(escape_html(tag) for tag in bookmark.tag_names)
            attributes.append(f'TAGS="{tags}"')
        if bookmark.unread:
            attributes.append('TOREAD="1"')
        attributes.append(f'PRIVATE="{0 if bookmark.shared else 1}"')

        lines = [
            f"    <DT><A {' '.join(attributes)}>{escape_html(bookmark.title)}</A>"
        ]
        if bookmark.description:
            lines.append(f"    <DD>{escape_html(bookmark.description)}</DD>")
        return lines
