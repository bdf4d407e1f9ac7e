"""
Terminal rendering for command results.

Human output uses Rich tables and plain status lines; machine output is
indented JSON. Both write to stdout by default so they can be piped.
"""

import json
import sys
from typing import Any, Dict, List, Optional, Sequence, TextIO, Tuple

from rich.console import Console
from rich.table import Table

from ..core.data_models import Bundle, ImportResult, RemoteBookmark, TagCount
from ..core.protocol import BulkUpdateResult

ICONS = {
    "complete": "✓",
    "skipped": "⊘",
    "failed": "✗",
}

TITLE_WIDTH = 38
TAGS_WIDTH = 18
DATE_FORMAT = "%Y-%m-%d"


def truncate(text: str, width: int) -> str:
    """Shorten ``text`` to ``width`` characters, marking the cut with '...'."""
    if len(text) <= width:
        return text
    if width <= 3:
        return text[:width]
    return text[: width - 3] + "..."


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


class OutputFormatter:
    """
    Render bookmarks, tags and operation results.

    Example:
        >>> formatter = OutputFormatter()
        >>> formatter.print_bookmarks(page.items, total=page.count)
    """

    def __init__(self, stream: Optional[TextIO] = None, json_mode: bool = False):
        """
        Initialize the formatter.

        Args:
            stream: Output stream (defaults to stdout)
            json_mode: Emit JSON instead of tables and status lines
        """
        self.stream = stream or sys.stdout
        self.json_mode = json_mode
        self.console = Console(
            file=self.stream, highlight=False, soft_wrap=True, emoji=False
        )

    def _line(self, text: str = "") -> None:
        self.console.print(text, markup=False)

    def print_json(self, data: Any) -> None:
        """Write ``data`` as indented JSON followed by a newline."""
        self.stream.write(to_json(data) + "\n")
        self.stream.flush()

    def message(self, text: str, data: Optional[Dict[str, Any]] = None) -> None:
        """Status message in human mode, ``data`` as JSON in JSON mode."""
        if self.json_mode:
            if data is not None:
                self.print_json(data)
            return
        self._line(text)

    # ------------------------------------------------------------------
    # Bookmarks
    # ------------------------------------------------------------------

    def print_bookmarks(
        self, bookmarks: Sequence[RemoteBookmark], total: Optional[int] = None
    ) -> None:
        """
        Render a bookmark listing.

        Args:
            bookmarks: Bookmarks to show
            total: Total matches on the server, when more than shown
        """
        if self.json_mode:
            self.print_json(
                {
                    "count": total if total is not None else len(bookmarks),
                    "results": [b.to_dict() for b in bookmarks],
                }
            )
            return

        if not bookmarks:
            self._line("No bookmarks found")
            return

        table = Table(box=None, show_header=True, pad_edge=False)
        table.add_column("ID", justify="right", no_wrap=True)
        table.add_column("TITLE", no_wrap=True, overflow="ellipsis")
        table.add_column("TAGS", no_wrap=True, overflow="ellipsis")
        table.add_column("DATE", no_wrap=True)

        for bookmark in bookmarks:
            table.add_row(
                str(bookmark.id),
                truncate(bookmark.display_title, TITLE_WIDTH),
                truncate(", ".join(bookmark.tag_names), TAGS_WIDTH),
                bookmark.date_added.strftime(DATE_FORMAT) if bookmark.date_added else "",
            )
        self.console.print(table)

        if total is not None and total > len(bookmarks):
            self._line()
            self._line(f"Showing {len(bookmarks)} of {total} bookmarks")

    def print_bookmark(self, bookmark: RemoteBookmark) -> None:
        """Render every field of a single bookmark."""
        if self.json_mode:
            self.print_json(bookmark.to_dict())
            return

        fields = [
            ("ID", str(bookmark.id)),
            ("URL", bookmark.url),
            ("Title", bookmark.display_title),
            ("Description", bookmark.description or bookmark.website_description),
            ("Notes", bookmark.notes),
            ("Tags", ", ".join(bookmark.tag_names)),
            ("Unread", "yes" if bookmark.unread else "no"),
            ("Shared", "yes" if bookmark.shared else "no"),
            ("Archived", "yes" if bookmark.is_archived else "no"),
            ("Added", bookmark.date_added.isoformat() if bookmark.date_added else ""),
            (
                "Modified",
                bookmark.date_modified.isoformat() if bookmark.date_modified else "",
            ),
        ]
        width = max(len(label) for label, _ in fields)
        for label, value in fields:
            if value:
                self._line(f"{label + ':':<{width + 1}} {value}")

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def print_tags(self, tags: Sequence[TagCount]) -> None:
        if self.json_mode:
            self.print_json([tag.to_dict() for tag in tags])
            return

        if not tags:
            self._line("No tags found")
            return

        table = Table(box=None, show_header=True, pad_edge=False)
        table.add_column("TAG", no_wrap=True, overflow="ellipsis")
        table.add_column("COUNT", justify="right", no_wrap=True)
        for tag in tags:
            table.add_row(tag.name, str(tag.count))
        self.console.print(table)

    # ------------------------------------------------------------------
    # Bundles
    # ------------------------------------------------------------------

    def print_bundles(self, bundles: Sequence[Bundle]) -> None:
        if self.json_mode:
            self.print_json([bundle.to_dict() for bundle in bundles])
            return

        if not bundles:
            self._line("No bundles found")
            return

        table = Table(box=None, show_header=True, pad_edge=False)
        table.add_column("ID", justify="right", no_wrap=True)
        table.add_column("NAME", no_wrap=True, overflow="ellipsis")
        table.add_column("SEARCH", no_wrap=True, overflow="ellipsis")
        table.add_column("ORDER", justify="right", no_wrap=True)
        for bundle in bundles:
            table.add_row(
                str(bundle.id),
                truncate(bundle.name, TITLE_WIDTH),
                truncate(bundle.search or "-", TITLE_WIDTH),
                str(bundle.order),
            )
        self.console.print(table)

    def print_bundle(self, bundle: Bundle) -> None:
        if self.json_mode:
            self.print_json(bundle.to_dict())
            return

        fields = [
            ("ID", str(bundle.id)),
            ("Name", bundle.name),
            ("Search", bundle.search),
            ("Any tags", bundle.any_tags),
            ("All tags", bundle.all_tags),
            ("Excluded tags", bundle.excluded_tags),
            ("Order", str(bundle.order)),
            ("Created", bundle.date_created.isoformat() if bundle.date_created else ""),
            (
                "Modified",
                bundle.date_modified.isoformat() if bundle.date_modified else "",
            ),
        ]
        width = max(len(label) for label, _ in fields)
        for label, value in fields:
            if value:
                self._line(f"{label + ':':<{width + 1}} {value}")

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def print_import_result(self, result: ImportResult, dry_run: bool = False) -> None:
        """
        Render an import summary.

        Zero counts are omitted in human mode; errors are listed with their
        source line in ascending order.
        """
        if self.json_mode:
            self.print_json(result.to_dict())
            return

        if dry_run:
            self._line("Dry run: no changes were made")

        lines: List[str] = []
        if result.added:
            lines.append(f"{ICONS['complete']} {result.added} new bookmarks added")
        if result.updated:
            lines.append(
                f"{ICONS['complete']} {result.updated} existing bookmarks updated"
            )
        if result.skipped:
            lines.append(
                f"{ICONS['skipped']} {result.skipped} skipped (--skip-duplicates)"
            )
        # Parse errors count as failures here even though they never
        # reached reconciliation
        if result.errors:
            lines.append(
                f"{ICONS['failed']} {len(result.errors)} failed (see errors below)"
            )
        if not lines:
            lines.append("No bookmarks to import")

        for line in lines:
            self._line(line)

        if result.errors:
            self._line()
            self._line("Errors:")
            for error in result.errors:
                self._line(f"  Line {error.line}: {error.message}")

    def print_bulk_result(self, action: str, result: BulkUpdateResult) -> None:
        """Render the outcome of a rename or removal across bookmarks."""
        if self.json_mode:
            self.print_json(result.to_dict())
            return

        self._line(
            f"{ICONS['complete']} {action} on {result.succeeded} of "
            f"{result.total} bookmarks"
        )
        if result.has_errors:
            self._line(f"{ICONS['failed']} {result.failed} failed")
            for error in result.errors:
                self._line(f"  Bookmark {error['id']}: {error['error']}")

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def print_profile(self, profile: Dict[str, Any]) -> None:
        """Render user preferences, flattening nested sections."""
        if self.json_mode:
            self.print_json(profile)
            return

        rows: List[Tuple[str, Any]] = []
        for key, value in profile.items():
            if isinstance(value, dict):
                rows.extend((f"{key}.{sub}", sub_value) for sub, sub_value in value.items())
            else:
                rows.append((key, value))
        if not rows:
            self._line("No profile settings returned")
            return

        width = max(len(label) for label, _ in rows)
        for label, value in rows:
            if isinstance(value, bool):
                value = "enabled" if value else "disabled"
            self._line(f"{label + ':':<{width + 1}} {value}")
