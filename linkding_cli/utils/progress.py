"""
Progress bar for long-running record loops.
"""

import sys
from typing import Any, Optional, TextIO

from tqdm import tqdm


class ProgressBar:
    """
    tqdm bar driven by ``(processed, total)`` callbacks.

    The bar is created on the first callback, once the total is known, and
    writes to stderr so stdout stays free for results.

    Example:
        >>> with ProgressBar("Importing") as progress:
        ...     importer = BookmarkImporter(client, progress_callback=progress.update)
        ...     importer.import_file("bookmarks.json")
    """

    def __init__(
        self,
        description: str,
        stream: Optional[TextIO] = None,
        enabled: bool = True,
    ):
        self.description = description
        self.stream = stream or sys.stderr
        self.enabled = enabled
        self.pbar: Optional[tqdm] = None

    def update(self, processed: int, total: int, *_: Any) -> None:
        """Advance the bar to ``processed`` of ``total``."""
        if not self.enabled:
            return
        if self.pbar is None:
            self.pbar = tqdm(
                total=total,
                desc=self.description,
                unit="bookmark",
                file=self.stream,
                leave=False,
            )
        self.pbar.update(processed - self.pbar.n)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> "ProgressBar":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
