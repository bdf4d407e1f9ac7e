"""
linkding-cli: command-line client for the linkding bookmark manager.

Bookmark CRUD, tag management, and bulk import/export in JSON, Netscape
HTML and CSV formats.
"""

__version__ = "1.0.0"
