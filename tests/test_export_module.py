"""
Tests for export and backup.
"""

import io
import json
from datetime import datetime
from unittest.mock import patch

import pytest

from linkding_cli.core.data_models import ExportOptions
from linkding_cli.core.export_module import (
    BookmarkExportManager,
    backup_filename,
    create_backup,
)
from linkding_cli.core.formats import BookmarkFormat
from linkding_cli.utils.error_handler import ExportError, NetworkError


class TestBookmarkExportManager:
    def test_export_to_stream(self, populated_service):
        stream = io.StringIO()
        count = BookmarkExportManager(populated_service).export_to_stream(stream)

        assert count == 3
        data = json.loads(stream.getvalue())
        assert [b["id"] for b in data["bookmarks"]] == [1, 2, 3]

    def test_exclude_archived(self, populated_service):
        manager = BookmarkExportManager(
            populated_service, ExportOptions(include_archived=False)
        )
        assert [b.id for b in manager.fetch_bookmarks()] == [1, 2]

    def test_tag_filter(self, populated_service):
        manager = BookmarkExportManager(
            populated_service, ExportOptions(tags=("programming",))
        )
        assert [b.id for b in manager.fetch_bookmarks()] == [1, 2]

    def test_export_to_file_html(self, populated_service, tmp_path):
        path = tmp_path / "out.html"
        manager = BookmarkExportManager(
            populated_service, ExportOptions(format=BookmarkFormat.HTML)
        )

        result = manager.export_to_file(path)

        assert result.count == 3
        assert result.format_name == "HTML"
        assert path.read_text(encoding="utf-8").count("<DT>") == 3

    def test_fetch_error_propagates(self, populated_service):
        populated_service.fetch_error = NetworkError("down")
        with pytest.raises(NetworkError):
            BookmarkExportManager(populated_service).export_to_stream(io.StringIO())


class TestBackup:
    def test_backup_filename(self):
        now = datetime(2024, 1, 31, 14, 25, 0)
        assert backup_filename(now=now) == "linkding-backup-2024-01-31T142500.json"
        assert backup_filename("mine", now) == "mine-2024-01-31T142500.json"

    def test_create_backup(self, populated_service, tmp_path):
        now = datetime(2024, 1, 31, 14, 25, 0)
        result = create_backup(populated_service, tmp_path / "backups", now=now)

        expected = tmp_path / "backups" / "linkding-backup-2024-01-31T142500.json"
        assert result.path == expected
        assert result.count == 3
        data = json.loads(expected.read_text(encoding="utf-8"))
        assert any(b["is_archived"] for b in data["bookmarks"])

    def test_failed_backup_removes_partial_file(self, populated_service, tmp_path):
        now = datetime(2024, 1, 31, 14, 25, 0)

        def failing_write(self, bookmarks, stream):
            stream.write("{partial")
            raise OSError("disk full")

        with patch(
            "linkding_cli.core.exporters.json_exporter.JSONExporter.write",
            failing_write,
        ):
            with pytest.raises(ExportError):
                create_backup(populated_service, tmp_path, now=now)

        assert list(tmp_path.iterdir()) == []

    def test_output_dir_is_a_file(self, populated_service, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(ExportError):
            create_backup(populated_service, blocker)
