"""
Tests for the high-level importer.
"""

import json

import pytest

from linkding_cli.core.data_models import ImportOptions
from linkding_cli.core.import_module import BookmarkImporter, import_bookmarks
from linkding_cli.utils.error_handler import (
    FileParseError,
    FormatRequiredError,
    UnsupportedFormatError,
)


@pytest.fixture
def json_file(tmp_path):
    path = tmp_path / "bookmarks.json"
    path.write_text(
        json.dumps(
            [
                {"url": "https://example.com/python", "title": "Python"},
                {"title": "No URL"},
                {"url": "https://new.example.com", "tag_names": ["new"]},
            ]
        ),
        encoding="utf-8",
    )
    return path


class TestBookmarkImporter:
    """Test cases for BookmarkImporter."""

    def test_import_json(self, populated_service, json_file):
        importer = BookmarkImporter(populated_service)
        result = importer.import_file(json_file)

        assert result.updated == 1
        assert result.added == 1
        assert [e.line for e in result.errors] == [2]

        stats = importer.get_import_statistics()
        assert stats["format"] == "json"
        assert stats["records_parsed"] == 2
        assert stats["parse_errors"] == 1

    def test_format_override(self, empty_service, tmp_path):
        path = tmp_path / "bookmarks.txt"
        path.write_text("url,title\nhttps://example.com,Example\n", encoding="utf-8")

        result = import_bookmarks(empty_service, path, ImportOptions(format="csv"))

        assert result.added == 1

    def test_unknown_extension_without_override(self, empty_service, tmp_path):
        path = tmp_path / "bookmarks.txt"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(FormatRequiredError):
            import_bookmarks(empty_service, path)
        assert empty_service.calls == []

    def test_unsupported_override(self, empty_service, json_file):
        with pytest.raises(UnsupportedFormatError):
            import_bookmarks(empty_service, json_file, ImportOptions(format="xml"))

    def test_parse_failure_before_network(self, empty_service, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(FileParseError):
            import_bookmarks(empty_service, path)
        assert empty_service.calls == []

    def test_load_then_import_parsed(self, populated_service, json_file):
        importer = BookmarkImporter(populated_service)

        parse_result = importer.load_file(json_file)
        assert populated_service.calls == []
        assert len(parse_result.records) == 2
        assert importer.get_import_statistics()["records_parsed"] == 2

        result = importer.import_parsed(parse_result)
        assert (result.added, result.updated) == (1, 1)
        assert [e.line for e in result.errors] == [2]

    def test_html_import(self, empty_service, tmp_path):
        path = tmp_path / "bookmarks.HTML"
        path.write_text(
            "<!DOCTYPE NETSCAPE-Bookmark-file-1>\n"
            "<DL><p>\n"
            '<DT><A HREF="https://example.com/" TAGS="a,b">Example</A>\n'
            "</DL><p>\n",
            encoding="utf-8",
        )

        result = import_bookmarks(
            empty_service, path, ImportOptions(add_tags=("imported",))
        )

        assert result.added == 1
        assert empty_service.bookmarks[0].tag_names == ["a", "b", "imported"]

    def test_progress_callback(self, empty_service, json_file):
        calls = []
        importer = BookmarkImporter(
            empty_service, progress_callback=lambda done, total: calls.append(done)
        )
        importer.import_file(json_file)
        assert calls == [1, 2]
