"""
Tests for the Netscape HTML bookmark parser.
"""

import logging

import pytest

from linkding_cli.core.parsers import HTMLParser, get_parser

SAMPLE_HTML = """<!DOCTYPE NETSCAPE-Bookmark-file-1>
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>Bookmarks</TITLE>
<H1>Bookmarks</H1>
<DL><p>
    <DT><H3 ADD_DATE="1717175257">Folder</H3>
    <DL><p>
        <DT><A HREF="https://example.com/" ADD_DATE="1717175221" TAGS="python,web dev" TOREAD="1" PRIVATE="0">Example &amp; Co</A>
        <DD>An example site
    </DL><p>
    <DT><A HREF="https://second.example.com/" ADD_DATE="1717175261">Second</A>
    <DT><A HREF="">Broken</A>
    <DT><A HREF="https://third.example.com/" PRIVATE="1" TOREAD="0">Third</A>
    <DD>Third &lt;description&gt;
</DL><p>
"""


class TestHTMLParser:
    """Test cases for HTMLParser."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = HTMLParser()

    @pytest.fixture
    def result(self):
        return self.parser.parse(SAMPLE_HTML)

    def test_registry(self):
        assert isinstance(get_parser("htm"), HTMLParser)

    def test_flattens_folders(self, result):
        assert [r.url for r in result.records] == [
            "https://example.com/",
            "https://second.example.com/",
            "https://third.example.com/",
        ]

    def test_attributes_mapped(self, result):
        first = result.records[0]
        assert first.title == "Example & Co"
        assert first.tag_names == ("python", "web dev")
        assert first.unread is True
        assert first.shared is True
        assert first.description == "An example site"

    def test_defaults_without_attributes(self, result):
        second = result.records[1]
        assert second.tag_names == ()
        assert second.unread is False
        assert second.shared is False
        assert second.description == ""

    def test_private_and_toread_values(self, result):
        third = result.records[2]
        assert third.shared is False
        assert third.unread is False
        assert third.description == "Third <description>"

    def test_missing_href_reported_with_source_line(self, result):
        assert len(result.errors) == 1
        assert result.errors[0].line == 12
        assert "HREF" in result.errors[0].message

    def test_source_lines_ascending(self, result):
        lines = [r.source_line for r in result.records]
        assert lines == sorted(lines)
        assert lines[0] == 8

    def test_missing_doctype_warns(self, caplog):
        html = '<DL><p><DT><A HREF="https://example.com/">Example</A></DL>'
        with caplog.at_level(logging.WARNING):
            result = self.parser.parse(html)
        assert len(result.records) == 1
        assert "DOCTYPE" in caplog.text

    def test_anchor_outside_dt_ignored(self):
        html = '<p><A HREF="https://example.com/">Loose</A></p>'
        result = self.parser.parse(html)
        assert result.records == []
        assert result.errors == []

    def test_empty_document(self):
        result = self.parser.parse("")
        assert result.records == []

    def test_blank_tags_attribute(self):
        html = '<DL><DT><A HREF="https://example.com/" TAGS=" , a ,">X</A></DL>'
        result = self.parser.parse(html)
        assert result.records[0].tag_names == ("a",)

    def test_description_keeps_inline_markup_text(self):
        html = (
            "<DL><p>\n"
            '<DT><A HREF="https://a.example.com/">A</A>\n'
            "<DD>See <b>this</b> page\n"
            '<DT><A HREF="https://b.example.com/">B</A>\n'
            "</DL><p>\n"
        )
        result = self.parser.parse(html)
        assert [r.description for r in result.records] == ["See this page", ""]

    def test_title_padding_preserved(self):
        html = '<DL><DT><A HREF="https://example.com/">  Padded  </A></DL>'
        assert self.parser.parse(html).records[0].title == "  Padded  "

    def test_title_layout_whitespace_removed(self):
        html = '<DL><DT><A HREF="https://example.com/">\n    Wrapped\n  </A></DL>'
        assert self.parser.parse(html).records[0].title == "Wrapped"
