"""
Tests for the pagination aggregator.
"""

import logging

import pytest

from linkding_cli.core.data_models import Page, ResourceKind
from linkding_cli.core.pagination import (
    PaginationAggregator,
    fetch_all_bookmarks,
    fetch_all_bundles,
    fetch_all_tags,
)
from linkding_cli.utils.error_handler import NetworkError


def make_dataset(service_factory, bookmark_factory, count, archived=0):
    bookmarks = [
        bookmark_factory(i, f"https://example.com/{i}") for i in range(1, count + 1)
    ]
    bookmarks.extend(
        bookmark_factory(count + i, f"https://example.com/a{i}", is_archived=True)
        for i in range(1, archived + 1)
    )
    return service_factory(bookmarks)


class TestPaginationAggregator:
    """Tests for PaginationAggregator.collect."""

    @pytest.mark.parametrize("count", [0, 1, 100, 101, 250])
    def test_collects_every_item_exactly_once(
        self, service_factory, bookmark_factory, count
    ):
        service = make_dataset(service_factory, bookmark_factory, count)
        aggregator = PaginationAggregator(page_size=100)

        items = aggregator.collect_resource(service, ResourceKind.BOOKMARKS)

        assert len(items) == count
        assert len({b.id for b in items}) == count
        assert [b.id for b in items] == list(range(1, count + 1))

    @pytest.mark.parametrize(
        "count, expected_pages", [(0, 1), (1, 1), (100, 1), (101, 2), (250, 3)]
    )
    def test_page_requests(self, service_factory, bookmark_factory, count, expected_pages):
        service = make_dataset(service_factory, bookmark_factory, count)
        PaginationAggregator(page_size=100).collect_resource(
            service, ResourceKind.BOOKMARKS
        )

        offsets = [call[2] for call in service.fetch_calls]
        assert offsets == [i * 100 for i in range(expected_pages)]
        assert all(call[3] == 100 for call in service.fetch_calls)

    def test_empty_page_with_next_stops(self, caplog):
        calls = []

        def fetch(offset, limit):
            calls.append(offset)
            if offset == 0:
                return Page(count=5, items=(1, 2), has_next=True)
            return Page(count=5, items=(), has_next=True)

        with caplog.at_level(logging.WARNING):
            items = PaginationAggregator(page_size=2).collect(fetch)

        assert items == [1, 2]
        assert calls == [0, 2]
        assert "empty" in caplog.text

    def test_fetch_error_propagates(self):
        def fetch(offset, limit):
            if offset > 0:
                raise NetworkError("connection reset")
            return Page(count=4, items=(1, 2), has_next=True)

        with pytest.raises(NetworkError):
            PaginationAggregator(page_size=2).collect(fetch)

    def test_invalid_page_size(self):
        with pytest.raises(ValueError):
            PaginationAggregator(page_size=0)


class TestFetchHelpers:
    """Tests for fetch_all_bookmarks and fetch_all_tags."""

    def test_includes_archived_after_active(self, populated_service):
        bookmarks = fetch_all_bookmarks(populated_service)
        assert [b.id for b in bookmarks] == [1, 2, 3]
        kinds = [call[1] for call in populated_service.fetch_calls]
        assert kinds == [ResourceKind.BOOKMARKS, ResourceKind.ARCHIVED_BOOKMARKS]

    def test_excludes_archived(self, populated_service):
        bookmarks = fetch_all_bookmarks(populated_service, include_archived=False)
        assert [b.id for b in bookmarks] == [1, 2]

    def test_tag_filter(self, populated_service):
        bookmarks = fetch_all_bookmarks(populated_service, tags=["python"])
        assert [b.id for b in bookmarks] == [1, 3]

    def test_archived_pages_walked(self, service_factory, bookmark_factory):
        service = make_dataset(service_factory, bookmark_factory, 3, archived=150)
        aggregator = PaginationAggregator(page_size=100)
        bookmarks = fetch_all_bookmarks(service, aggregator=aggregator)
        assert len(bookmarks) == 153

    def test_fetch_all_tags(self, populated_service):
        tags = fetch_all_tags(populated_service)
        assert [t.name for t in tags] == ["python", "programming", "rust", "unused"]

    def test_fetch_all_bundles(self, populated_service):
        aggregator = PaginationAggregator(page_size=1)
        bundles = fetch_all_bundles(populated_service, aggregator)
        assert [b.name for b in bundles] == ["Work", "Reading"]
        assert len(populated_service.fetch_calls) == 2
