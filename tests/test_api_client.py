"""
Tests for the linkding HTTP client.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from linkding_cli.core.api_client import LinkdingClient, build_search_query
from linkding_cli.core.data_models import (
    BookmarkRecord,
    Bundle,
    RemoteBookmark,
    RemoteTag,
    ResourceKind,
)
from linkding_cli.core.protocol import BookmarkService
from linkding_cli.utils.error_handler import (
    APIClientError,
    APIError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
)

from conftest import BASE_URL, TEST_TOKEN

BOOKMARK_JSON = {
    "id": 1,
    "url": "https://example.com",
    "title": "Example",
    "description": "",
    "notes": "",
    "website_title": None,
    "website_description": None,
    "tag_names": ["python"],
    "unread": False,
    "shared": False,
    "is_archived": False,
    "date_added": "2024-01-01T12:00:00Z",
    "date_modified": "2024-01-01T12:00:00Z",
}


def make_response(status_code=200, json_data=None, text=None):
    response = Mock()
    response.status_code = status_code
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    response.text = text if text is not None else str(json_data or "")
    return response


def page_json(results, next_url=None):
    return {"count": len(results), "next": next_url, "previous": None, "results": results}


@pytest.fixture
def client():
    return LinkdingClient(BASE_URL + "/", TEST_TOKEN, timeout=5, max_retries=2)


@pytest.fixture
def mock_request():
    with patch.object(requests.Session, "request") as mock:
        yield mock


# ============================================================================
# Helpers
# ============================================================================


class TestBuildSearchQuery:
    def test_query_only(self):
        assert build_search_query("  rust  ") == "rust"

    def test_tags(self):
        assert build_search_query("", ["python", "#web"]) == "#python #web"

    def test_combined(self):
        assert build_search_query("async", ["python"]) == "async #python"

    def test_empty(self):
        assert build_search_query() == ""


# ============================================================================
# Session setup
# ============================================================================


class TestSession:
    def test_headers(self, client):
        headers = client.session.headers
        assert headers["Authorization"] == f"Token {TEST_TOKEN}"
        assert headers["Accept"] == "application/json"

    def test_base_url_trailing_slash_removed(self, client):
        assert client.base_url == BASE_URL

    def test_retry_adapter(self, client):
        adapter = client.session.get_adapter(BASE_URL)
        assert adapter.max_retries.total == 2
        assert 503 in adapter.max_retries.status_forcelist

    def test_satisfies_protocol(self, client):
        assert isinstance(client, BookmarkService)


# ============================================================================
# Requests
# ============================================================================


class TestFetchPage:
    def test_bookmark_page(self, client, mock_request):
        mock_request.return_value = make_response(
            json_data=page_json([BOOKMARK_JSON], next_url=f"{BASE_URL}/api/bookmarks/?offset=1")
        )

        page = client.fetch_page(ResourceKind.BOOKMARKS, None, 0, 1)

        method, url = mock_request.call_args[0]
        assert method == "GET"
        assert url == f"{BASE_URL}/api/bookmarks/"
        assert mock_request.call_args[1]["params"] == {"limit": 1, "offset": 0}
        assert mock_request.call_args[1]["timeout"] == 5
        assert page.has_next is True
        assert isinstance(page.items[0], RemoteBookmark)
        assert page.items[0].tag_names == ["python"]

    def test_filters(self, client, mock_request):
        mock_request.return_value = make_response(json_data=page_json([]))

        client.fetch_page(
            ResourceKind.ARCHIVED_BOOKMARKS,
            {"query": "", "tags": ["python"], "unread": True},
            100,
            50,
        )

        url = mock_request.call_args[0][1]
        params = mock_request.call_args[1]["params"]
        assert url.endswith("/api/bookmarks/archived/")
        assert params == {"limit": 50, "offset": 100, "q": "#python", "unread": "yes"}

    def test_tags_ignore_filters(self, client, mock_request):
        mock_request.return_value = make_response(
            json_data=page_json([{"id": 3, "name": "python", "date_added": None}])
        )

        page = client.fetch_page(ResourceKind.TAGS, {"tags": ["x"]}, 0, 100)

        assert mock_request.call_args[1]["params"] == {"limit": 100, "offset": 0}
        assert page.items == (RemoteTag(id=3, name="python"),)
        assert page.has_next is False

    def test_get_bookmarks(self, client, mock_request):
        mock_request.return_value = make_response(json_data=page_json([]))
        client.get_bookmarks(query="django", tags=["web"], limit=10, offset=20)
        params = mock_request.call_args[1]["params"]
        assert params["q"] == "django #web"
        assert "unread" not in params


class TestMutations:
    def test_create_omits_empty_strings(self, client, mock_request):
        mock_request.return_value = make_response(201, json_data=BOOKMARK_JSON)
        record = BookmarkRecord(url="https://example.com", title="Example", tag_names=("a",))

        bookmark = client.create_bookmark(record)

        method, url = mock_request.call_args[0]
        payload = mock_request.call_args[1]["json"]
        assert method == "POST"
        assert payload == {
            "url": "https://example.com",
            "title": "Example",
            "tag_names": ["a"],
            "unread": False,
            "shared": False,
            "is_archived": False,
        }
        assert bookmark.id == 1

    def test_update_is_patch(self, client, mock_request):
        mock_request.return_value = make_response(json_data=BOOKMARK_JSON)

        client.update_bookmark(1, {"tag_names": ["b"]})

        method, url = mock_request.call_args[0]
        assert method == "PATCH"
        assert url == f"{BASE_URL}/api/bookmarks/1/"
        assert mock_request.call_args[1]["json"] == {"tag_names": ["b"]}

    def test_delete(self, client, mock_request):
        mock_request.return_value = make_response(204)
        client.delete_bookmark(7)
        assert mock_request.call_args[0] == ("DELETE", f"{BASE_URL}/api/bookmarks/7/")

    def test_create_tag(self, client, mock_request):
        mock_request.return_value = make_response(
            201, json_data={"id": 9, "name": "new", "date_added": None}
        )
        assert client.create_tag("new").id == 9


BUNDLE_JSON = {
    "id": 4,
    "name": "Work",
    "search": "project",
    "any_tags": "python rust",
    "all_tags": "",
    "excluded_tags": "archive",
    "order": 1,
    "date_created": "2024-01-01T12:00:00Z",
    "date_modified": "2024-01-01T12:00:00Z",
}


class TestBundles:
    def test_bundle_page_ignores_filters(self, client, mock_request):
        mock_request.return_value = make_response(json_data=page_json([BUNDLE_JSON]))

        page = client.fetch_page(ResourceKind.BUNDLES, {"tags": ["x"]}, 0, 100)

        assert mock_request.call_args[0][1] == f"{BASE_URL}/api/bundles/"
        assert mock_request.call_args[1]["params"] == {"limit": 100, "offset": 0}
        assert isinstance(page.items[0], Bundle)
        assert page.items[0].any_tags == "python rust"

    def test_get_bundle(self, client, mock_request):
        mock_request.return_value = make_response(json_data=BUNDLE_JSON)
        bundle = client.get_bundle(4)
        assert mock_request.call_args[0] == ("GET", f"{BASE_URL}/api/bundles/4/")
        assert bundle.name == "Work"

    def test_get_missing_bundle(self, client, mock_request):
        mock_request.return_value = make_response(404, text="")
        with pytest.raises(NotFoundError) as exc_info:
            client.get_bundle(9)
        assert "Bundle with ID 9 not found" in str(exc_info.value)

    def test_create_omits_empty_fields(self, client, mock_request):
        mock_request.return_value = make_response(201, json_data=BUNDLE_JSON)

        client.create_bundle("Work", search="project", any_tags="", order=None)

        method, url = mock_request.call_args[0]
        assert (method, url) == ("POST", f"{BASE_URL}/api/bundles/")
        assert mock_request.call_args[1]["json"] == {"name": "Work", "search": "project"}

    def test_create_keeps_zero_order(self, client, mock_request):
        mock_request.return_value = make_response(201, json_data=BUNDLE_JSON)
        client.create_bundle("Work", order=0)
        assert mock_request.call_args[1]["json"] == {"name": "Work", "order": 0}

    def test_update_is_patch(self, client, mock_request):
        mock_request.return_value = make_response(json_data=BUNDLE_JSON)

        client.update_bundle(4, {"excluded_tags": ""})

        assert mock_request.call_args[0] == ("PATCH", f"{BASE_URL}/api/bundles/4/")
        assert mock_request.call_args[1]["json"] == {"excluded_tags": ""}

    def test_delete(self, client, mock_request):
        mock_request.return_value = make_response(204)
        client.delete_bundle(4)
        assert mock_request.call_args[0] == ("DELETE", f"{BASE_URL}/api/bundles/4/")


# ============================================================================
# Errors
# ============================================================================


class TestErrors:
    @pytest.mark.parametrize("status", [401, 403])
    def test_authentication(self, client, mock_request, status):
        mock_request.return_value = make_response(status, text="denied")
        with pytest.raises(AuthenticationError) as exc_info:
            client.test_connection()
        assert exc_info.value.status_code == status

    def test_not_found_message(self, client, mock_request):
        mock_request.return_value = make_response(404, text="")
        with pytest.raises(NotFoundError) as exc_info:
            client.get_bookmark(42)
        assert "Bookmark with ID 42 not found" in str(exc_info.value)

    def test_not_found_default(self, client, mock_request):
        mock_request.return_value = make_response(404, text="")
        with pytest.raises(NotFoundError) as exc_info:
            client.test_connection()
        assert "Check your URL" in str(exc_info.value)

    def test_bad_request(self, client, mock_request):
        mock_request.return_value = make_response(400, text='{"url": ["Enter a valid URL."]}')
        with pytest.raises(APIClientError) as exc_info:
            client.create_bookmark(BookmarkRecord(url="nope"))
        assert str(exc_info.value).startswith("Bad request:")
        assert exc_info.value.body == '{"url": ["Enter a valid URL."]}'

    def test_server_error(self, client, mock_request):
        mock_request.return_value = make_response(500, text="boom")
        with pytest.raises(APIError) as exc_info:
            client.test_connection()
        assert not isinstance(exc_info.value, APIClientError)
        assert "status 500" in str(exc_info.value)

    def test_connection_error(self, client, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(NetworkError) as exc_info:
            client.test_connection()
        assert "Cannot connect to" in str(exc_info.value)

    def test_timeout(self, client, mock_request):
        mock_request.side_effect = requests.exceptions.Timeout()
        with pytest.raises(NetworkError) as exc_info:
            client.test_connection()
        assert "timed out after 5s" in str(exc_info.value)

    def test_token_masked_in_body(self, client, mock_request):
        mock_request.return_value = make_response(500, text=f"bad token {TEST_TOKEN}")
        with pytest.raises(APIError) as exc_info:
            client.test_connection()
        assert TEST_TOKEN not in str(exc_info.value)

    def test_invalid_json(self, client, mock_request):
        mock_request.return_value = make_response(200, text="<html>")
        with pytest.raises(APIError) as exc_info:
            client.get_user_profile()
        assert "Failed to decode response" in str(exc_info.value)
