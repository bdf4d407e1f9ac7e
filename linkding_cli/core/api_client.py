"""
HTTP client for the linkding REST API.

Implements the BookmarkService protocol on top of a requests session and
adds the single-resource calls used by the CLI commands.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .data_models import (
    BookmarkRecord,
    Bundle,
    Page,
    RemoteBookmark,
    RemoteTag,
    ResourceKind,
)
from ..utils.error_handler import (
    APIClientError,
    APIError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
)
from ..utils.secure_logging import mask_secret

RESOURCE_PATHS = {
    ResourceKind.BOOKMARKS: "/api/bookmarks/",
    ResourceKind.ARCHIVED_BOOKMARKS: "/api/bookmarks/archived/",
    ResourceKind.TAGS: "/api/tags/",
    ResourceKind.BUNDLES: "/api/bundles/",
}

RESOURCE_FACTORIES = {
    ResourceKind.BOOKMARKS: RemoteBookmark.from_api,
    ResourceKind.ARCHIVED_BOOKMARKS: RemoteBookmark.from_api,
    ResourceKind.TAGS: RemoteTag.from_api,
    ResourceKind.BUNDLES: Bundle.from_api,
}

# Only the bookmark lists understand search filters
FILTERABLE_KINDS = (ResourceKind.BOOKMARKS, ResourceKind.ARCHIVED_BOOKMARKS)

USER_AGENT = "linkding-cli"


def build_search_query(query: str = "", tags: Iterable[str] = ()) -> str:
    """
    Combine free text and tag filters into a linkding search string.

    Tags are expressed with the ``#tag`` syntax, which linkding matches
    against tag names only; multiple tags are ANDed.
    """
    parts = [query.strip()] if query and query.strip() else []
    parts.extend(f"#{tag.lstrip('#')}" for tag in tags if tag.strip())
    return " ".join(parts)


class LinkdingClient:
    """
    Client for a linkding server.

    Example:
        >>> client = LinkdingClient("https://links.example.com", "0123abcd...")
        >>> client.test_connection()
        >>> page = client.get_bookmarks(tags=["python"], limit=10)
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: int = 30,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Server root URL, e.g. https://links.example.com
            token: API token from the linkding settings page
            timeout: Per-request timeout in seconds
            max_retries: Retries for idempotent requests on 502/503/504
            session: Preconfigured session (a new one is created when omitted)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._token = token
        self.session = session or self._create_session()
        self.session.headers.update(
            {
                "Authorization": f"Token {token}",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            }
        )
        self.logger = logging.getLogger(__name__)

    def _create_session(self) -> requests.Session:
        """Create configured requests session"""
        session = requests.Session()

        # Retries only apply to idempotent methods (urllib3 default)
        retry_strategy = Retry(
            total=self.max_retries,
            connect=self.max_retries,
            read=self.max_retries,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        expected_status: Sequence[int] = (200,),
        not_found_message: Optional[str] = None,
    ) -> requests.Response:
        """
        Perform an authenticated request.

        Raises:
            NetworkError: On connection failures and timeouts
            APIError: On an unexpected status code
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise NetworkError(
                f"Request to {self.base_url} timed out after {self.timeout}s"
            )
        except requests.exceptions.ConnectionError:
            raise NetworkError(
                f"Cannot connect to {self.base_url}. Is linkding running?"
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Request to {self.base_url} failed: {mask_secret(e, self._token)}"
            )

        self.logger.debug(f"{method} {path} -> {response.status_code}")

        if response.status_code not in expected_status:
            self._raise_for_response(response, not_found_message)
        return response

    def _raise_for_response(
        self, response: requests.Response, not_found_message: Optional[str] = None
    ) -> None:
        """Convert an error response into the matching exception."""
        status = response.status_code
        body = mask_secret(response.text.strip(), self._token)

        if status in (401, 403):
            raise AuthenticationError(
                "Authentication failed. Check your API token",
                status_code=status,
                body=body,
            )
        if status == 404:
            raise NotFoundError(
                not_found_message
                or f"linkding not found at {self.base_url}. Check your URL",
                status_code=status,
                body=body,
            )
        if status == 400:
            raise APIClientError(f"Bad request: {body}", status_code=status, body=body)
        if 400 <= status < 500:
            raise APIClientError(
                f"API error (status {status}): {body}", status_code=status, body=body
            )
        raise APIError(
            f"API error (status {status}): {body}", status_code=status, body=body
        )

    def _decode(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                f"Failed to decode response: {e}", status_code=response.status_code
            )

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def test_connection(self) -> None:
        """
        Verify that the server is reachable and the token is accepted.

        Raises:
            ServiceError: If the check fails
        """
        self._request("GET", "/api/bookmarks/", params={"limit": 1})

    def get_user_profile(self) -> Dict[str, Any]:
        """Fetch the user's profile preferences."""
        return self._decode(self._request("GET", "/api/user/profile/"))

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def fetch_page(
        self,
        kind: ResourceKind,
        filters: Optional[Dict[str, Any]],
        offset: int,
        limit: int,
    ) -> Page:
        """
        Fetch one page of a list endpoint.

        Args:
            kind: Which list endpoint to read
            filters: Optional ``query``, ``tags`` and ``unread`` filters
                (bookmark lists only)
            offset: Index of the first item
            limit: Page size

        Returns:
            Page of RemoteBookmark, RemoteTag or Bundle
        """
        params: Dict[str, Any] = {"limit": limit, "offset": offset}
        if filters and kind in FILTERABLE_KINDS:
            query = build_search_query(
                filters.get("query", ""), filters.get("tags") or ()
            )
            if query:
                params["q"] = query
            if filters.get("unread"):
                params["unread"] = "yes"

        data = self._decode(self._request("GET", RESOURCE_PATHS[kind], params=params))
        results = data.get("results") or []
        return Page(
            count=int(data.get("count", len(results))),
            items=tuple(RESOURCE_FACTORIES[kind](item) for item in results),
            has_next=data.get("next") is not None,
        )

    # ------------------------------------------------------------------
    # Bookmarks
    # ------------------------------------------------------------------

    def get_bookmarks(
        self,
        query: str = "",
        tags: Iterable[str] = (),
        unread: bool = False,
        archived: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> Page:
        """
        Fetch a single page of bookmarks matching the given filters.

        Args:
            query: Free-text search
            tags: Tags that must all be present
            unread: Only unread bookmarks
            archived: Read the archived list instead of the active one
            limit: Maximum results
            offset: Pagination offset

        Returns:
            Page of RemoteBookmark
        """
        kind = ResourceKind.ARCHIVED_BOOKMARKS if archived else ResourceKind.BOOKMARKS
        filters = {"query": query, "tags": list(tags), "unread": unread}
        return self.fetch_page(kind, filters, offset, limit)

    def get_bookmark(self, bookmark_id: int) -> RemoteBookmark:
        response = self._request(
            "GET",
            f"/api/bookmarks/{bookmark_id}/",
            not_found_message=f"Bookmark with ID {bookmark_id} not found",
        )
        return RemoteBookmark.from_api(self._decode(response))

    def create_bookmark(self, record: BookmarkRecord) -> RemoteBookmark:
        """
        Create a bookmark.

        Empty text fields are left out so the server can fill in the
        scraped page title and description.
        """
        payload = {
            key: value
            for key, value in record.to_payload().items()
            if value != "" or key == "url"
        }
        response = self._request(
            "POST", "/api/bookmarks/", json_body=payload, expected_status=(200, 201)
        )
        return RemoteBookmark.from_api(self._decode(response))

    def update_bookmark(self, bookmark_id: int, fields: Dict[str, Any]) -> RemoteBookmark:
        """Apply a partial update; fields not given are left unchanged."""
        response = self._request(
            "PATCH",
            f"/api/bookmarks/{bookmark_id}/",
            json_body=fields,
            not_found_message=f"Bookmark with ID {bookmark_id} not found",
        )
        return RemoteBookmark.from_api(self._decode(response))

    def delete_bookmark(self, bookmark_id: int) -> None:
        self._request(
            "DELETE",
            f"/api/bookmarks/{bookmark_id}/",
            expected_status=(200, 204),
            not_found_message=f"Bookmark with ID {bookmark_id} not found",
        )

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def get_tags(self, limit: int = 100, offset: int = 0) -> Page:
        return self.fetch_page(ResourceKind.TAGS, None, offset, limit)

    def create_tag(self, name: str) -> RemoteTag:
        response = self._request(
            "POST", "/api/tags/", json_body={"name": name}, expected_status=(200, 201)
        )
        return RemoteTag.from_api(self._decode(response))

    # ------------------------------------------------------------------
    # Bundles
    # ------------------------------------------------------------------

    def get_bundle(self, bundle_id: int) -> Bundle:
        response = self._request(
            "GET",
            f"/api/bundles/{bundle_id}/",
            not_found_message=f"Bundle with ID {bundle_id} not found",
        )
        return Bundle.from_api(self._decode(response))

    def create_bundle(self, name: str, **fields: Any) -> Bundle:
        """
        Create a bundle.

        Args:
            name: Bundle name shown in the sidebar
            **fields: ``search``, ``any_tags``, ``all_tags``,
                ``excluded_tags`` and ``order``; empty values are left out

        Returns:
            The created Bundle
        """
        payload: Dict[str, Any] = {"name": name}
        payload.update(
            (key, value) for key, value in fields.items() if value not in (None, "")
        )
        response = self._request(
            "POST", "/api/bundles/", json_body=payload, expected_status=(200, 201)
        )
        return Bundle.from_api(self._decode(response))

    def update_bundle(self, bundle_id: int, fields: Dict[str, Any]) -> Bundle:
        """Apply a partial update; fields not given are left unchanged."""
        response = self._request(
            "PATCH",
            f"/api/bundles/{bundle_id}/",
            json_body=fields,
            not_found_message=f"Bundle with ID {bundle_id} not found",
        )
        return Bundle.from_api(self._decode(response))

    def delete_bundle(self, bundle_id: int) -> None:
        self._request(
            "DELETE",
            f"/api/bundles/{bundle_id}/",
            expected_status=(200, 204),
            not_found_message=f"Bundle with ID {bundle_id} not found",
        )
