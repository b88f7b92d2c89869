"""Async client for the linkding-style bookmark REST API."""

import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ding.errors import RequestError, UrlError
from ding.models import (
    Bookmark,
    BookmarkRequest,
    BookmarksRequest,
    BookmarksResponse,
    Tag,
    TagRequest,
    TagsRequest,
    TagsResponse,
    UserProfile,
)
from ding.pagination import load_all

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class DingClient:
    """Authenticated gateway to the bookmark service.

    Holds the base URL and token for its whole lifetime and keeps no other
    state, so one instance can serve independent call chains.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client. No network access happens here."""
        self.base_url = base_url
        self.token = token

        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(follow_redirects=True)

    async def __aenter__(self) -> "DingClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # --- Bookmarks ---

    async def bookmarks(self, params: BookmarksRequest) -> BookmarksResponse:
        """Fetch one page of unarchived bookmarks."""
        response = await self._send(
            "GET", "api/bookmarks/", params=params.query_params()
        )
        return self._decode(response, BookmarksResponse)

    async def archived(self, params: BookmarksRequest) -> BookmarksResponse:
        """Fetch one page of archived bookmarks."""
        response = await self._send(
            "GET", "api/bookmarks/archived/", params=params.query_params()
        )
        return self._decode(response, BookmarksResponse)

    async def all_bookmarks(self, params: BookmarksRequest) -> list[Bookmark]:
        """Fetch every unarchived bookmark matching ``params.query``."""
        return await load_all(params, self.bookmarks)

    async def all_archived(self, params: BookmarksRequest) -> list[Bookmark]:
        """Fetch every archived bookmark matching ``params.query``."""
        return await load_all(params, self.archived)

    async def bookmark(self, bookmark_id: int) -> Bookmark:
        """Fetch a single bookmark by id."""
        response = await self._send("GET", f"api/bookmarks/{bookmark_id}/")
        return self._decode(response, Bookmark)

    async def create_bookmark(self, request: BookmarkRequest) -> Bookmark:
        """Create a bookmark. ``request.url`` must be set."""
        self._require_url(request)
        response = await self._send(
            "POST", "api/bookmarks/", json=request.to_payload()
        )
        return self._decode(response, Bookmark)

    async def reset_bookmark(
        self, bookmark_id: int, request: BookmarkRequest
    ) -> Bookmark:
        """Replace every field of a bookmark. ``request.url`` must be set."""
        self._require_url(request)
        response = await self._send(
            "PUT", f"api/bookmarks/{bookmark_id}/", json=request.to_payload()
        )
        return self._decode(response, Bookmark)

    async def update_bookmark(
        self, bookmark_id: int, request: BookmarkRequest
    ) -> Bookmark:
        """Patch only the fields set on ``request``."""
        response = await self._send(
            "PATCH", f"api/bookmarks/{bookmark_id}/", json=request.to_payload()
        )
        return self._decode(response, Bookmark)

    async def archive_bookmark(self, bookmark_id: int) -> None:
        """Move a bookmark to the archive."""
        await self._send("POST", f"api/bookmarks/{bookmark_id}/archive/")

    async def unarchive_bookmark(self, bookmark_id: int) -> None:
        """Move a bookmark out of the archive."""
        await self._send("POST", f"api/bookmarks/{bookmark_id}/unarchive/")

    async def delete_bookmark(self, bookmark_id: int) -> None:
        """Delete a bookmark permanently."""
        await self._send("DELETE", f"api/bookmarks/{bookmark_id}/")

    # --- Tags ---

    async def tags(self, params: TagsRequest) -> TagsResponse:
        """Fetch one page of tags."""
        response = await self._send("GET", "api/tags", params=params.query_params())
        return self._decode(response, TagsResponse)

    async def all_tags(self, params: TagsRequest) -> list[Tag]:
        """Fetch every tag on the account."""
        return await load_all(params, self.tags)

    async def tag(self, tag_id: int) -> Tag:
        """Fetch a single tag by id."""
        response = await self._send("GET", f"api/tags/{tag_id}/")
        return self._decode(response, Tag)

    async def create_tag(self, request: TagRequest) -> Tag:
        """Create a tag."""
        response = await self._send(
            "POST", "api/tags/", json=request.model_dump(mode="json")
        )
        return self._decode(response, Tag)

    # --- User ---

    async def user_profile(self) -> UserProfile:
        """Fetch the account's preference snapshot."""
        response = await self._send("GET", "api/user/profile/")
        return self._decode(response, UserProfile)

    # --- Plumbing ---

    def build_url(self, api_path: str) -> httpx.URL:
        """Join ``api_path`` onto the base URL.

        Raises:
            UrlError: if the result is not an absolute http(s) URL.
        """
        try:
            url = httpx.URL(self.base_url).join(api_path)
        except httpx.InvalidURL as e:
            raise UrlError(self.base_url, api_path, str(e)) from e

        if url.scheme not in ("http", "https") or not url.host:
            raise UrlError(self.base_url, api_path, "not an absolute http(s) URL")
        return url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Token {self.token}",
            "Accept": "application/json",
        }

    async def _send(
        self,
        method: str,
        api_path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send an authenticated request and reject any non-2xx status."""
        url = self.build_url(api_path)
        logger.debug("%s %s params=%s", method, url, params or {})

        try:
            response = await self._http.request(
                method, url, params=params, json=json, headers=self._headers()
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.debug("%s %s returned HTTP %d", method, url, status)
            raise RequestError(
                f"{method} {url} returned HTTP {status}", status_code=status
            ) from e
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method, url, e)
            raise RequestError(f"{method} {url} failed: {e}") from e

        return response

    def _decode(self, response: httpx.Response, model: type[ModelT]) -> ModelT:
        """Parse a successful response body into ``model``."""
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise RequestError(
                f"Unexpected response body from {response.url}: {e}",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _require_url(request: BookmarkRequest) -> None:
        if request.url is None:
            raise ValueError("A URL must be specified to create or replace a bookmark")

    async def close(self) -> None:
        """Close the client and clean up resources."""
        if self._owns_http:
            await self._http.aclose()
