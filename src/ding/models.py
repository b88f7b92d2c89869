"""Data models for the ding bookmark client."""

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    field_validator,
    model_validator,
)

T = TypeVar("T")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Tag(BaseModel):
    """A tag as returned by the server."""

    model_config = ConfigDict(frozen=True)

    id: NonNegativeInt = Field(description="Server-assigned tag identifier")
    name: str = Field(description="The tag name, unique per account")
    date_added: datetime = Field(description="When the tag was created (UTC)")

    @field_validator("date_added")
    @classmethod
    def normalize_timezone(cls, value: datetime) -> datetime:
        return _as_utc(value)


class TagRequest(BaseModel):
    """Body for creating a tag."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="The tag name")


class Bookmark(BaseModel):
    """A bookmark as returned by the server."""

    model_config = ConfigDict(frozen=True)

    id: NonNegativeInt = Field(description="Server-assigned bookmark identifier")
    url: AnyUrl = Field(description="The bookmarked URL")
    title: str = Field(description="User supplied title, may be empty")
    description: str = Field(description="User supplied description, may be empty")
    notes: str = Field(description="Free-form notes, may be empty")
    website_title: Optional[str] = Field(
        None, description="Title scraped from the page by the server"
    )
    website_description: Optional[str] = Field(
        None, description="Description scraped from the page by the server"
    )
    web_archive_snapshot_url: Optional[AnyUrl] = Field(
        None, description="Internet Archive snapshot, if one was taken"
    )
    favicon_url: Optional[AnyUrl] = None
    preview_image_url: Optional[AnyUrl] = None
    is_archived: bool
    unread: bool
    shared: bool
    tag_names: list[str] = Field(description="Tag names in server display order")
    date_added: datetime = Field(description="When the bookmark was saved (UTC)")
    date_modified: datetime = Field(description="When the bookmark last changed (UTC)")

    @field_validator("web_archive_snapshot_url", mode="before")
    @classmethod
    def empty_snapshot_url(cls, value: Any) -> Any:
        # The server sends "" rather than null when no snapshot exists.
        if value is None or value == "":
            return None
        return value

    @field_validator("date_added", "date_modified")
    @classmethod
    def normalize_timezone(cls, value: datetime) -> datetime:
        return _as_utc(value)


class BookmarkRequest(BaseModel):
    """Body for creating, replacing or patching a bookmark.

    Fields left as ``None`` are omitted from the payload so the server applies
    its own defaults (on create/replace) or leaves them untouched (on patch).
    An empty string or ``False`` is sent as-is.
    """

    model_config = ConfigDict(frozen=True)

    url: Optional[AnyUrl] = None
    title: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    is_archived: Optional[bool] = None
    unread: Optional[bool] = None
    shared: Optional[bool] = None
    tag_names: Optional[list[str]] = None

    @classmethod
    def for_url(cls, url: str) -> "BookmarkRequest":
        """Create a request that only sets the URL."""
        return cls(url=url)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body sent over the wire."""
        return self.model_dump(mode="json", exclude_none=True)


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a server-side collection."""

    model_config = ConfigDict(frozen=True)

    count: NonNegativeInt = Field(description="Total matches on the server")
    next: Optional[AnyUrl] = Field(None, description="URL of the following page")
    previous: Optional[AnyUrl] = Field(None, description="URL of the preceding page")
    results: list[T] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_count(self) -> "PaginatedResponse[T]":
        if len(self.results) > self.count:
            raise ValueError(
                f"page holds {len(self.results)} results but count is {self.count}"
            )
        return self


class BookmarksResponse(PaginatedResponse[Bookmark]):
    """A page of bookmarks."""


class TagsResponse(PaginatedResponse[Tag]):
    """A page of tags."""


class BookmarksRequest(BaseModel):
    """Filter and paging parameters for bookmark listings."""

    model_config = ConfigDict(frozen=True)

    query: Optional[str] = Field(None, description="Search phrase, sent as 'q'")
    limit: Optional[NonNegativeInt] = None
    offset: Optional[NonNegativeInt] = None

    def with_limit(self, limit: Optional[int]) -> "BookmarksRequest":
        return self.model_copy(update={"limit": limit})

    def with_offset(self, offset: Optional[int]) -> "BookmarksRequest":
        return self.model_copy(update={"offset": offset})

    def query_params(self) -> dict[str, Any]:
        params = {"q": self.query, "limit": self.limit, "offset": self.offset}
        return {key: value for key, value in params.items() if value is not None}


class TagsRequest(BaseModel):
    """Paging parameters for tag listings."""

    model_config = ConfigDict(frozen=True)

    limit: Optional[NonNegativeInt] = None
    offset: Optional[NonNegativeInt] = None

    def with_limit(self, limit: Optional[int]) -> "TagsRequest":
        return self.model_copy(update={"limit": limit})

    def with_offset(self, offset: Optional[int]) -> "TagsRequest":
        return self.model_copy(update={"offset": offset})

    def query_params(self) -> dict[str, Any]:
        params = {"limit": self.limit, "offset": self.offset}
        return {key: value for key, value in params.items() if value is not None}


class SearchPreferences(BaseModel):
    """Default search settings stored on the user's profile."""

    model_config = ConfigDict(frozen=True)

    sort: str
    shared: str
    unread: str


class UserProfile(BaseModel):
    """Read-only snapshot of the account's preferences."""

    model_config = ConfigDict(frozen=True)

    theme: str
    bookmark_date_display: str
    bookmark_link_target: str
    web_archive_integration: str
    tag_search: str
    enable_sharing: bool
    enable_public_sharing: bool
    enable_favicons: bool
    display_url: bool
    permanent_notes: bool
    search_preferences: SearchPreferences
