"""Pytest configuration and fixtures for ding tests."""

from typing import Any, Callable
from unittest.mock import AsyncMock, Mock

import pytest
import respx

from ding.client import DingClient
from ding.models import Bookmark, BookmarksResponse, Tag, TagsResponse, UserProfile

BASE_URL = "https://ding.example.com/"
MOCK_BASE_URL = "https://ding.example.com"


@pytest.fixture
def valid_token() -> str:
    """API token used by every test client."""
    return "0123456789abcdef0123456789abcdef01234567"


@pytest.fixture
def make_bookmark_data() -> Callable[..., dict[str, Any]]:
    """Factory for bookmark payloads shaped like the server's JSON."""

    def _make(bookmark_id: int = 1, **overrides: Any) -> dict[str, Any]:
        data = {
            "id": bookmark_id,
            "url": f"https://example.com/articles/{bookmark_id}",
            "title": f"Article {bookmark_id}",
            "description": "",
            "notes": "",
            "website_title": f"Example Article {bookmark_id}",
            "website_description": "An article on example.com",
            "web_archive_snapshot_url": "",
            "favicon_url": None,
            "preview_image_url": None,
            "is_archived": False,
            "unread": False,
            "shared": False,
            "tag_names": ["python", "testing"],
            "date_added": "2024-01-15T10:30:00.123456Z",
            "date_modified": "2024-01-16T08:00:00.000000Z",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def make_tag_data() -> Callable[..., dict[str, Any]]:
    """Factory for tag payloads shaped like the server's JSON."""

    def _make(tag_id: int = 1, name: str = "python") -> dict[str, Any]:
        return {"id": tag_id, "name": name, "date_added": "2024-01-10T15:45:00Z"}

    return _make


@pytest.fixture
def mock_profile_data() -> dict[str, Any]:
    """Sample user profile response."""
    return {
        "theme": "auto",
        "bookmark_date_display": "relative",
        "bookmark_link_target": "_blank",
        "web_archive_integration": "enabled",
        "tag_search": "lax",
        "enable_sharing": True,
        "enable_public_sharing": False,
        "enable_favicons": True,
        "display_url": False,
        "permanent_notes": False,
        "search_preferences": {"sort": "added_desc", "shared": "off", "unread": "off"},
    }


@pytest.fixture
def sample_bookmarks(make_bookmark_data) -> list[Bookmark]:
    """Decoded Bookmark objects."""
    return [
        Bookmark.model_validate(make_bookmark_data(1)),
        Bookmark.model_validate(
            make_bookmark_data(2, unread=True, tag_names=["web"], title="")
        ),
    ]


@pytest.fixture
def sample_tags(make_tag_data) -> list[Tag]:
    """Decoded Tag objects."""
    return [
        Tag.model_validate(make_tag_data(1, "python")),
        Tag.model_validate(make_tag_data(2, "web")),
    ]


@pytest.fixture
def sample_profile(mock_profile_data) -> UserProfile:
    return UserProfile.model_validate(mock_profile_data)


@pytest.fixture
def mock_api() -> respx.MockRouter:
    """Intercept every request the client sends."""
    with respx.mock(base_url=MOCK_BASE_URL, assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
async def client(mock_api, valid_token):
    """A DingClient whose transport is intercepted by ``mock_api``."""
    client = DingClient(BASE_URL, valid_token)
    yield client
    await client.close()


@pytest.fixture
def mock_client(sample_bookmarks, sample_tags, sample_profile):
    """A mocked DingClient for CLI tests."""
    client = Mock(spec=DingClient)

    client.bookmarks = AsyncMock(
        return_value=BookmarksResponse(count=2, results=sample_bookmarks)
    )
    client.archived = AsyncMock(
        return_value=BookmarksResponse(count=2, results=sample_bookmarks)
    )
    client.all_bookmarks = AsyncMock(return_value=sample_bookmarks)
    client.all_archived = AsyncMock(return_value=sample_bookmarks)
    client.bookmark = AsyncMock(return_value=sample_bookmarks[0])
    client.create_bookmark = AsyncMock(return_value=sample_bookmarks[0])
    client.update_bookmark = AsyncMock(return_value=sample_bookmarks[0])
    client.reset_bookmark = AsyncMock(return_value=sample_bookmarks[0])
    client.archive_bookmark = AsyncMock(return_value=None)
    client.unarchive_bookmark = AsyncMock(return_value=None)
    client.delete_bookmark = AsyncMock(return_value=None)
    client.tags = AsyncMock(return_value=TagsResponse(count=2, results=sample_tags))
    client.all_tags = AsyncMock(return_value=sample_tags)
    client.tag = AsyncMock(return_value=sample_tags[0])
    client.create_tag = AsyncMock(return_value=sample_tags[0])
    client.user_profile = AsyncMock(return_value=sample_profile)
    client.close = AsyncMock()

    return client


@pytest.fixture
def ding_env(monkeypatch, valid_token):
    """Set the DING_HOST and DING_TOKEN environment variables."""
    monkeypatch.setenv("DING_HOST", MOCK_BASE_URL)
    monkeypatch.setenv("DING_TOKEN", valid_token)
    monkeypatch.delenv("DING_FORMAT", raising=False)
    return valid_token
