"""Tests for the offset-based fetch-all loop."""

import pytest

from ding.models import BookmarksRequest, TagsRequest, TagsResponse
from ding.pagination import load_all

NEXT_URL = "https://ding.example.com/api/tags/?offset=99"


def make_tag(tag_id: int) -> dict:
    return {"id": tag_id, "name": f"tag-{tag_id}", "date_added": "2024-01-01T00:00:00Z"}


class FakeTagServer:
    """Serves ``total`` tags in pages whose sizes come from ``page_sizes``."""

    def __init__(self, total: int, page_sizes: list[int]):
        self.records = [make_tag(i) for i in range(1, total + 1)]
        self.page_sizes = list(page_sizes)
        self.requests: list[TagsRequest] = []

    async def fetch(self, params: TagsRequest) -> TagsResponse:
        self.requests.append(params)
        size = self.page_sizes[min(len(self.requests), len(self.page_sizes)) - 1]
        start = params.offset or 0
        page = self.records[start : start + size]
        has_next = start + len(page) < len(self.records)
        return TagsResponse.model_validate(
            {
                "count": len(self.records),
                "next": NEXT_URL if has_next else None,
                "previous": None,
                "results": page,
            }
        )


class TestLoadAll:
    """Test the load_all pagination routine."""

    @pytest.mark.asyncio
    async def test_collects_every_page_in_order(self):
        """Test N records served M per page take ceil(N/M) requests."""
        server = FakeTagServer(total=5, page_sizes=[2])

        tags = await load_all(TagsRequest(), server.fetch)

        assert [tag.id for tag in tags] == [1, 2, 3, 4, 5]
        assert len(server.requests) == 3
        assert [r.offset for r in server.requests] == [0, 2, 4]

    @pytest.mark.asyncio
    async def test_exact_multiple_of_page_size(self):
        """Test a collection that fills its last page exactly."""
        server = FakeTagServer(total=4, page_sizes=[2])

        tags = await load_all(TagsRequest(), server.fetch)

        assert len(tags) == 4
        assert [r.offset for r in server.requests] == [0, 2]

    @pytest.mark.asyncio
    async def test_empty_collection(self):
        """Test that an empty collection costs one request."""
        server = FakeTagServer(total=0, page_sizes=[10])

        tags = await load_all(TagsRequest(), server.fetch)

        assert tags == []
        assert len(server.requests) == 1
        assert server.requests[0].offset == 0

    @pytest.mark.asyncio
    async def test_offset_follows_received_counts(self):
        """Test that the offset advances by records received, not a fixed size."""
        server = FakeTagServer(total=6, page_sizes=[3, 2, 1])

        tags = await load_all(TagsRequest(), server.fetch)

        assert [tag.id for tag in tags] == [1, 2, 3, 4, 5, 6]
        assert [r.offset for r in server.requests] == [0, 3, 5]

    @pytest.mark.asyncio
    async def test_caller_limit_and_offset_cleared(self):
        """Test that caller paging is ignored in favour of the server default."""
        server = FakeTagServer(total=3, page_sizes=[2])

        await load_all(TagsRequest(limit=1, offset=50), server.fetch)

        assert all(r.limit is None for r in server.requests)
        assert server.requests[0].offset == 0

    @pytest.mark.asyncio
    async def test_filters_preserved(self):
        """Test that non-paging filters are carried to every page request."""
        seen: list[BookmarksRequest] = []

        async def fetch(params: BookmarksRequest) -> TagsResponse:
            seen.append(params)
            has_next = len(seen) < 2
            return TagsResponse.model_validate(
                {
                    "count": 2,
                    "next": NEXT_URL if has_next else None,
                    "previous": None,
                    "results": [make_tag(len(seen))],
                }
            )

        await load_all(BookmarksRequest(query="python", limit=5), fetch)

        assert [p.query for p in seen] == ["python", "python"]
        assert [p.offset for p in seen] == [0, 1]

    @pytest.mark.asyncio
    async def test_stops_on_empty_page_with_next(self):
        """Test that an empty page claiming more pages does not loop forever."""
        calls = 0

        async def fetch(params: TagsRequest) -> TagsResponse:
            nonlocal calls
            calls += 1
            return TagsResponse.model_validate(
                {"count": 5, "next": NEXT_URL, "previous": None, "results": []}
            )

        tags = await load_all(TagsRequest(), fetch)

        assert tags == []
        assert calls == 1
