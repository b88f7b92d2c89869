"""Offset-based "fetch every page" support shared by bookmarks and tags.

Any parameter bundle that can be rebuilt with a different ``limit`` and
``offset`` (``IterableRequest``) and any page envelope exposing ``next`` and
``results`` (``IterableResponse``) can be drained with :func:`load_all`.

The walk is offset based, not cursor based. If the collection shrinks while
pages are being fetched some records are skipped; if it grows some are
returned twice.
"""

import logging
from typing import Any, Awaitable, Callable, Optional, Protocol, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
RequestT = TypeVar("RequestT", bound="IterableRequest")


class IterableRequest(Protocol):
    """Request parameters whose paging fields can be replaced."""

    def with_limit(self: RequestT, limit: Optional[int]) -> RequestT: ...

    def with_offset(self: RequestT, offset: Optional[int]) -> RequestT: ...


class IterableResponse(Protocol[T_co]):
    """A page envelope with a continuation marker and its records."""

    @property
    def next(self) -> Optional[Any]: ...

    @property
    def results(self) -> Sequence[T_co]: ...


async def load_all(
    params: RequestT,
    fetch_page: Callable[[RequestT], Awaitable[IterableResponse[T]]],
) -> list[T]:
    """Fetch every page sequentially and return all records in server order.

    The caller's ``limit`` and ``offset`` are dropped so the server's default
    page size applies. The offset advances by the number of records actually
    received, which tolerates the server changing its page size mid-walk.
    """
    params = params.with_limit(None).with_offset(None)
    offset = 0
    results: list[T] = []

    while True:
        page = await fetch_page(params.with_offset(offset))
        results.extend(page.results)

        if page.next is None:
            break
        if not page.results:
            logger.warning(
                "Server reported another page after an empty one at offset %d; stopping",
                offset,
            )
            break

        offset += len(page.results)
        logger.debug("Fetching next page at offset %d", offset)

    return results
