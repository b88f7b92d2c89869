"""Command-line entry point for the ding bookmark client."""

import argparse
import asyncio
import logging
import os
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Awaitable, Callable, Optional

from ding.client import DingClient
from ding.errors import DingError
from ding.formatting import FORMATS, Renderable, render
from ding.models import BookmarkRequest, BookmarksRequest, TagRequest, TagsRequest

DEFAULT_PAGE_LIMIT = 100
CONSOLE_FORMAT = "%(levelname)-5s [%(name)-14s] %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Send ``ding`` log records to stderr; DEBUG when verbose, else WARNING."""
    level = logging.DEBUG if verbose else logging.WARNING

    ding_logger = logging.getLogger("ding")
    ding_logger.setLevel(level)
    if not ding_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        ding_logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(level)


def _package_version() -> str:
    try:
        return version("ding-cli")
    except PackageNotFoundError:
        return "unknown"


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def _normalize_host(host: str) -> str:
    # API paths are joined relative to the host, so keep any sub-path prefix.
    return host if host.endswith("/") else host + "/"


# --- Command handlers ---


def _bookmark_request(args: argparse.Namespace) -> BookmarkRequest:
    return BookmarkRequest(
        url=getattr(args, "url", None),
        title=args.title,
        description=args.description,
        notes=args.notes,
        is_archived=args.is_archived,
        unread=args.unread,
        shared=args.shared,
        tag_names=args.tag_names,
    )


async def cmd_bookmarks(client: DingClient, args: argparse.Namespace) -> Renderable:
    if args.all:
        params = BookmarksRequest(query=args.query)
        if args.archived:
            return await client.all_archived(params)
        return await client.all_bookmarks(params)

    params = BookmarksRequest(
        query=args.query,
        limit=DEFAULT_PAGE_LIMIT if args.limit is None else args.limit,
        offset=args.offset,
    )
    if args.archived:
        page = await client.archived(params)
    else:
        page = await client.bookmarks(params)
    return page.results


async def cmd_bookmark(client: DingClient, args: argparse.Namespace) -> Renderable:
    return await client.bookmark(args.id)


async def cmd_add(client: DingClient, args: argparse.Namespace) -> Renderable:
    return await client.create_bookmark(_bookmark_request(args))


async def cmd_update(client: DingClient, args: argparse.Namespace) -> Renderable:
    return await client.update_bookmark(args.id, _bookmark_request(args))


async def cmd_reset(client: DingClient, args: argparse.Namespace) -> Renderable:
    return await client.reset_bookmark(args.id, _bookmark_request(args))


async def cmd_archive(client: DingClient, args: argparse.Namespace) -> Renderable:
    await client.archive_bookmark(args.id)
    return {"status": "ok", "action": "archive", "id": args.id}


async def cmd_unarchive(client: DingClient, args: argparse.Namespace) -> Renderable:
    await client.unarchive_bookmark(args.id)
    return {"status": "ok", "action": "unarchive", "id": args.id}


async def cmd_delete(client: DingClient, args: argparse.Namespace) -> Renderable:
    await client.delete_bookmark(args.id)
    return {"status": "ok", "action": "delete", "id": args.id}


async def cmd_tags(client: DingClient, args: argparse.Namespace) -> Renderable:
    if args.all:
        return await client.all_tags(TagsRequest())
    page = await client.tags(TagsRequest(limit=args.limit, offset=args.offset))
    return page.results


async def cmd_tag(client: DingClient, args: argparse.Namespace) -> Renderable:
    return await client.tag(args.id)


async def cmd_add_tag(client: DingClient, args: argparse.Namespace) -> Renderable:
    return await client.create_tag(TagRequest(name=args.name))


async def cmd_profile(client: DingClient, args: argparse.Namespace) -> Renderable:
    return await client.user_profile()


COMMANDS: dict[str, Callable[[DingClient, argparse.Namespace], Awaitable[Renderable]]] = {
    "bookmarks": cmd_bookmarks,
    "bookmark": cmd_bookmark,
    "add": cmd_add,
    "update": cmd_update,
    "reset": cmd_reset,
    "archive": cmd_archive,
    "unarchive": cmd_unarchive,
    "delete": cmd_delete,
    "tags": cmd_tags,
    "tag": cmd_tag,
    "add-tag": cmd_add_tag,
    "profile": cmd_profile,
}


# --- CLI ---


def _add_bookmark_fields(parser: argparse.ArgumentParser) -> None:
    """Options shared by add, update and reset. Omitted means "leave unset"."""
    parser.add_argument("-T", "--title")
    parser.add_argument("-d", "--description")
    parser.add_argument("-n", "--notes")
    parser.add_argument(
        "--archived", dest="is_archived", action=argparse.BooleanOptionalAction
    )
    parser.add_argument("--unread", action=argparse.BooleanOptionalAction)
    parser.add_argument("--shared", action=argparse.BooleanOptionalAction)
    parser.add_argument(
        "-t", "--tag", dest="tag_names", action="append", help="Tag name (repeatable)"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ding",
        description="Manage bookmarks on a linkding server",
    )
    parser.add_argument("--version", action="version", version=_package_version())
    parser.add_argument(
        "-H", "--host", default=os.getenv("DING_HOST"), help="Server URL (env DING_HOST)"
    )
    parser.add_argument(
        "--token", default=os.getenv("DING_TOKEN"), help="API token (env DING_TOKEN)"
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default=os.getenv("DING_FORMAT", "human"),
        help="Output format (env DING_FORMAT)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # bookmarks
    p_bookmarks = sub.add_parser("bookmarks", help="List bookmarks")
    p_bookmarks.add_argument("-q", "--query", help="Search phrase")
    p_bookmarks.add_argument(
        "-l", "--limit", type=_non_negative_int,
        help=f"Page size (default {DEFAULT_PAGE_LIMIT})",
    )
    p_bookmarks.add_argument("-o", "--offset", type=_non_negative_int)
    p_bookmarks.add_argument("-a", "--all", action="store_true", help="Fetch every page")
    p_bookmarks.add_argument(
        "-A", "--archived", action="store_true", help="List archived bookmarks"
    )

    # bookmark
    p_bookmark = sub.add_parser("bookmark", help="Show a single bookmark")
    p_bookmark.add_argument("id", type=_non_negative_int)

    # add
    p_add = sub.add_parser("add", help="Add a bookmark")
    p_add.add_argument("url")
    _add_bookmark_fields(p_add)

    # update
    p_update = sub.add_parser("update", help="Change some fields of a bookmark")
    p_update.add_argument("id", type=_non_negative_int)
    p_update.add_argument("-u", "--url")
    _add_bookmark_fields(p_update)

    # reset
    p_reset = sub.add_parser("reset", help="Replace every field of a bookmark")
    p_reset.add_argument("id", type=_non_negative_int)
    p_reset.add_argument("url")
    _add_bookmark_fields(p_reset)

    # archive / unarchive / delete
    for name, help_text in (
        ("archive", "Archive a bookmark"),
        ("unarchive", "Unarchive a bookmark"),
        ("delete", "Delete a bookmark"),
    ):
        p_action = sub.add_parser(name, help=help_text)
        p_action.add_argument("-i", "--id", type=_non_negative_int, required=True)

    # tags
    p_tags = sub.add_parser("tags", help="List tags")
    p_tags.add_argument("-l", "--limit", type=_non_negative_int)
    p_tags.add_argument("-o", "--offset", type=_non_negative_int)
    p_tags.add_argument("-a", "--all", action="store_true", help="Fetch every page")

    # tag
    p_tag = sub.add_parser("tag", help="Show a single tag")
    p_tag.add_argument("id", type=_non_negative_int)

    # add-tag
    p_add_tag = sub.add_parser("add-tag", help="Create a tag")
    p_add_tag.add_argument("-n", "--name", required=True)

    # profile
    sub.add_parser("profile", help="Show the user profile")

    return parser


async def run(args: argparse.Namespace) -> Renderable:
    """Execute the parsed command against a fresh client."""
    client = DingClient(_normalize_host(args.host), args.token)
    try:
        return await COMMANDS[args.command](client, args)
    finally:
        await client.close()


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    # argparse does not check defaults taken from the environment against choices
    if args.format not in FORMATS:
        parser.error(
            f"invalid output format {args.format!r} (choose from {', '.join(FORMATS)})"
        )

    if getattr(args, "all", False) and (
        args.limit is not None or args.offset is not None
    ):
        parser.error("--all cannot be combined with --limit or --offset")

    if not args.host:
        print("Error: DING_HOST environment variable or --host is required", file=sys.stderr)
        sys.exit(1)
    if not args.token:
        print("Error: DING_TOKEN environment variable or --token is required", file=sys.stderr)
        sys.exit(1)

    try:
        result = asyncio.run(run(args))
        print(render(result, args.format))
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except (DingError, ValueError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
