"""Render client results for the terminal or for other programs."""

import csv
import io
import json
from typing import Any, Iterable, Union

from pydantic import BaseModel

from ding.models import Bookmark, Tag

FORMATS = ("human", "json", "flat-json", "csv")

Renderable = Union[BaseModel, dict[str, Any], list[Any]]


def _dump(item: Any) -> Any:
    if isinstance(item, BaseModel):
        return item.model_dump(mode="json")
    if isinstance(item, list):
        return [_dump(entry) for entry in item]
    return item


def flatten(record: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Collapse nested objects into dotted keys, e.g. ``search_preferences.sort``."""
    flat: dict[str, Any] = {}
    for key, value in record.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(flatten(value, prefix=f"{name}."))
        else:
            flat[name] = value
    return flat


def _records(data: Renderable) -> list[dict[str, Any]]:
    dumped = _dump(data)
    if isinstance(dumped, list):
        return [flatten(entry) for entry in dumped]
    return [flatten(dumped)]


def to_json(data: Renderable) -> str:
    return json.dumps(_dump(data), indent=2, ensure_ascii=False)


def to_flat_json(data: Renderable) -> str:
    dumped = _dump(data)
    if isinstance(dumped, list):
        return json.dumps(
            [flatten(entry) for entry in dumped], indent=2, ensure_ascii=False
        )
    return json.dumps(flatten(dumped), indent=2, ensure_ascii=False)


def _csv_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(str(entry) for entry in value)
    return value


def to_csv(data: Renderable) -> str:
    """Write flattened records as CSV with a header row."""
    records = _records(data)
    if not records:
        return ""

    fieldnames: list[str] = []
    for record in records:
        for key in record:
            if key not in fieldnames:
                fieldnames.append(key)

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, lineterminator="\n")
    writer.writeheader()
    for record in records:
        writer.writerow({key: _csv_cell(value) for key, value in record.items()})
    return buffer.getvalue().rstrip("\n")


def _human_bookmark(bookmark: Bookmark) -> str:
    title = bookmark.title or bookmark.website_title or str(bookmark.url)
    lines = [f"[{bookmark.id}] {title}", f"    {bookmark.url}"]

    description = bookmark.description or bookmark.website_description
    if description:
        lines.append(f"    {description}")
    if bookmark.tag_names:
        lines.append("    " + " ".join(f"#{name}" for name in bookmark.tag_names))

    flags = [
        label
        for label, enabled in (
            ("archived", bookmark.is_archived),
            ("unread", bookmark.unread),
            ("shared", bookmark.shared),
        )
        if enabled
    ]
    if flags:
        lines.append(f"    ({', '.join(flags)})")
    return "\n".join(lines)


def _human_tag(tag: Tag) -> str:
    return f"[{tag.id}] {tag.name}"


def _human_mapping(record: dict[str, Any]) -> str:
    flat = flatten(record)
    width = max((len(key) for key in flat), default=0)
    return "\n".join(
        f"{key.ljust(width)}  {_csv_cell(value)}" for key, value in flat.items()
    )


def _human_items(items: Iterable[Any]) -> str:
    blocks = []
    separator = "\n"
    for item in items:
        if isinstance(item, Bookmark):
            blocks.append(_human_bookmark(item))
            separator = "\n\n"
        elif isinstance(item, Tag):
            blocks.append(_human_tag(item))
        else:
            blocks.append(_human_mapping(_dump(item)))
            separator = "\n\n"
    return separator.join(blocks)


def to_human(data: Renderable) -> str:
    if isinstance(data, list):
        if not data:
            return "No results."
        return _human_items(data)
    return _human_items([data])


def render(data: Renderable, fmt: str) -> str:
    """Render ``data`` in one of :data:`FORMATS`."""
    if fmt == "human":
        return to_human(data)
    if fmt == "json":
        return to_json(data)
    if fmt == "flat-json":
        return to_flat_json(data)
    if fmt == "csv":
        return to_csv(data)
    raise ValueError(f"Unknown output format: {fmt}")
