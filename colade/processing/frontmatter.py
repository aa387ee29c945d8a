"""Front matter extraction (YAML ``---`` or TOML ``+++`` fences)."""

from __future__ import annotations

import tomllib
from datetime import date, datetime
from typing import Any, Dict, List, Tuple

import yaml

from ..logging import get_logger
from ..models import PageMetadata

_FENCES = {"---": "yaml", "+++": "toml"}
_DATE_INPUT_FORMATS = (
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%B %d, %Y",
)
DATE_DISPLAY_FORMAT = "%d %b %Y"

logger = get_logger("frontmatter")


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """Return ``(raw_metadata, body)``.

    A block that opens with a fence but fails to parse is removed from the
    body and yields empty metadata; a block that is never closed is left in
    place and treated as ordinary content.
    """
    lines = text.splitlines(keepends=True)
    if not lines:
        return {}, text
    fence = lines[0].strip()
    syntax = _FENCES.get(fence)
    if syntax is None:
        return {}, text

    for index in range(1, len(lines)):
        if lines[index].strip() == fence:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return _parse_block(block, syntax), body
    return {}, text


def _parse_block(block: str, syntax: str) -> Dict[str, Any]:
    try:
        if syntax == "toml":
            data: Any = tomllib.loads(block)
        else:
            data = yaml.safe_load(block)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        logger.debug("Ignoring invalid %s front matter: %s", syntax, exc)
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(key): value for key, value in data.items()}


def build_metadata(raw: Dict[str, Any]) -> PageMetadata:
    """Lift the known keys out of a raw front matter mapping."""
    extra = dict(raw)
    title = extra.pop("title", None)
    raw_date = extra.pop("date", None)
    raw_tags = extra.pop("tags", None)
    return PageMetadata(
        title=str(title) if title is not None else None,
        date=format_date(raw_date),
        tags=_as_tags(raw_tags),
        extra=extra,
    )


def format_date(value: Any) -> str | None:
    """Normalise a front matter date to ``07 Aug 2025`` style when possible."""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.strftime(DATE_DISPLAY_FORMAT)
    text = str(value).strip()
    if not text:
        return None
    for fmt in _DATE_INPUT_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.strftime(DATE_DISPLAY_FORMAT)
    return text


def _as_tags(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    return [str(value)]


__all__ = ["DATE_DISPLAY_FORMAT", "build_metadata", "format_date", "split_front_matter"]
