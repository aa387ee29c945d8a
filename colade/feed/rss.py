"""RSS 2.0 feed generation from the discovered documents."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path, PurePosixPath
from typing import List, Optional, Sequence

from ..discovery import output_path_for
from ..errors import ProcessingError
from ..logging import get_logger
from ..models import DEFAULT_DOCUMENT_EXTENSIONS, DEFAULT_FEED_MAX_ITEMS, FEED_FILENAME
from ..processing.frontmatter import split_front_matter

_DESCRIPTION_LIMIT = 200
_INDEX_CANDIDATES = ("index.md", "README.md", "readme.md")
_FALLBACK_DESCRIPTION = "Latest posts and updates"
_FEED_LANGUAGE = "en-gb"

logger = get_logger("feed")


@dataclass
class FeedItem:
    title: str
    link: str
    description: str
    published: datetime
    source: str


def extract_title(content: str, fallback: str) -> str:
    """Front matter title, else the first heading, else a readable filename."""
    meta, body = split_front_matter(content)
    title = meta.get("title")
    if title:
        return str(title)
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("#"):
            heading = stripped.lstrip("#").strip()
            if heading:
                return heading
    return _readable_name(PurePosixPath(fallback).stem)


def extract_description(content: str, title: str) -> str:
    """First stretch of body text after the title, cut on a word boundary."""
    _, body = split_front_matter(content)
    lines = [line.strip() for line in body.splitlines()]
    if any(line.startswith("#") for line in lines):
        first_heading = next(i for i, line in enumerate(lines) if line.startswith("#"))
        lines = lines[first_heading + 1 :]

    collected: List[str] = []
    length = 0
    for line in lines:
        if not line or line.startswith("#"):
            continue
        collected.append(line)
        length += len(line) + 1
        if length >= _DESCRIPTION_LIMIT:
            break
    text = " ".join(collected)
    if len(text) > _DESCRIPTION_LIMIT:
        words: List[str] = []
        for word in text.split():
            if len(" ".join([*words, word])) > _DESCRIPTION_LIMIT:
                break
            words.append(word)
        text = " ".join(words) + "..."
    return text or title


def _readable_name(stem: str) -> str:
    return stem.replace("-", " ").replace("_", " ").title()


class RSSFeedGenerator:
    """Writes ``feed.xml`` into the output directory.

    The feed is disabled (``generate`` is a no-op) when ``base_url`` is empty.
    """

    def __init__(
        self,
        base_url: Optional[str],
        output_root: Path,
        *,
        document_extensions: Sequence[str] = DEFAULT_DOCUMENT_EXTENSIONS,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.output_root = output_root
        self.document_extensions = tuple(document_extensions)

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    @property
    def feed_path(self) -> Path:
        return self.output_root / FEED_FILENAME

    def generate(
        self,
        documents: Sequence[str],
        input_root: Path,
        max_items: int = DEFAULT_FEED_MAX_ITEMS,
    ) -> Optional[Path]:
        if not self.enabled:
            return None
        logger.info("[RSS] Generating RSS feed...")
        items = self.collect_items(documents, input_root)
        if not items:
            logger.info("[RSS] No items found for RSS feed")
            return None

        items.sort(key=lambda item: (-item.published.timestamp(), item.source))
        if max_items > 0:
            items = items[:max_items]

        document = self._build_document(items, input_root)
        try:
            self.feed_path.write_text(document, encoding="utf-8")
        except OSError as exc:
            raise ProcessingError(FEED_FILENAME, "write feed", exc) from exc
        logger.info("[RSS] Generated %s with %d items", FEED_FILENAME, len(items))
        return self.feed_path

    def collect_items(self, documents: Sequence[str], input_root: Path) -> List[FeedItem]:
        items: List[FeedItem] = []
        for rel_path in documents:
            source = input_root / rel_path
            try:
                content = source.read_text(encoding="utf-8-sig")
                mtime = source.stat().st_mtime
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("[RSS] Could not read %s for the feed: %s", rel_path, exc)
                continue
            title = extract_title(content, rel_path)
            link = f"{self.base_url}/{output_path_for(rel_path, self.document_extensions)}"
            items.append(
                FeedItem(
                    title=title,
                    link=link,
                    description=extract_description(content, title),
                    published=datetime.fromtimestamp(int(mtime), tz=timezone.utc),
                    source=rel_path,
                )
            )
        return items

    def _build_document(self, items: Sequence[FeedItem], input_root: Path) -> str:
        rss = ET.Element("rss", {"version": "2.0"})
        channel = ET.SubElement(rss, "channel")
        ET.SubElement(channel, "title").text = self.infer_site_title(input_root)
        ET.SubElement(channel, "link").text = self.base_url
        ET.SubElement(channel, "description").text = self.infer_site_description(input_root)
        ET.SubElement(channel, "language").text = _FEED_LANGUAGE
        # Newest item date rather than wall-clock time keeps rebuilds byte-identical.
        newest = max(item.published for item in items)
        ET.SubElement(channel, "lastBuildDate").text = format_datetime(newest)

        for item in items:
            node = ET.SubElement(channel, "item")
            ET.SubElement(node, "title").text = item.title
            ET.SubElement(node, "link").text = item.link
            ET.SubElement(node, "description").text = item.description
            ET.SubElement(node, "pubDate").text = format_datetime(item.published)
            ET.SubElement(node, "guid").text = item.link

        ET.indent(rss, space="  ")
        body = ET.tostring(rss, encoding="unicode")
        return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'

    def infer_site_title(self, input_root: Path) -> str:
        for candidate in _INDEX_CANDIDATES:
            content = _read_optional(input_root / candidate)
            if content is None:
                continue
            title = extract_title(content, candidate)
            if title and title not in {"Index", "Readme"}:
                return title
        name = input_root.resolve().name
        if not name:
            return "Site Feed"
        return _readable_name(name)

    def infer_site_description(self, input_root: Path) -> str:
        for candidate in _INDEX_CANDIDATES:
            content = _read_optional(input_root / candidate)
            if content is None:
                continue
            title = extract_title(content, candidate)
            description = extract_description(content, title)
            if description and description != title:
                return description
        return _FALLBACK_DESCRIPTION


def _read_optional(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError):
        return None


__all__ = ["FeedItem", "RSSFeedGenerator", "extract_description", "extract_title"]
