"""Core data models shared across colade components."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

CACHE_VERSION = 1
CACHE_FILENAME = ".colade-cache"
LAYOUT_FILENAME = ".colade-layout"
FEED_FILENAME = "feed.xml"
HTML_SUFFIX = ".html"
DEFAULT_DOCUMENT_EXTENSIONS: Tuple[str, ...] = (".md", ".markdown")
DEFAULT_SIZE_THRESHOLD = 14 * 1024
DEFAULT_FEED_MAX_ITEMS = 20


@dataclass
class FileSet:
    """Input-relative paths found by one discovery pass, in walk order."""

    documents: List[str] = field(default_factory=list)
    assets: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.documents) + len(self.assets)


@dataclass(frozen=True)
class CacheEntry:
    """What the previous build recorded for one input file."""

    mtime: int
    output: str


@dataclass
class BuildCache:
    """Persisted change-detection state, keyed by input-relative path."""

    version: int = CACHE_VERSION
    files: Dict[str, CacheEntry] = field(default_factory=dict)


class BuildStrategy(str, Enum):
    INCREMENTAL = "incremental"
    FULL = "full"


@dataclass
class PageMetadata:
    """Front matter of a document.

    ``title``, ``date`` and ``tags`` are the keys the bundled templates know
    about; anything else is kept verbatim in ``extra``.
    """

    title: Optional[str] = None
    date: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_mapping(self) -> Dict[str, Any]:
        mapping: Dict[str, Any] = dict(self.extra)
        if self.title is not None:
            mapping["title"] = self.title
        if self.date is not None:
            mapping["date"] = self.date
        if self.tags:
            mapping["tags"] = list(self.tags)
        return mapping


@dataclass
class BuildOptions:
    """Settings for a single build, filled from the CLI and ``.colade.yml``."""

    size_threshold: int = DEFAULT_SIZE_THRESHOLD
    incremental: bool = True
    feed_url: Optional[str] = None
    feed_max_items: int = DEFAULT_FEED_MAX_ITEMS
    keep_orphans: bool = False
    template: str = "default"
    header_file: Optional[Path] = None
    footer_file: Optional[Path] = None
    no_header: bool = False
    no_footer: bool = False
    document_extensions: Tuple[str, ...] = DEFAULT_DOCUMENT_EXTENSIONS

    @property
    def feed_enabled(self) -> bool:
        return bool(self.feed_url)


@dataclass
class BuildResult:
    """Summary of a successful build."""

    strategy: BuildStrategy
    cache: BuildCache
    processed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    advisories: List[str] = field(default_factory=list)
