"""Configuration loading for colade (``.colade.yml`` at the input root)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError
from .models import (
    DEFAULT_DOCUMENT_EXTENSIONS,
    DEFAULT_FEED_MAX_ITEMS,
    DEFAULT_SIZE_THRESHOLD,
    BuildOptions,
)

CONFIG_FILENAME = ".colade.yml"


@dataclass
class FeedConfig:
    """RSS feed settings."""

    url: Optional[str] = None
    max_items: int = DEFAULT_FEED_MAX_ITEMS


@dataclass
class ColadeConfig:
    """Build defaults read from ``.colade.yml``.

    The file lives in the input directory; being a dot-file it is never
    discovered as an asset. Relative paths inside it resolve against that
    directory.
    """

    root: Path
    size_threshold: int = DEFAULT_SIZE_THRESHOLD
    incremental: bool = True
    keep_orphans: bool = False
    template: str = "default"
    header: Optional[Path] = None
    footer: Optional[Path] = None
    no_header: bool = False
    no_footer: bool = False
    document_extensions: List[str] = field(
        default_factory=lambda: list(DEFAULT_DOCUMENT_EXTENSIONS)
    )
    feed: FeedConfig = field(default_factory=FeedConfig)

    def to_options(self, **overrides: Any) -> BuildOptions:
        """Build options from the file, with non-``None`` overrides taking precedence."""
        options = BuildOptions(
            size_threshold=self.size_threshold,
            incremental=self.incremental,
            feed_url=self.feed.url,
            feed_max_items=self.feed.max_items,
            keep_orphans=self.keep_orphans,
            template=self.template,
            header_file=self.header,
            footer_file=self.footer,
            no_header=self.no_header,
            no_footer=self.no_footer,
            document_extensions=tuple(self.document_extensions),
        )
        known = {item.name for item in fields(BuildOptions)}
        for key, value in overrides.items():
            if key not in known:
                raise TypeError(f"unknown build option: {key}")
            if value is not None:
                setattr(options, key, value)
        return options


def load_config(input_root: Path) -> ColadeConfig:
    """Load ``.colade.yml`` from ``input_root``; a missing file yields defaults."""
    root = input_root.expanduser().resolve()
    config_file = root / CONFIG_FILENAME
    if not config_file.is_file():
        return ColadeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = ColadeConfig(root=root)

    size_threshold = _as_int(data.get("size_threshold"))
    if size_threshold is not None:
        if size_threshold < 0:
            raise ConfigError("size_threshold must not be negative")
        config.size_threshold = size_threshold

    for flag in ("incremental", "keep_orphans", "no_header", "no_footer"):
        value = _as_bool(data.get(flag))
        if value is not None:
            setattr(config, flag, value)

    template = _as_str(data.get("template"))
    if template:
        config.template = _resolve_template(root, template)

    config.header = _as_path(root, data.get("header"))
    config.footer = _as_path(root, data.get("footer"))

    extensions = _as_str_list(data.get("document_extensions"))
    if extensions:
        config.document_extensions = [ext if ext.startswith(".") else f".{ext}" for ext in extensions]

    feed_data = _as_dict(data.get("feed"))
    if feed_data:
        max_items = _as_int(feed_data.get("max_items"))
        config.feed = FeedConfig(
            url=_as_str(feed_data.get("url")),
            max_items=max_items if max_items is not None else DEFAULT_FEED_MAX_ITEMS,
        )

    return config


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _resolve_template(root: Path, template: str) -> str:
    # Bare names select a bundled template; anything path-like is a file.
    if "/" in template or template.endswith(".html"):
        candidate = Path(template).expanduser()
        if not candidate.is_absolute():
            candidate = root / candidate
        return str(candidate)
    return template


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_path(root: Path, value: Any) -> Optional[Path]:
    text = _as_str(value)
    if not text:
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else root / path


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILENAME", "ColadeConfig", "FeedConfig", "load_config"]
