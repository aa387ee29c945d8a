"""Persistent stores used across builds."""

from .build_cache import (
    cache_path_for,
    file_mtime,
    layout_path_for,
    load_cache,
    load_layout,
    save_cache,
    save_layout,
)

__all__ = [
    "cache_path_for",
    "file_mtime",
    "layout_path_for",
    "load_cache",
    "load_layout",
    "save_cache",
    "save_layout",
]
