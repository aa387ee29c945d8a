"""Persistent change-detection cache stored inside the output directory."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import CacheLoadError
from ..models import CACHE_FILENAME, CACHE_VERSION, LAYOUT_FILENAME, BuildCache, CacheEntry


def cache_path_for(output_root: Path) -> Path:
    return output_root / CACHE_FILENAME


def layout_path_for(output_root: Path) -> Path:
    return output_root / LAYOUT_FILENAME


def file_mtime(path: Path) -> int:
    """Modification time in whole seconds, the resolution the cache records."""
    return int(path.stat().st_mtime)


def load_cache(path: Path) -> BuildCache:
    """Read a cache file, raising :class:`CacheLoadError` for anything unusable.

    Missing, unreadable, malformed and wrong-version files all raise the same
    error so callers cannot treat them differently.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise CacheLoadError(f"no build cache at {path}") from exc
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CacheLoadError(f"unreadable build cache at {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise CacheLoadError("build cache root is not an object")
    version = payload.get("version")
    # bool is an int subclass; ``true`` must not pass for version 1.
    if isinstance(version, bool) or version != CACHE_VERSION:
        raise CacheLoadError(f"unsupported build cache version: {version!r}")

    files = payload.get("files")
    if not isinstance(files, dict):
        raise CacheLoadError("build cache has no 'files' mapping")

    entries: Dict[str, CacheEntry] = {}
    for rel_path, raw in files.items():
        entry = _entry_from_dict(raw)
        if not isinstance(rel_path, str) or entry is None:
            raise CacheLoadError(f"malformed build cache entry for {rel_path!r}")
        entries[rel_path] = entry
    return BuildCache(version=CACHE_VERSION, files=entries)


def save_cache(path: Path, cache: BuildCache) -> None:
    """Replace the cache file in one step.

    The payload goes to a temporary sibling first and is moved over the old
    file with :func:`os.replace`, so a crash never leaves a half-written cache.
    """
    payload = {
        "version": cache.version,
        "files": {
            rel_path: {"mtime": entry.mtime, "output": entry.output}
            for rel_path, entry in cache.files.items()
        },
    }
    _write_atomic(path, json.dumps(payload, indent=2, sort_keys=True) + "\n")


def load_layout(path: Path) -> Optional[Dict[str, Any]]:
    """Return the layout fingerprint of the last build, or ``None`` if unusable."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


def save_layout(path: Path, fingerprint: Dict[str, Any]) -> None:
    _write_atomic(path, json.dumps(fingerprint, indent=2, sort_keys=True) + "\n")


def _write_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _entry_from_dict(raw: object) -> CacheEntry | None:
    if not isinstance(raw, dict):
        return None
    mtime = raw.get("mtime")
    output = raw.get("output")
    if isinstance(mtime, bool) or not isinstance(mtime, int):
        return None
    if not isinstance(output, str) or not output:
        return None
    return CacheEntry(mtime=mtime, output=output)


__all__ = [
    "cache_path_for",
    "file_mtime",
    "layout_path_for",
    "load_cache",
    "load_layout",
    "save_cache",
    "save_layout",
]
