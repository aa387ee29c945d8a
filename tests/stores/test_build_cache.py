"""Tests for the build cache store."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from colade.errors import CacheLoadError
from colade.models import BuildCache, CacheEntry
from colade.stores import (
    cache_path_for,
    file_mtime,
    layout_path_for,
    load_cache,
    load_layout,
    save_cache,
    save_layout,
)


def test_build_cache_round_trip(tmp_path: Path) -> None:
    path = cache_path_for(tmp_path)
    cache = BuildCache(
        files={
            "index.md": CacheEntry(mtime=1_700_000_000, output="index.html"),
            "img/logo.png": CacheEntry(mtime=1_700_000_010, output="img/logo.png"),
        }
    )

    save_cache(path, cache)
    loaded = load_cache(path)

    assert loaded == cache
    assert path.name == ".colade-cache"


def test_saved_cache_is_sorted_indented_json(tmp_path: Path) -> None:
    path = tmp_path / ".colade-cache"
    save_cache(
        path,
        BuildCache(
            files={
                "b.md": CacheEntry(mtime=2, output="b.html"),
                "a.txt": CacheEntry(mtime=1, output="a.txt"),
            }
        ),
    )

    text = path.read_text(encoding="utf-8")

    assert text.endswith("}\n")
    assert text.index('"a.txt"') < text.index('"b.md"')
    assert json.loads(text) == {
        "files": {
            "a.txt": {"mtime": 1, "output": "a.txt"},
            "b.md": {"mtime": 2, "output": "b.html"},
        },
        "version": 1,
    }


def test_save_cache_replaces_existing_file_without_leftovers(tmp_path: Path) -> None:
    path = tmp_path / ".colade-cache"
    save_cache(path, BuildCache(files={"old.md": CacheEntry(mtime=1, output="old.html")}))
    save_cache(path, BuildCache(files={"new.md": CacheEntry(mtime=2, output="new.html")}))

    assert list(load_cache(path).files) == ["new.md"]
    assert sorted(item.name for item in tmp_path.iterdir()) == [".colade-cache"]


def test_save_cache_cleans_up_temp_file_on_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _refuse(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", _refuse)

    with pytest.raises(OSError):
        save_cache(tmp_path / ".colade-cache", BuildCache())

    assert list(tmp_path.iterdir()) == []


def test_load_cache_missing_file(tmp_path: Path) -> None:
    with pytest.raises(CacheLoadError):
        load_cache(tmp_path / ".colade-cache")


@pytest.mark.parametrize(
    "payload",
    [
        "{",
        "[]",
        '{"files": {}}',
        '{"version": 0, "files": {}}',
        '{"version": "1", "files": {}}',
        '{"version": true, "files": {}}',
        '{"version": 1}',
        '{"version": 1, "files": []}',
        '{"version": 1, "files": {"a.md": {"mtime": 1}}}',
        '{"version": 1, "files": {"a.md": {"mtime": 1.5, "output": "a.html"}}}',
        '{"version": 1, "files": {"a.md": {"mtime": false, "output": "a.html"}}}',
        '{"version": 1, "files": {"a.md": {"mtime": 1, "output": ""}}}',
        '{"version": 1, "files": {"a.md": "a.html"}}',
    ],
)
def test_load_cache_rejects_unusable_payloads(tmp_path: Path, payload: str) -> None:
    path = tmp_path / ".colade-cache"
    path.write_text(payload, encoding="utf-8")

    with pytest.raises(CacheLoadError):
        load_cache(path)


def test_load_cache_rejects_non_utf8_bytes(tmp_path: Path) -> None:
    path = tmp_path / ".colade-cache"
    path.write_bytes(b"\xff\xfe\x00garbage")

    with pytest.raises(CacheLoadError):
        load_cache(path)


def test_file_mtime_truncates_to_seconds(tmp_path: Path) -> None:
    target = tmp_path / "page.md"
    target.write_text("x", encoding="utf-8")
    os.utime(target, (1_700_000_000.75, 1_700_000_000.75))

    assert file_mtime(target) == 1_700_000_000


def test_layout_fingerprint_round_trip(tmp_path: Path) -> None:
    path = layout_path_for(tmp_path)
    fingerprint = {
        "template": {"path": "/site/templates/default.html", "mtime": 1_700_000_000},
        "header": None,
        "footer": {"path": "/site/footer.md", "mtime": None},
    }

    save_layout(path, fingerprint)

    assert path.name == ".colade-layout"
    assert load_layout(path) == fingerprint


@pytest.mark.parametrize("payload", [None, "{", "[1, 2]"])
def test_load_layout_returns_none_when_unusable(tmp_path: Path, payload: str | None) -> None:
    path = tmp_path / ".colade-layout"
    if payload is not None:
        path.write_text(payload, encoding="utf-8")

    assert load_layout(path) is None
