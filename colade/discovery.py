"""Input tree walking and document/asset classification."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import Iterator, Sequence

from .errors import DiscoveryError
from .logging import get_logger
from .models import DEFAULT_DOCUMENT_EXTENSIONS, HTML_SUFFIX, FileSet

_HIDDEN_PREFIX = "."

logger = get_logger("discovery")


def is_hidden(rel_path: str) -> bool:
    """Return True when any component of ``rel_path`` is a dot-name."""
    if rel_path in ("", "."):
        return False
    return any(part.startswith(_HIDDEN_PREFIX) for part in rel_path.split("/"))


def is_document(rel_path: str, extensions: Sequence[str] = DEFAULT_DOCUMENT_EXTENSIONS) -> bool:
    # Literal, case-sensitive suffix match: "notes.MD" is an asset.
    return PurePosixPath(rel_path).suffix in extensions


def output_path_for(
    rel_path: str, extensions: Sequence[str] = DEFAULT_DOCUMENT_EXTENSIONS
) -> str:
    """Map an input-relative path to its output-relative path."""
    if is_document(rel_path, extensions):
        return PurePosixPath(rel_path).with_suffix(HTML_SUFFIX).as_posix()
    return rel_path


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def _iter_files(root: Path) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        # Pruning in place stops os.walk from descending into hidden trees.
        dirnames[:] = sorted(name for name in dirnames if not name.startswith(_HIDDEN_PREFIX))

        for filename in sorted(filenames):
            if filename.startswith(_HIDDEN_PREFIX):
                continue
            yield f"{rel_dir}/{filename}" if rel_dir else filename


def _walk_order(rel_path: str) -> list[str]:
    return rel_path.split("/")


def discover(
    input_root: Path | str,
    document_extensions: Sequence[str] = DEFAULT_DOCUMENT_EXTENSIONS,
) -> FileSet:
    """Walk ``input_root`` and classify every visible file.

    Paths come back in lexical walk order: a subdirectory's files appear at
    the position of the directory name among its siblings, so ``img/logo.png``
    precedes ``robots.txt``. Any error raised while walking aborts discovery
    with :class:`DiscoveryError`; no partial set is returned.
    """
    root = Path(input_root)
    documents: list[str] = []
    assets: list[str] = []
    try:
        rel_paths = sorted(_iter_files(root), key=_walk_order)
    except OSError as exc:
        raise DiscoveryError(str(root), exc) from exc

    for rel_path in rel_paths:
        if is_document(rel_path, document_extensions):
            documents.append(rel_path)
        else:
            assets.append(rel_path)

    logger.debug(
        "Discovered %d documents and %d assets under %s",
        len(documents),
        len(assets),
        root,
    )
    return FileSet(documents=documents, assets=assets)


__all__ = ["discover", "is_document", "is_hidden", "output_path_for"]
