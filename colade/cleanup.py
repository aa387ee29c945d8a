"""Removal of output files that no longer correspond to any input."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Sequence, Set

from .discovery import is_hidden, output_path_for
from .logging import get_logger
from .models import DEFAULT_DOCUMENT_EXTENSIONS, BuildCache, FileSet

logger = get_logger("cleanup")


class OutputReconciler:
    """Keeps the output tree in line with the current input tree.

    Two entry points exist: :meth:`remove_stale` deletes the recorded outputs
    of inputs that disappeared since the cached build, and :meth:`sweep` scans
    the output tree and deletes every file no current input explains. Hidden
    entries (the build cache among them) and ``protected`` paths are never
    candidates. Failures to delete are logged and skipped.
    """

    def __init__(
        self,
        output_root: Path,
        *,
        protected: Iterable[str] = (),
        keep_orphans: bool = False,
        document_extensions: Sequence[str] = DEFAULT_DOCUMENT_EXTENSIONS,
    ) -> None:
        self.output_root = output_root
        self.protected: Set[str] = set(protected)
        self.keep_orphans = keep_orphans
        self.document_extensions = tuple(document_extensions)

    def expected_outputs(self, file_set: FileSet) -> Set[str]:
        expected = {output_path_for(path, self.document_extensions) for path in file_set.documents}
        expected.update(file_set.assets)
        return expected

    def remove_stale(self, prior: BuildCache, file_set: FileSet) -> List[str]:
        """Delete outputs recorded for inputs missing from ``file_set``.

        An output that a current input still produces is kept, which covers
        renames such as ``a.md`` to ``a.markdown`` and a document replaced by
        an asset of the same output name.
        """
        if self.keep_orphans:
            return []
        seen = set(file_set.documents) | set(file_set.assets)
        expected = self.expected_outputs(file_set)
        removed: List[str] = []
        touched_dirs: Set[Path] = set()
        for rel_path in sorted(prior.files):
            if rel_path in seen:
                continue
            output = prior.files[rel_path].output
            if is_hidden(output) or output in self.protected or output in expected:
                continue
            target = self._inside_root(output)
            if target is None:
                logger.warning("Ignoring cached output outside the output tree: %s", output)
                continue
            logger.info("[IncRemove] %s (deleted from input, removing %s)", rel_path, output)
            if self._unlink(target):
                removed.append(output)
                touched_dirs.add(target.parent)
        self._prune_empty_dirs(touched_dirs)
        return removed

    def sweep(self, file_set: FileSet) -> List[str]:
        """Delete every visible output file that is not an expected output."""
        if self.keep_orphans:
            return []
        expected = self.expected_outputs(file_set) | self.protected
        removed: List[str] = []
        touched_dirs: Set[Path] = set()

        for dirpath, dirnames, filenames in os.walk(self.output_root, onerror=self._walk_error):
            current = Path(dirpath)
            rel_dir = current.relative_to(self.output_root).as_posix() if current != self.output_root else ""
            dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
            for filename in sorted(filenames):
                if filename.startswith("."):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if rel_path in expected:
                    continue
                logger.info("[Clean] Removing orphaned output: %s", rel_path)
                if self._unlink(current / filename):
                    removed.append(rel_path)
                    touched_dirs.add(current)

        self._prune_empty_dirs(touched_dirs)
        return removed

    def _inside_root(self, rel_path: str) -> Path | None:
        root = self.output_root.resolve()
        target = (self.output_root / rel_path).resolve()
        if target == root or root not in target.parents:
            return None
        return self.output_root / rel_path

    @staticmethod
    def _unlink(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("Could not remove %s: %s", path, exc)
            return False
        return True

    def _prune_empty_dirs(self, directories: Iterable[Path]) -> None:
        # Deepest first so emptied parents can go too.
        for directory in sorted(directories, key=lambda item: len(item.parts), reverse=True):
            current = directory
            while current != self.output_root and self.output_root in current.parents:
                try:
                    current.rmdir()
                except OSError:
                    break
                logger.debug("[Clean] Removed empty directory %s", current)
                current = current.parent

    @staticmethod
    def _walk_error(exc: OSError) -> None:
        logger.warning("Skipping unreadable output path: %s", exc)


__all__ = ["OutputReconciler"]
