"""Gzip size advisories for generated pages."""

from __future__ import annotations

import gzip
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from ..logging import get_logger

logger = get_logger("sizecheck")


@dataclass(frozen=True)
class SizeAdvisory:
    """Compressed size of one generated page compared against the threshold."""

    path: str
    compressed_bytes: Optional[int]
    threshold: int
    error: Optional[str] = None

    @property
    def exceeded(self) -> bool:
        return self.compressed_bytes is not None and self.compressed_bytes > self.threshold

    @property
    def message(self) -> str:
        if self.compressed_bytes is None:
            return f"{self.path}: compressed size unavailable ({self.error})"
        size_kb = self.compressed_bytes / 1024
        if self.exceeded:
            return (
                f"{self.path}: compressed size is {size_kb:.1f}KB "
                f"(> {self.threshold / 1024:.1f}KB)"
            )
        return f"{self.path}: compressed size is {size_kb:.1f}KB"


def measure(rel_path: str, output_file: Path, threshold: int) -> SizeAdvisory:
    try:
        data = output_file.read_bytes()
    except OSError as exc:
        return SizeAdvisory(rel_path, None, threshold, error=str(exc))
    return SizeAdvisory(rel_path, len(gzip.compress(data)), threshold)


class SizeAdvisor:
    """Measures pages in the background and hands results back in submit order.

    ``submit`` never blocks the caller on compression; ``drain`` waits for
    everything submitted so far and returns one advisory per submission, in
    the order the submissions were made.
    """

    def __init__(self, threshold: int, *, max_workers: int | None = None) -> None:
        self.threshold = threshold
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="colade-size"
        )
        self._pending: List[Tuple[str, Future[SizeAdvisory]]] = []

    def submit(self, rel_path: str, output_file: Path) -> None:
        future = self._executor.submit(measure, rel_path, output_file, self.threshold)
        self._pending.append((rel_path, future))

    def __len__(self) -> int:
        return len(self._pending)

    def drain(self) -> List[SizeAdvisory]:
        pending, self._pending = self._pending, []
        advisories = [future.result() for _, future in pending]
        for advisory in advisories:
            if advisory.exceeded:
                logger.warning("[Size] %s", advisory.message)
            else:
                logger.info("[Size] %s", advisory.message)
        return advisories

    def close(self) -> None:
        # Outstanding measurements are only advisory; do not wait on them.
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._pending = []

    def __enter__(self) -> "SizeAdvisor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["SizeAdvisor", "SizeAdvisory", "measure"]
