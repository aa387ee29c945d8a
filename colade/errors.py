"""Exception hierarchy for site builds."""

from __future__ import annotations


class ColadeError(RuntimeError):
    """Base class for every failure the build surfaces to its caller."""


class ConfigError(ColadeError):
    """Raised when ``.colade.yml`` cannot be parsed."""


class SetupError(ColadeError):
    """Raised when the input or output directory is unusable."""


class DiscoveryError(ColadeError):
    """Raised when walking the input tree fails."""

    def __init__(self, root: str, cause: BaseException) -> None:
        super().__init__(f"failed to scan input directory '{root}': {cause}")
        self.root = root
        self.cause = cause


class CacheLoadError(ColadeError):
    """Raised when the build cache is missing, unreadable or of another version."""


class ProcessingError(ColadeError):
    """Raised when a single input file cannot be converted or copied.

    ``path`` is relative to the input root and ``operation`` names the step
    that failed (``read``, ``render``, ``write``, ``copy``...).
    """

    def __init__(self, path: str, operation: str, cause: BaseException | str) -> None:
        super().__init__(f"failed to {operation} '{path}': {cause}")
        self.path = path
        self.operation = operation
        self.cause = cause


__all__ = [
    "CacheLoadError",
    "ColadeError",
    "ConfigError",
    "DiscoveryError",
    "ProcessingError",
    "SetupError",
]
