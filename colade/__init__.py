"""colade: incremental static site builds from Markdown."""

from .errors import ColadeError
from .models import BuildOptions, BuildResult, BuildStrategy
from .orchestrator import SiteBuilder, build_site

__version__ = "0.3.0"

__all__ = [
    "BuildOptions",
    "BuildResult",
    "BuildStrategy",
    "ColadeError",
    "SiteBuilder",
    "__version__",
    "build_site",
]
