"""Document rendering, templating and asset copying."""

from .links import LinkRewriter
from .processor import ArtifactProcessor
from .renderer import MarkdownRenderer, RenderedDocument, Renderer
from .sizecheck import SizeAdvisor, SizeAdvisory
from .templating import PageTemplater

__all__ = [
    "ArtifactProcessor",
    "LinkRewriter",
    "MarkdownRenderer",
    "PageTemplater",
    "RenderedDocument",
    "Renderer",
    "SizeAdvisor",
    "SizeAdvisory",
]
