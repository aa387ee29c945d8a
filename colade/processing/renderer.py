"""Markdown to HTML rendering built on Python-Markdown."""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence

import markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from ..models import PageMetadata
from .frontmatter import build_metadata, split_front_matter

DEFAULT_EXTENSIONS: Sequence[str] = ("extra", "sane_lists")


@dataclass
class RenderedDocument:
    """HTML body of a document plus the metadata lifted from its front matter."""

    html: str
    metadata: PageMetadata = field(default_factory=PageMetadata)


class Renderer(Protocol):
    def render(self, data: bytes) -> RenderedDocument:
        ...


class _MermaidPreprocessor(Preprocessor):
    """Replaces ```mermaid fences with ``<pre class="mermaid">`` blocks."""

    _OPEN = re.compile(r"^(?P<fence>`{3,}|~{3,})\s*mermaid\s*$")

    def run(self, lines: List[str]) -> List[str]:
        output: List[str] = []
        index = 0
        while index < len(lines):
            match = self._OPEN.match(lines[index].strip())
            if match is None:
                output.append(lines[index])
                index += 1
                continue
            fence = match.group("fence")
            end = index + 1
            while end < len(lines) and lines[end].strip() != fence:
                end += 1
            if end >= len(lines):
                # Unterminated fence: leave it for the regular code block handling.
                output.extend(lines[index:])
                break
            diagram = "\n".join(lines[index + 1 : end])
            placeholder = self.md.htmlStash.store(
                f'<pre class="mermaid">{html.escape(diagram, quote=False)}</pre>'
            )
            output.extend(["", placeholder, ""])
            index = end + 1
        return output


class MermaidExtension(Extension):
    def extendMarkdown(self, md: markdown.Markdown) -> None:  # noqa: N802 - Python-Markdown API
        # After whitespace normalisation (30), before fenced code blocks (25).
        md.preprocessors.register(_MermaidPreprocessor(md), "colade_mermaid", 28)


class MarkdownRenderer:
    """Renders Markdown source bytes, splitting off front matter first."""

    def __init__(self, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> None:
        self._md = markdown.Markdown(extensions=[*extensions, MermaidExtension()])

    def render(self, data: bytes) -> RenderedDocument:
        text = data.decode("utf-8-sig")
        raw_meta, body = split_front_matter(text)
        self._md.reset()
        body_html = self._md.convert(body)
        return RenderedDocument(html=body_html, metadata=build_metadata(raw_meta))


__all__ = ["MarkdownRenderer", "MermaidExtension", "RenderedDocument", "Renderer"]
