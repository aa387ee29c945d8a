"""Per-file conversion: documents are rendered and templated, assets copied."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional, Sequence

from ..discovery import output_path_for
from ..errors import ProcessingError
from ..logging import get_logger, timed
from ..models import DEFAULT_DOCUMENT_EXTENSIONS
from .links import LinkRewriter
from .renderer import MarkdownRenderer, Renderer
from .sizecheck import SizeAdvisor
from .templating import PageTemplater

logger = get_logger("processor")


class ArtifactProcessor:
    """Turns one input file into its output artifact.

    Both build strategies share a single instance, so a document is produced
    the same way whether it was reached by a full or an incremental build.
    """

    def __init__(
        self,
        *,
        renderer: Renderer | None = None,
        templater: PageTemplater | None = None,
        link_rewriter: LinkRewriter | None = None,
        advisor: Optional[SizeAdvisor] = None,
        header_html: str = "",
        footer_html: str = "",
        document_extensions: Sequence[str] = DEFAULT_DOCUMENT_EXTENSIONS,
    ) -> None:
        self.renderer = renderer or MarkdownRenderer()
        self.templater = templater or PageTemplater()
        self.link_rewriter = link_rewriter or LinkRewriter(document_extensions)
        self.advisor = advisor
        self.header_html = header_html
        self.footer_html = footer_html
        self.document_extensions = tuple(document_extensions)

    def process_document(self, input_root: Path, output_root: Path, rel_path: str) -> str:
        """Render ``rel_path`` to HTML and return its output-relative path."""
        out_rel = output_path_for(rel_path, self.document_extensions)
        src = input_root / rel_path
        dst = output_root / out_rel

        with timed(logger, f"[Build] {rel_path}"):
            try:
                source = src.read_bytes()
            except OSError as exc:
                raise ProcessingError(rel_path, "read", exc) from exc

            try:
                text = source.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise ProcessingError(rel_path, "decode", exc) from exc
            linked = self.link_rewriter.rewrite(text).encode("utf-8")

            try:
                rendered = self.renderer.render(linked)
            except Exception as exc:
                raise ProcessingError(rel_path, "render", exc) from exc

            page = self.templater.render(
                rendered.html,
                rendered.metadata,
                header_html=self.header_html,
                footer_html=self.footer_html,
            )
            _write_output(rel_path, dst, page.encode("utf-8"))

        if self.advisor is not None:
            self.advisor.submit(out_rel, dst)
        return out_rel

    def process_asset(self, input_root: Path, output_root: Path, rel_path: str) -> str:
        """Copy ``rel_path`` byte for byte and return its output-relative path."""
        src = input_root / rel_path
        dst = output_root / rel_path
        with timed(logger, f"[Copy] {rel_path}"):
            _ensure_parent(rel_path, dst)
            try:
                shutil.copyfile(src, dst)
            except OSError as exc:
                raise ProcessingError(rel_path, "copy", exc) from exc
        return rel_path


def _ensure_parent(rel_path: str, dst: Path) -> None:
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ProcessingError(rel_path, "create output directory for", exc) from exc


def _write_output(rel_path: str, dst: Path, payload: bytes) -> None:
    _ensure_parent(rel_path, dst)
    try:
        dst.write_bytes(payload)
    except OSError as exc:
        raise ProcessingError(rel_path, "write", exc) from exc


__all__ = ["ArtifactProcessor"]
