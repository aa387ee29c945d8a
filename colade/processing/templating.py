"""Page templating with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template, TemplateError, select_autoescape
from markupsafe import Markup

from ..logging import get_logger
from ..models import PageMetadata

BUNDLED_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
DEFAULT_TEMPLATE = "default"

logger = get_logger("templating")


class PageTemplater:
    """Wraps rendered document HTML in a page template.

    ``selector`` is either a path to a template file or the name of a bundled
    template (``default``, ``minimal``). When the template cannot be resolved,
    loaded or rendered, :meth:`render` returns the document HTML unchanged.
    """

    def __init__(self, selector: str | None = None, *, templates_dir: Path | None = None) -> None:
        self.selector = selector or DEFAULT_TEMPLATE
        self.templates_dir = templates_dir or BUNDLED_TEMPLATES_DIR
        self.template_path = self._resolve_path(self.selector)
        self._template: Optional[Template] = None
        self._load_failed = False

    def _resolve_path(self, selector: str) -> Path:
        candidate = Path(selector).expanduser()
        if candidate.is_file() or candidate.is_absolute() or candidate.suffix == ".html":
            return candidate
        return self.templates_dir / f"{selector}.html"

    @property
    def is_bundled(self) -> bool:
        return self.template_path.parent.resolve() == self.templates_dir.resolve()

    def _load(self) -> Optional[Template]:
        if self._template is not None or self._load_failed:
            return self._template
        env = Environment(
            loader=FileSystemLoader(str(self.template_path.parent)),
            autoescape=select_autoescape(["html", "htm"]),
            keep_trailing_newline=True,
        )
        try:
            self._template = env.get_template(self.template_path.name)
        except (TemplateError, OSError) as exc:
            self._load_failed = True
            logger.warning(
                "Template '%s' unavailable (%s); pages are written without a layout",
                self.selector,
                exc,
            )
        return self._template

    def render(
        self,
        body_html: str,
        metadata: PageMetadata,
        header_html: str = "",
        footer_html: str = "",
    ) -> str:
        template = self._load()
        if template is None:
            return body_html
        try:
            return template.render(
                content=Markup(body_html),
                title=metadata.title or "",
                date=metadata.date or "",
                tags=metadata.tags,
                meta=metadata.as_mapping(),
                header_html=Markup(header_html),
                footer_html=Markup(footer_html),
            )
        except TemplateError as exc:
            logger.warning("Template '%s' failed to render: %s", self.selector, exc)
            return body_html


__all__ = ["BUNDLED_TEMPLATES_DIR", "DEFAULT_TEMPLATE", "PageTemplater"]
