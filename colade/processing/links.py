"""Rewrites links between documents so they point at the generated pages."""

from __future__ import annotations

import re
from typing import Sequence

from ..models import DEFAULT_DOCUMENT_EXTENSIONS, HTML_SUFFIX


class LinkRewriter:
    """Turns ``[text](page.md)`` into ``[text](page.html)`` for local targets."""

    _LINK_PATTERN = re.compile(r"\[([^\]]*)\]\(([^)\s]+)\)")
    _EXTERNAL_PREFIXES = ("http://", "https://", "mailto:", "//")

    def __init__(self, extensions: Sequence[str] = DEFAULT_DOCUMENT_EXTENSIONS) -> None:
        self.extensions = tuple(extensions)

    def rewrite(self, markdown: str) -> str:
        return self._LINK_PATTERN.sub(self._replace, markdown)

    def _replace(self, match: re.Match[str]) -> str:
        label, target = match.group(1), match.group(2)
        rewritten = self.rewrite_target(target)
        if rewritten == target:
            return match.group(0)
        return f"[{label}]({rewritten})"

    def rewrite_target(self, target: str) -> str:
        if target.startswith(self._EXTERNAL_PREFIXES) or target.startswith("#"):
            return target
        path, sep, fragment = target.partition("#")
        for extension in self.extensions:
            if path.endswith(extension):
                return f"{path[: -len(extension)]}{HTML_SUFFIX}{sep}{fragment}"
        return target


__all__ = ["LinkRewriter"]
