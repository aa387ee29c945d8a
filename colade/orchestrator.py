"""Build orchestration: strategy selection, per-file dispatch, reconciliation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .cleanup import OutputReconciler
from .discovery import discover, output_path_for
from .errors import CacheLoadError, ProcessingError, SetupError
from .feed import RSSFeedGenerator
from .logging import get_logger
from .models import (
    FEED_FILENAME,
    BuildCache,
    BuildOptions,
    BuildResult,
    BuildStrategy,
    CacheEntry,
    FileSet,
)
from .processing import ArtifactProcessor, MarkdownRenderer, PageTemplater, Renderer, SizeAdvisor
from .stores import (
    cache_path_for,
    file_mtime,
    layout_path_for,
    load_cache,
    load_layout,
    save_cache,
    save_layout,
)

HEADER_FILENAME = "header.md"
FOOTER_FILENAME = "footer.md"


class SiteBuilder:
    """Converts an input tree of Markdown and assets into an output site.

    Each :meth:`build` call walks the input, decides between an incremental
    and a full build, processes files one at a time in discovery order,
    removes orphaned outputs and finally replaces the build cache. The cache
    write is the last step, so a failed build leaves the previous cache (or
    none) in place.
    """

    def __init__(
        self,
        options: BuildOptions | None = None,
        *,
        renderer: Renderer | None = None,
        templater: PageTemplater | None = None,
    ) -> None:
        self.options = options or BuildOptions()
        self.renderer = renderer or MarkdownRenderer()
        self.templater = templater or PageTemplater(self.options.template)
        self.logger = get_logger("orchestrator")

    def build(self, input_root: Path | str, output_root: Path | str) -> BuildResult:
        input_path, output_path = self._validate_roots(Path(input_root), Path(output_root))
        options = self.options
        self.logger.info("Building site from %s into %s", input_path, output_path)

        file_set = discover(input_path, options.document_extensions)
        self.logger.debug(
            "Discovery found %d documents and %d assets",
            len(file_set.documents),
            len(file_set.assets),
        )

        cache_file = cache_path_for(output_path)
        header_path, footer_path = self._layout_fragment_paths(input_path)
        layout_file = layout_path_for(output_path)
        layout = self._layout_fingerprint(header_path, footer_path)
        prior = self._select_prior_cache(cache_file, layout_file, layout)
        strategy = BuildStrategy.FULL if prior is None else BuildStrategy.INCREMENTAL
        self.logger.info("Using %s build", strategy.value)

        feed = RSSFeedGenerator(
            options.feed_url,
            output_path,
            document_extensions=options.document_extensions,
        )
        reconciler = OutputReconciler(
            output_path,
            protected={FEED_FILENAME} if options.feed_enabled else set(),
            keep_orphans=options.keep_orphans,
            document_extensions=options.document_extensions,
        )

        with SizeAdvisor(options.size_threshold) as advisor:
            processor = ArtifactProcessor(
                renderer=self.renderer,
                templater=self.templater,
                advisor=advisor,
                header_html=self._render_fragment(header_path),
                footer_html=self._render_fragment(footer_path),
                document_extensions=options.document_extensions,
            )
            result = BuildResult(strategy=strategy, cache=BuildCache())
            new_entries = self._process_all(
                processor, file_set, input_path, output_path, prior, result
            )
            feed.generate(file_set.documents, input_path, options.feed_max_items)
            result.advisories = [advisory.message for advisory in advisor.drain()]

        if prior is not None:
            result.removed.extend(reconciler.remove_stale(prior, file_set))
        result.removed.extend(reconciler.sweep(file_set))

        result.cache = BuildCache(files=new_entries)
        save_cache(cache_file, result.cache)
        save_layout(layout_file, layout)
        self.logger.info(
            "Build complete: %d processed, %d unchanged, %d removed",
            len(result.processed),
            len(result.skipped),
            len(result.removed),
        )
        return result

    # ------------------------------------------------------------------
    # Setup

    @staticmethod
    def _validate_roots(input_root: Path, output_root: Path) -> Tuple[Path, Path]:
        input_path = input_root.expanduser()
        if not input_path.exists():
            raise SetupError(f"input directory '{input_root}' does not exist")
        if not input_path.is_dir():
            raise SetupError(f"input path '{input_root}' is not a directory")

        output_path = output_root.expanduser()
        try:
            output_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SetupError(f"cannot create output directory '{output_root}': {exc}") from exc
        if not output_path.is_dir():
            raise SetupError(f"output path '{output_root}' is not a directory")
        if input_path.resolve() == output_path.resolve():
            raise SetupError("input and output directories must differ")
        return input_path, output_path

    def _layout_fragment_paths(self, input_root: Path) -> Tuple[Optional[Path], Optional[Path]]:
        options = self.options
        header = None if options.no_header else (options.header_file or input_root / HEADER_FILENAME)
        footer = None if options.no_footer else (options.footer_file or input_root / FOOTER_FILENAME)
        return header, footer

    def _render_fragment(self, path: Optional[Path]) -> str:
        if path is None or not path.is_file():
            return ""
        try:
            data = path.read_bytes()
        except OSError as exc:
            self.logger.warning("Could not read layout fragment %s: %s", path, exc)
            return ""
        try:
            return self.renderer.render(data).html
        except Exception as exc:
            raise ProcessingError(path.name, "render", exc) from exc

    # ------------------------------------------------------------------
    # Strategy

    def _select_prior_cache(
        self, cache_file: Path, layout_file: Path, layout: Dict[str, Any]
    ) -> Optional[BuildCache]:
        if not self.options.incremental:
            self.logger.debug("Incremental builds disabled; rebuilding everything")
            return None
        try:
            prior = load_cache(cache_file)
        except CacheLoadError as exc:
            self.logger.debug("No usable build cache (%s); falling back to a full build", exc)
            return None

        if load_layout(layout_file) != layout:
            self.logger.info("Page layout changed since the last build; rebuilding everything")
            return None
        return prior

    def _layout_fingerprint(
        self, header_path: Optional[Path], footer_path: Optional[Path]
    ) -> Dict[str, Any]:
        """Describe everything applied to every page: template, header and footer.

        Each source is recorded by resolved path and mtime; a disabled
        fragment is recorded as ``None``. Any difference from the previous
        build means cached pages were laid out differently.
        """
        return {
            "template": _describe_layout_source(self.templater.template_path),
            "header": _describe_layout_source(header_path),
            "footer": _describe_layout_source(footer_path),
        }

    # ------------------------------------------------------------------
    # Processing

    def _process_all(
        self,
        processor: ArtifactProcessor,
        file_set: FileSet,
        input_root: Path,
        output_root: Path,
        prior: Optional[BuildCache],
        result: BuildResult,
    ) -> Dict[str, CacheEntry]:
        extensions = self.options.document_extensions
        entries: Dict[str, CacheEntry] = {}
        batches = (
            (file_set.documents, processor.process_document, "Build"),
            (file_set.assets, processor.process_asset, "Copy"),
        )
        for paths, handler, label in batches:
            for rel_path in paths:
                mtime = self._current_mtime(input_root, rel_path)
                output = output_path_for(rel_path, extensions)
                entries[rel_path] = CacheEntry(mtime=mtime, output=output)

                if prior is not None and self._is_unchanged(prior, rel_path, mtime):
                    self.logger.debug("[Inc%s] %s unchanged, skipping", label, rel_path)
                    result.skipped.append(rel_path)
                    continue

                prefix = label if prior is None else f"Inc{label}"
                self.logger.info("[%s] %s -> %s", prefix, rel_path, output)
                handler(input_root, output_root, rel_path)
                result.processed.append(rel_path)
        return entries

    @staticmethod
    def _is_unchanged(prior: BuildCache, rel_path: str, mtime: int) -> bool:
        entry = prior.files.get(rel_path)
        return entry is not None and entry.mtime == mtime

    @staticmethod
    def _current_mtime(input_root: Path, rel_path: str) -> int:
        try:
            return file_mtime(input_root / rel_path)
        except OSError as exc:
            raise ProcessingError(rel_path, "stat", exc) from exc


def _describe_layout_source(path: Optional[Path]) -> Optional[Dict[str, Any]]:
    if path is None:
        return None
    try:
        mtime: Optional[int] = file_mtime(path)
    except OSError:
        mtime = None
    return {"path": str(path.expanduser().resolve()), "mtime": mtime}


def build_site(
    input_root: Path | str,
    output_root: Path | str,
    options: BuildOptions | None = None,
) -> BuildResult:
    """Build ``input_root`` into ``output_root`` with a fresh :class:`SiteBuilder`."""
    return SiteBuilder(options).build(input_root, output_root)


__all__ = ["FOOTER_FILENAME", "HEADER_FILENAME", "SiteBuilder", "build_site"]
