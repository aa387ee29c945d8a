"""CLI entrypoints for colade commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import load_config
from .errors import ColadeError
from .logging import configure_logging
from .models import BuildOptions
from .orchestrator import SiteBuilder
from .service.app import DEFAULT_HOST, DEFAULT_PORT, serve_directory


def _add_global_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Show skipped files, timings and other debug output.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        metavar="PATH",
        help="Also write timestamped log records to this file.",
    )


def _add_build_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Directory containing Markdown documents and assets.")
    parser.add_argument("output", help="Directory the site is written to (created if missing).")
    parser.add_argument(
        "--size-threshold",
        type=int,
        default=None,
        metavar="BYTES",
        help="Warn when a page's gzip size exceeds this many bytes (default 14336).",
    )
    parser.add_argument(
        "--no-incremental",
        action="store_true",
        help="Ignore the build cache and rebuild every file.",
    )
    parser.add_argument(
        "--rss-url",
        default=None,
        metavar="URL",
        help="Site base URL; enables feed.xml generation.",
    )
    parser.add_argument(
        "--rss-max-items",
        type=int,
        default=None,
        metavar="N",
        help="Maximum number of feed items (0 for all, default 20).",
    )
    parser.add_argument(
        "--keep-orphans",
        action="store_true",
        help="Do not delete output files whose source no longer exists.",
    )
    parser.add_argument(
        "--template",
        default=None,
        help="Bundled template name (default, minimal) or path to a template file.",
    )
    parser.add_argument("--header", default=None, metavar="PATH", help="Markdown file used as page header.")
    parser.add_argument("--footer", default=None, metavar="PATH", help="Markdown file used as page footer.")
    parser.add_argument("--no-header", action="store_true", help="Do not inject a page header.")
    parser.add_argument("--no-footer", action="store_true", help="Do not inject a page footer.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only report warnings and errors.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="colade",
        description="Generate static sites from Markdown, rebuilding only what changed.",
    )
    _add_global_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Build a static site from Markdown files.")
    _add_global_options(build_parser, suppress_default=True)
    _add_build_options(build_parser)

    serve_parser = subparsers.add_parser("serve", help="Serve a directory locally for preview.")
    _add_global_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("dir", help="Directory to serve.")
    serve_parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to listen on.")
    serve_parser.add_argument("--host", default=DEFAULT_HOST, help="Interface to bind.")

    version_parser = subparsers.add_parser("version", help="Show the colade version.")
    _add_global_options(version_parser, suppress_default=True)

    return parser


def _options_from_args(args: argparse.Namespace) -> BuildOptions:
    config = load_config(Path(args.input))
    return config.to_options(
        size_threshold=args.size_threshold,
        incremental=False if args.no_incremental else None,
        feed_url=args.rss_url,
        feed_max_items=args.rss_max_items,
        keep_orphans=True if args.keep_orphans else None,
        template=args.template,
        header_file=Path(args.header) if args.header else None,
        footer_file=Path(args.footer) if args.footer else None,
        no_header=True if args.no_header else None,
        no_footer=True if args.no_footer else None,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for colade commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print(f"colade version: {__version__}")
        return

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(getattr(args, "quiet", False)),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        if args.command == "build":
            options = _options_from_args(args)
            SiteBuilder(options).build(args.input, args.output)
        elif args.command == "serve":
            serve_directory(args.dir, host=args.host, port=args.port)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except ColadeError as exc:
        parser.exit(1, f"Error: {exc}\n")
    except KeyboardInterrupt:  # pragma: no cover - interactive stop
        parser.exit(130, "\n")


if __name__ == "__main__":
    main(sys.argv[1:])
