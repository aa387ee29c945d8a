"""CLI behaviour tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from colade import __version__
from colade.cli import _build_parser, _options_from_args, main


@pytest.fixture(autouse=True)
def _restore_logging():
    logger = logging.getLogger("colade")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "build", "in", "out"])
    assert args.verbose is True
    assert args.command == "build"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["build", "in", "out", "-v"])
    assert args.verbose is True


def test_cli_verbose_defaults_to_false() -> None:
    args = _build_parser().parse_args(["build", "in", "out"])
    assert args.verbose is False


def test_cli_parses_build_flags() -> None:
    args = _build_parser().parse_args(
        [
            "build",
            "site",
            "public",
            "--size-threshold",
            "2048",
            "--no-incremental",
            "--rss-url",
            "https://example.com",
            "--rss-max-items",
            "3",
            "--keep-orphans",
            "--template",
            "minimal",
            "--no-header",
            "-q",
        ]
    )

    assert (args.input, args.output) == ("site", "public")
    assert args.size_threshold == 2048
    assert args.no_incremental is True
    assert args.rss_url == "https://example.com"
    assert args.rss_max_items == 3
    assert args.keep_orphans is True
    assert args.template == "minimal"
    assert args.no_header is True
    assert args.no_footer is False
    assert args.quiet is True


def test_cli_parses_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve", "public"])
    assert args.command == "serve"
    assert args.dir == "public"
    assert args.port == 8080
    assert args.host == "127.0.0.1"


def test_cli_requires_a_command(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args([])
    assert excinfo.value.code == 2


def test_options_merge_config_file_and_flags(tmp_path: Path) -> None:
    (tmp_path / ".colade.yml").write_text(
        "size_threshold: 100\ntemplate: minimal\nfeed:\n  url: https://a.example\n",
        encoding="utf-8",
    )
    args = _build_parser().parse_args(
        ["build", str(tmp_path), str(tmp_path / "out"), "--rss-url", "https://b.example"]
    )

    options = _options_from_args(args)

    assert options.size_threshold == 100
    assert options.template == "minimal"
    assert options.feed_url == "https://b.example"
    assert options.incremental is True


def test_version_command(capsys: pytest.CaptureFixture[str]) -> None:
    main(["version"])
    assert capsys.readouterr().out == f"colade version: {__version__}\n"


def test_build_command_writes_site(tmp_path: Path) -> None:
    source = tmp_path / "in"
    source.mkdir()
    (source / "index.md").write_text("# Hello\n", encoding="utf-8")

    main(["build", str(source), str(tmp_path / "out"), "-q"])

    assert "<h1>Hello</h1>" in (tmp_path / "out" / "index.html").read_text(encoding="utf-8")
    assert (tmp_path / "out" / ".colade-cache").is_file()


def test_build_errors_exit_with_status_one(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["build", str(tmp_path / "missing"), str(tmp_path / "out")])

    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("Error: input directory")


def test_config_errors_exit_with_status_one(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / ".colade.yml").write_text("- not a mapping\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["build", str(tmp_path), str(tmp_path / "out")])

    assert excinfo.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_serve_rejects_missing_directory(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["serve", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
    assert "is not a valid directory" in capsys.readouterr().err


@pytest.mark.parametrize("position", ["before", "after"])
def test_log_file_receives_build_messages(tmp_path: Path, position: str) -> None:
    source = tmp_path / "in"
    source.mkdir()
    (source / "index.md").write_text("# Hello\n", encoding="utf-8")
    log_file = tmp_path / "build.log"
    command = ["build", str(source), str(tmp_path / "out")]
    flag = ["--log-file", str(log_file)]
    argv = flag + command if position == "before" else command + flag

    main(argv)
    for handler in list(logging.getLogger("colade").handlers):
        handler.close()

    text = log_file.read_text(encoding="utf-8")
    assert "INFO colade.orchestrator: Build complete: 1 processed" in text
    assert "[colade]" not in text


def test_log_file_defaults_to_none() -> None:
    assert _build_parser().parse_args(["build", "in", "out"]).log_file is None
