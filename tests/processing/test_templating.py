from __future__ import annotations

from pathlib import Path

from colade.models import PageMetadata
from colade.processing import PageTemplater


def test_default_template_wraps_content_with_metadata() -> None:
    templater = PageTemplater()
    metadata = PageMetadata(title="Post", date="07 Aug 2025", tags=["x", "y"])

    page = templater.render("<p>Body</p>", metadata, header_html="<p>Top</p>", footer_html="<p>End</p>")

    assert templater.is_bundled
    assert "<title>Post</title>" in page
    assert "<h1>Post</h1>" in page
    assert '<div class="date">07 Aug 2025</div>' in page
    assert "<span>x</span><span>y</span>" in page
    assert "<header><p>Top</p></header>" in page
    assert "<footer><p>End</p></footer>" in page
    assert "<p>Body</p>" in page
    assert "mermaid.min.js" in page


def test_default_template_without_metadata() -> None:
    page = PageTemplater().render("<p>Body</p>", PageMetadata())

    assert "<title>Untitled</title>" in page
    assert "<h1>" not in page
    assert "<header>" not in page
    assert 'class="date"' not in page


def test_metadata_values_are_escaped_but_content_is_not() -> None:
    page = PageTemplater("minimal").render("<p>ok</p>", PageMetadata(title="<b>&</b>"))

    assert "<title>&lt;b&gt;&amp;&lt;/b&gt;</title>" in page
    assert "<p>ok</p>" in page


def test_custom_template_file(tmp_path: Path) -> None:
    template = tmp_path / "page.html"
    template.write_text("{{ meta.author }}:{{ content }}", encoding="utf-8")
    templater = PageTemplater(str(template))

    page = templater.render("<p>x</p>", PageMetadata(extra={"author": "Sam"}))

    assert not templater.is_bundled
    assert templater.template_path == template
    assert page == "Sam:<p>x</p>"


def test_missing_template_falls_back_to_body(tmp_path: Path) -> None:
    templater = PageTemplater(str(tmp_path / "absent.html"))

    assert templater.render("<p>raw</p>", PageMetadata()) == "<p>raw</p>"


def test_unknown_bundled_name_falls_back_to_body() -> None:
    assert PageTemplater("no-such-layout").render("<p>raw</p>", PageMetadata()) == "<p>raw</p>"


def test_template_render_error_falls_back_to_body(tmp_path: Path) -> None:
    template = tmp_path / "broken.html"
    template.write_text("{{ meta.missing.deeper }}", encoding="utf-8")

    assert PageTemplater(str(template)).render("<p>raw</p>", PageMetadata()) == "<p>raw</p>"


def test_template_syntax_error_falls_back_to_body(tmp_path: Path) -> None:
    template = tmp_path / "syntax.html"
    template.write_text("{% if %}", encoding="utf-8")

    assert PageTemplater(str(template)).render("<p>raw</p>", PageMetadata()) == "<p>raw</p>"
