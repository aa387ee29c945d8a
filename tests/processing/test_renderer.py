from __future__ import annotations

from colade.processing import MarkdownRenderer


def test_renders_basic_markdown() -> None:
    rendered = MarkdownRenderer().render(b"# Title\n\nSome *emphasis* here.\n")

    assert "<h1>Title</h1>" in rendered.html
    assert "<p>Some <em>emphasis</em> here.</p>" in rendered.html
    assert rendered.metadata.title is None


def test_front_matter_becomes_metadata_not_content() -> None:
    source = b"---\ntitle: Hello\ndate: 2025-08-07\ntags: [x]\n---\nBody text\n"

    rendered = MarkdownRenderer().render(source)

    assert rendered.html == "<p>Body text</p>"
    assert rendered.metadata.title == "Hello"
    assert rendered.metadata.date == "07 Aug 2025"
    assert rendered.metadata.tags == ["x"]


def test_extra_extensions_are_enabled() -> None:
    source = b"| a | b |\n|---|---|\n| 1 | 2 |\n\n```python\nprint('hi')\n```\n"

    html = MarkdownRenderer().render(source).html

    assert "<table>" in html
    assert '<code class="language-python">' in html


def test_mermaid_fence_becomes_diagram_block() -> None:
    source = b"Intro\n\n```mermaid\ngraph TD\n  A-->B\n```\n\nOutro\n"

    html = MarkdownRenderer().render(source).html

    assert '<pre class="mermaid">graph TD\n  A--&gt;B</pre>' in html
    assert "language-mermaid" not in html
    assert "<p>Intro</p>" in html
    assert "<p>Outro</p>" in html


def test_unterminated_mermaid_fence_is_left_to_markdown() -> None:
    html = MarkdownRenderer().render(b"```mermaid\ngraph TD\n").html

    assert 'class="mermaid"' not in html


def test_byte_order_mark_is_ignored() -> None:
    html = MarkdownRenderer().render(b"\xef\xbb\xbf# Title\n").html

    assert html == "<h1>Title</h1>"


def test_renderer_state_does_not_leak_between_documents() -> None:
    renderer = MarkdownRenderer()
    first = renderer.render(b"Text[^1]\n\n[^1]: A footnote.\n").html
    second = renderer.render(b"Plain\n").html

    assert "footnote" in first
    assert second == "<p>Plain</p>"
