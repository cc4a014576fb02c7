import logging

from quire.config import MarkdownConfig
from quire.renderers import (
    FALLBACK_STYLE,
    MarkdownRenderer,
    _code_language,
    _generate_heading_id,
    resolve_style,
)


def test_headings_get_unique_ids():
    html, toc = MarkdownRenderer().render("# Intro\n\n## Intro\n\n## Setup & Wiring\n")
    assert '<h1 id="intro">Intro</h1>' in html
    assert '<h2 id="intro-1">Intro</h2>' in html
    assert [(h.id, h.level) for h in toc] == [
        ("intro", 1),
        ("intro-1", 2),
        ("setup-wiring", 2),
    ]


def test_generate_heading_id():
    assert _generate_heading_id("Hello, World!") == "hello-world"
    assert _generate_heading_id("<code>x</code> marks") == "x-marks"
    assert _generate_heading_id("!!!") == "section"


def test_code_language_from_info_string():
    assert _code_language("rust") == "rust"
    assert _code_language("rust,linenos") == "rust"
    assert _code_language("python {hl_lines=[1]}") == "python"
    assert _code_language("") is None
    assert _code_language(None) is None


def test_code_blocks_are_plain_without_highlighting():
    renderer = MarkdownRenderer(MarkdownConfig(highlight_code=False))
    assert not renderer.highlighting
    html, _ = renderer.render("```python\nprint('<x>')\n```\n")
    assert '<pre><code class="language-python">' in html
    assert "&lt;x&gt;" in html


def test_code_blocks_are_highlighted_inline():
    renderer = MarkdownRenderer(
        MarkdownConfig(highlight_code=True, highlight_theme="monokai")
    )
    assert renderer.highlighting
    html, _ = renderer.render("```python\ndef f():\n    return 1\n```\n")
    assert 'class="highlight"' in html
    assert 'style="' in html
    assert "language-python" not in html


def test_unknown_language_falls_back_to_plain_block():
    renderer = MarkdownRenderer(MarkdownConfig(highlight_code=True, highlight_theme="monokai"))
    html, _ = renderer.render("```nosuchlang\nx < y\n```\n")
    assert '<pre><code class="language-nosuchlang">x &lt; y' in html


def test_unknown_theme_falls_back(caplog):
    with caplog.at_level(logging.WARNING, logger="quire.renderers"):
        assert resolve_style("no-such-theme") == FALLBACK_STYLE
    assert "no-such-theme" in caplog.text
    assert resolve_style("monokai") == "monokai"


def test_markdown_extensions():
    html, _ = MarkdownRenderer().render(
        "~~old~~\n\n| a | b |\n|---|---|\n| 1 | 2 |\n\nSee https://example.com\n"
    )
    assert "<del>old</del>" in html
    assert "<table>" in html
    assert '<a href="https://example.com">' in html


def test_renderer_satisfies_protocol():
    from quire.protocols import ContentRenderer

    assert isinstance(MarkdownRenderer(), ContentRenderer)
