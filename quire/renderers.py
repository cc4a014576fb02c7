"""Markdown rendering for Quire.

Document bodies are rendered with mistune. Headings get stable anchor ids
and are collected for a table of contents; fenced code blocks are
highlighted with Pygments when the site's ``[markdown]`` settings ask for
it.

Key classes:
- Heading: A heading collected for TOC generation.
- MarkdownRenderer: Renders a document body to HTML.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

if TYPE_CHECKING:
    from .config import MarkdownConfig

logger = logging.getLogger(__name__)

MARKDOWN_PLUGINS = ["strikethrough", "footnotes", "table", "url"]
FALLBACK_STYLE = "default"


@dataclass
class Heading:
    """A heading extracted from Markdown for TOC generation.

    Attributes:
        id: Anchor id for the heading (URL-friendly slug).
        text: The heading's rendered inner HTML.
        level: Heading level (1-6).
    """

    id: str
    text: str
    level: int


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly id from heading text."""
    slug = html.unescape(re.sub(r"<[^>]+>", "", text)).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-") or "section"


def _code_language(info: str | None) -> str | None:
    """Return the language from a fence info string like ``rust,linenos``."""
    if not info:
        return None
    language = re.split(r"[\s,{]", info.strip(), maxsplit=1)[0]
    return language or None


def resolve_style(theme: str) -> str:
    """Return a Pygments style name for the configured highlight theme.

    Unknown themes fall back to Pygments' default style.
    """
    try:
        get_style_by_name(theme)
    except ClassNotFound:
        logger.warning(
            "Unknown highlight theme %r, falling back to %r", theme, FALLBACK_STYLE
        )
        return FALLBACK_STYLE
    return theme


class _HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer with heading ids and optional syntax highlighting.

    Attributes:
        headings: Headings seen during rendering, in document order.
    """

    def __init__(self, formatter: HtmlFormatter | None = None):
        super().__init__(escape=False)
        self.formatter = formatter
        self.headings: list[Heading] = []
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id
        self.headings.append(Heading(id=heading_id, text=text, level=level))
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        language = _code_language(info)
        if language and self.formatter is not None:
            try:
                lexer = get_lexer_by_name(language, stripall=True)
            except ClassNotFound:
                logger.debug("No lexer for %r, leaving code block plain", language)
            else:
                return highlight(code, lexer, self.formatter)
        lang_class = f' class="language-{html.escape(language)}"' if language else ""
        return f"<pre><code{lang_class}>{html.escape(code, quote=False)}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown document bodies to HTML.

    Args:
        config: The site's ``[markdown]`` settings. Without it code blocks
            are left unhighlighted.
    """

    def __init__(self, config: MarkdownConfig | None = None):
        self.config = config
        self._formatter = None
        if config is not None and config.highlight_code:
            style = resolve_style(config.highlight_theme)
            self._formatter = HtmlFormatter(style=style, noclasses=True)

    @property
    def highlighting(self) -> bool:
        return self._formatter is not None

    def render(self, content: str) -> tuple[str, list[Heading]]:
        """Render Markdown content to HTML.

        Args:
            content: Markdown source.

        Returns:
            Tuple of (rendered HTML, list of Heading objects).
        """
        renderer = _HighlightRenderer(self._formatter)
        markdown = mistune.create_markdown(renderer=renderer, plugins=MARKDOWN_PLUGINS)
        return markdown(content), renderer.headings
