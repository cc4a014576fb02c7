"""Site configuration for Quire.

The site is configured by ``config.toml`` at the project root. It is read
once when a command starts and turned into a frozen SiteConfig that is
passed to whatever needs it.

Key functions:
- load_config: Read and validate config.toml.
- config_from_mapping: Validate an already-parsed mapping.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.toml"
DEFAULT_HIGHLIGHT_THEME = "base16-ocean-dark"


class ConfigError(Exception):
    """Invalid or unreadable configuration.

    Attributes:
        path: Path of the configuration file, if any.
        message: Human-readable error message.
    """

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path is not None else message)


@dataclass(frozen=True)
class MarkdownConfig:
    """The ``[markdown]`` table.

    Attributes:
        highlight_code: Whether to syntax highlight fenced code blocks.
        highlight_theme: Highlighting theme name.
    """

    highlight_code: bool = False
    highlight_theme: str = DEFAULT_HIGHLIGHT_THEME


@dataclass(frozen=True)
class SiteConfig:
    """Global site settings, immutable for the duration of a build.

    Attributes:
        base_url: URL the site is built for.
        title: Site title.
        author: Default author.
        theme: Theme identifier.
        compile_sass: Whether the site engine compiles Sass.
        build_search_index: Whether the site engine builds a search index.
        generate_feed: Whether the site engine writes a feed.
        minify_html: Whether the site engine minifies its output.
        markdown: Markdown rendering settings.
        extra: The free-form ``[extra]`` table, read-only at every level.
    """

    base_url: str
    title: str = ""
    author: str = ""
    theme: str = ""
    compile_sass: bool = False
    build_search_index: bool = False
    generate_feed: bool = False
    minify_html: bool = False
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "title": self.title,
            "author": self.author,
            "theme": self.theme,
            "compile_sass": self.compile_sass,
            "build_search_index": self.build_search_index,
            "generate_feed": self.generate_feed,
            "minify_html": self.minify_html,
            "markdown": {
                "highlight_code": self.markdown.highlight_code,
                "highlight_theme": self.markdown.highlight_theme,
            },
            "extra": _thaw(self.extra),
        }


def _freeze(value: Any) -> Any:
    """Recursively turn tables into read-only mappings and arrays into tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


_STRING_KEYS = ("title", "author", "theme")
_BOOL_KEYS = ("compile_sass", "build_search_index", "generate_feed", "minify_html")


def _expect(data: Mapping[str, Any], key: str, kind: type, default: Any, path: Path | None):
    value = data.get(key, default)
    if not isinstance(value, kind):
        raise ConfigError(
            f"'{key}' must be a {kind.__name__}, got {type(value).__name__}", path
        )
    return value


def config_from_mapping(data: Mapping[str, Any], path: Path | None = None) -> SiteConfig:
    """Build a SiteConfig from parsed TOML.

    Args:
        data: Parsed configuration.
        path: Source file, used in error messages.

    Raises:
        ConfigError: A required key is missing or a value has the wrong type.
    """
    if "base_url" not in data:
        raise ConfigError("'base_url' is required", path)
    base_url = _expect(data, "base_url", str, "", path)

    values: dict[str, Any] = {}
    for key in _STRING_KEYS:
        values[key] = _expect(data, key, str, "", path)
    for key in _BOOL_KEYS:
        values[key] = _expect(data, key, bool, False, path)

    markdown_table = _expect(data, "markdown", dict, {}, path)
    markdown = MarkdownConfig(
        highlight_code=_expect(markdown_table, "highlight_code", bool, False, path),
        highlight_theme=_expect(
            markdown_table, "highlight_theme", str, DEFAULT_HIGHLIGHT_THEME, path
        ),
    )
    extra = _expect(data, "extra", dict, {}, path)

    known = {"base_url", "markdown", "extra", *_STRING_KEYS, *_BOOL_KEYS}
    for key in data:
        if key not in known:
            logger.debug("Ignoring unknown config key %r", key)

    return SiteConfig(
        base_url=base_url,
        markdown=markdown,
        extra=_freeze(extra),
        **values,
    )


def load_config(project_root: Path) -> SiteConfig:
    """Load site configuration from config.toml.

    Args:
        project_root: Root directory of the project.

    Returns:
        The validated, immutable configuration.

    Raises:
        ConfigError: The file is missing, is not valid TOML, or fails validation.
    """
    config_path = project_root / CONFIG_FILENAME
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError("configuration file not found", config_path) from None
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML: {exc}", config_path) from exc
    return config_from_mapping(data, config_path)
