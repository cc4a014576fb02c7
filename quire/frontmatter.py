"""Front matter parsing for Quire.

A content document may open with a metadata block fenced by a delimiter
line. ``+++`` fences TOML (the format the site generator uses natively)
and ``---`` fences YAML:

    +++
    title = "Hello"
    date = 2024-01-15
    +++
    Body text

The parser is a single left-to-right pass over the lines of the document:
it looks for the opening delimiter on the first line, then for the
matching closing delimiter. It performs no I/O and keeps no state between
calls, so documents can be parsed concurrently.

Key classes:
- FrontMatterParser: Splits a document into typed metadata and body.
- TomlFormat / YamlFormat: Metadata block deserializers.
- FrontMatterError: Base class for MalformedFrontMatter and InvalidMetadataSyntax.
"""

from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

import yaml

from .content import ContentDocument
from .values import MetadataValue, wrap_mapping

if TYPE_CHECKING:
    from .protocols import MetadataFormat

BOM = "\ufeff"
_TOML_LINE_RE = re.compile(r"at line (\d+)")
_TOML_POSITION_RE = re.compile(r"\s*\((?:at line \d+, column \d+|at end of document)\)$")


class FrontMatterError(Exception):
    """Error while parsing a document's front matter.

    Attributes:
        source: Identifier of the document (usually its relative path).
        message: Human-readable error message.
        line: 1-based line number in the document, if known.
    """

    def __init__(self, message: str, source: str | None = None, line: int | None = None):
        self.source = source
        self.message = message
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        location = self.source or "<string>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"


class MalformedFrontMatter(FrontMatterError):
    """Opening delimiter found but the block is never closed."""


class InvalidMetadataSyntax(FrontMatterError):
    """The metadata block does not deserialize."""


class MetadataSyntaxError(ValueError):
    """Raised by a metadata format; ``line`` is relative to the block."""

    def __init__(self, message: str, line: int | None = None):
        self.message = message
        self.line = line
        super().__init__(message)


class TomlFormat:
    """TOML metadata fenced by ``+++``."""

    name = "toml"
    delimiter = "+++"

    def load(self, text: str) -> Mapping[str, Any]:
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise MetadataSyntaxError(_toml_message(exc), _toml_line(exc, text)) from exc


class YamlFormat:
    """YAML metadata fenced by ``---``."""

    name = "yaml"
    delimiter = "---"

    def load(self, text: str) -> Mapping[str, Any]:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
            line = mark.line + 1 if mark is not None else None
            problem = getattr(exc, "problem", None) or str(exc)
            raise MetadataSyntaxError(f"Invalid YAML: {problem}", line) from exc
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise MetadataSyntaxError(
                f"Front matter must be a mapping, got {type(data).__name__}", 1
            )
        return data


def _toml_message(exc: tomllib.TOMLDecodeError) -> str:
    msg = getattr(exc, "msg", None) or _TOML_POSITION_RE.sub("", str(exc))
    return f"Invalid TOML: {msg}"


def _toml_line(exc: tomllib.TOMLDecodeError, text: str) -> int | None:
    lineno = getattr(exc, "lineno", None)
    if lineno is not None:
        return lineno
    match = _TOML_LINE_RE.search(str(exc))
    if match:
        return int(match.group(1))
    if "end of document" in str(exc):
        return max(text.count("\n"), 1)
    return None


DEFAULT_FORMATS: tuple[MetadataFormat, ...] = (TomlFormat(), YamlFormat())


def _split_lines(raw: str) -> list[str]:
    """Split on ``\\n`` only, keeping the terminators.

    ``str.splitlines`` also breaks on characters such as U+2028 and form
    feed, which may legally appear inside TOML strings and comments.
    """
    parts = raw.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _is_delimiter(line: str, delimiter: str) -> bool:
    """Check whether a line (with its terminator) is exactly the delimiter.

    Trailing spaces and tabs are tolerated, as are ``\\n`` and ``\\r\\n``.
    """
    return line.rstrip("\r\n").rstrip(" \t") == delimiter


class FrontMatterParser:
    """Splits raw document text into a ContentDocument.

    Args:
        formats: Metadata formats to recognise, tried in order against the
            first line of the document. Defaults to TOML then YAML.
    """

    def __init__(self, formats: Sequence[MetadataFormat] | None = None):
        self.formats = tuple(formats) if formats is not None else DEFAULT_FORMATS

    def parse(self, raw: str, source: str | None = None) -> ContentDocument:
        """Parse a document.

        Args:
            raw: Full document text.
            source: Identifier used in error messages and kept on the document.

        Returns:
            ContentDocument with typed metadata and the untouched body.

        Raises:
            MalformedFrontMatter: The block is opened but never closed.
            InvalidMetadataSyntax: The block does not deserialize.
        """
        lines = _split_lines(raw)
        if not lines:
            return ContentDocument(metadata={}, body=raw, source=source)

        first = lines[0]
        if first.startswith(BOM):
            first = first[len(BOM):]
        fmt = self._detect(first)
        if fmt is None:
            return ContentDocument(metadata={}, body=raw, source=source)

        # offset of the first character after the opening delimiter line
        offset = len(lines[0])
        for index in range(1, len(lines)):
            line = lines[index]
            if _is_delimiter(line, fmt.delimiter):
                block = "".join(lines[1:index])
                body = raw[offset + len(line):]
                metadata = self._load(fmt, block, source)
                return ContentDocument(
                    metadata=metadata, body=body, source=source, format=fmt.name
                )
            offset += len(line)

        raise MalformedFrontMatter(
            f"Unterminated front matter: no closing '{fmt.delimiter}' line",
            source=source,
            line=1,
        )

    def _detect(self, first_line: str) -> MetadataFormat | None:
        for fmt in self.formats:
            if _is_delimiter(first_line, fmt.delimiter):
                return fmt
        return None

    def _load(
        self, fmt: MetadataFormat, block: str, source: str | None
    ) -> Mapping[str, MetadataValue]:
        try:
            data = fmt.load(block)
        except MetadataSyntaxError as exc:
            # block line 1 is document line 2
            line = exc.line + 1 if exc.line is not None else None
            raise InvalidMetadataSyntax(exc.message, source=source, line=line) from exc
        try:
            return wrap_mapping(data)
        except TypeError as exc:
            raise InvalidMetadataSyntax(str(exc), source=source, line=None) from exc


default_parser = FrontMatterParser()


def parse(raw: str, source: str | None = None) -> ContentDocument:
    """Parse a document with the default TOML/YAML parser."""
    return default_parser.parse(raw, source)
