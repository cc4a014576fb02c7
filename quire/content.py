"""Content processing for Quire.

This module holds the records handed to the downstream site engine and the
machinery that produces them from the ``content/`` directory.

Key classes:
- ContentDocument: Immutable front matter + body record for one document.
- Page: A parsed, rendered document with its URL.
- DocumentError: A per-document failure collected during a batch.
- FileContentLoader: Discovers Markdown files under the content directory.
- ContentProcessor: Reads, parses and renders documents into Pages.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .utils import extract_date_from_name, is_hidden_path, is_markdown, slugify
from .values import (
    BooleanValue,
    IntegerValue,
    ListValue,
    MetadataValue,
    StringValue,
    TableValue,
    TimestampValue,
    to_json,
)

if TYPE_CHECKING:
    from .frontmatter import FrontMatterParser
    from .protocols import ContentRenderer
    from .renderers import Heading

logger = logging.getLogger(__name__)

SECTION_FILENAME = "_index.md"


@dataclass(frozen=True)
class ContentDocument:
    """One content document split into typed metadata and raw body.

    Attributes:
        metadata: Read-only mapping of front matter keys to typed values.
        body: Document text after the front matter, byte-for-byte.
        source: Identifier of the document, usually its path relative to
            the content directory.
        format: "toml" or "yaml" when a front matter block was present.

    Metadata takes part in equality but not in the hash.
    """

    metadata: Mapping[str, MetadataValue] = field(default_factory=dict, hash=False)
    body: str = ""
    source: str | None = None
    format: str | None = None

    def __post_init__(self):
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def get(self, key: str) -> MetadataValue | None:
        return self.metadata.get(key)

    def _string(self, key: str) -> str | None:
        match self.metadata.get(key):
            case StringValue(value=text):
                return text
        return None

    def _timestamp(self, key: str) -> datetime | date | time | None:
        match self.metadata.get(key):
            case TimestampValue(value=stamp):
                return stamp
            case StringValue(value=text):
                # YAML leaves some date spellings as strings
                try:
                    return datetime.fromisoformat(text)
                except ValueError:
                    return None
        return None

    @property
    def title(self) -> str | None:
        return self._string("title")

    @property
    def description(self) -> str | None:
        return self._string("description")

    @property
    def slug(self) -> str | None:
        return self._string("slug")

    @property
    def date(self) -> datetime | date | time | None:
        return self._timestamp("date")

    @property
    def updated(self) -> datetime | date | time | None:
        return self._timestamp("updated")

    @property
    def draft(self) -> bool:
        match self.metadata.get("draft"):
            case BooleanValue(value=flag):
                return flag
        return False

    @property
    def weight(self) -> int | None:
        match self.metadata.get("weight"):
            case IntegerValue(value=weight):
                return weight
        return None

    @property
    def tags(self) -> list[str]:
        """Tags from ``[taxonomies] tags`` or a top-level ``tags`` list."""
        match self.metadata.get("taxonomies"):
            case TableValue() as taxonomies:
                match taxonomies.get("tags"):
                    case ListValue() as tags:
                        return tags.strings()
        match self.metadata.get("tags"):
            case ListValue() as tags:
                return tags.strings()
        return []

    @property
    def extra(self) -> Mapping[str, MetadataValue]:
        match self.metadata.get("extra"):
            case TableValue(entries=entries):
                return entries
        return MappingProxyType({})

    def metadata_json(self) -> dict[str, Any]:
        """Return the metadata as JSON-compatible objects."""
        return {key: to_json(value) for key, value in self.metadata.items()}


@dataclass
class Page:
    """A document ready for the site engine.

    Attributes:
        document: The parsed document.
        content: Body rendered to HTML.
        toc: Headings found in the body, in order.
        path: Path of the source file relative to the content directory.
        slug: URL-friendly slug.
        url: URL path for the page.
        is_section: Whether the file is a section index (``_index.md``).
        date: Front matter date, falling back to a YYYY-MM-DD filename prefix.
    """

    document: ContentDocument
    content: str
    path: PurePosixPath
    slug: str
    url: str
    is_section: bool = False
    date: datetime | date | time | None = None
    toc: list[Heading] = field(default_factory=list)

    @property
    def title(self) -> str | None:
        return self.document.title

    def to_json(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "source": self.path.as_posix(),
            "slug": self.slug,
            "section": self.is_section,
            "date": self.date.isoformat() if self.date is not None else None,
            "metadata": self.document.metadata_json(),
            "content": self.content,
            "toc": [
                {"id": h.id, "text": h.text, "level": h.level} for h in self.toc
            ],
        }


@dataclass
class DocumentError:
    """A document that failed to load.

    Attributes:
        path: Path of the source file relative to the content directory.
        error: The exception raised while loading it.
    """

    path: PurePosixPath
    error: Exception

    @property
    def message(self) -> str:
        message = getattr(self.error, "message", None)
        if message is None:
            return f"{type(self.error).__name__}: {self.error}"
        return message

    @property
    def line(self) -> int | None:
        return getattr(self.error, "line", None)


class FileContentLoader:
    """Discovers content files under a directory.

    Attributes:
        content_dir: Directory containing Markdown content.
    """

    def __init__(self, content_dir: Path):
        self.content_dir = content_dir

    def iter_files(self) -> list[Path]:
        """Return Markdown files in a stable (sorted) order.

        Hidden files and anything inside a hidden directory are skipped.
        """
        files: list[Path] = []
        for path in sorted(self.content_dir.rglob("*")):
            if path.is_dir():
                continue
            rel = path.relative_to(self.content_dir)
            if is_hidden_path(rel):
                continue
            if is_markdown(path):
                files.append(path)
        return files


def page_slug(rel: PurePosixPath, document: ContentDocument) -> str:
    """Resolve the slug for a document.

    Front matter ``slug`` wins. Section indexes and ``index.md`` take the
    name of their directory; other files use their filename stem.
    """
    if document.slug:
        return slugify(document.slug, strip_date=False)
    if rel.name in (SECTION_FILENAME, "index.md"):
        parent = rel.parent.name
        return slugify(parent) if parent else ""
    return slugify(rel.stem)


def page_url(rel: PurePosixPath, slug: str) -> str:
    """Build the URL path for a document.

    ``content/_index.md`` is ``/``; ``content/blog/_index.md`` is ``/blog/``;
    ``content/blog/post.md`` is ``/blog/<slug>/``.
    """
    if rel.name in (SECTION_FILENAME, "index.md"):
        parents = list(rel.parent.parts[:-1])
    else:
        parents = list(rel.parent.parts)
    parts = [slugify(part) for part in parents]
    if slug:
        parts.append(slug)
    if not parts:
        return "/"
    return "/" + "/".join(parts) + "/"


class ContentProcessor:
    """Turns content files into Pages.

    Each file is read, parsed and rendered on its own; failures are
    collected rather than raised so one broken document does not stop the
    others.

    Attributes:
        content_dir: Directory containing Markdown content.
        renderer: Renders document bodies to HTML.
        parser: Front matter parser.
    """

    def __init__(
        self,
        content_dir: Path,
        renderer: ContentRenderer,
        parser: FrontMatterParser | None = None,
    ):
        # Import here to avoid circular imports
        from .frontmatter import default_parser

        self.content_dir = content_dir
        self.renderer = renderer
        self.parser = parser or default_parser
        self.loader = FileContentLoader(content_dir)

    def load(
        self, include_drafts: bool = False, workers: int = 1
    ) -> tuple[list[Page], list[DocumentError]]:
        """Load every content file.

        Args:
            include_drafts: Keep documents with ``draft = true``.
            workers: Number of threads to process files with.

        Returns:
            Tuple of (pages in discovery order, errors in discovery order).
        """
        files = self.loader.iter_files()
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outcomes = list(pool.map(self._try_process, files))
        else:
            outcomes = [self._try_process(path) for path in files]

        pages: list[Page] = []
        errors: list[DocumentError] = []
        for outcome in outcomes:
            if isinstance(outcome, DocumentError):
                errors.append(outcome)
            elif outcome.document.draft and not include_drafts:
                logger.debug("Skipping draft %s", outcome.path)
            else:
                pages.append(outcome)
        return pages, errors

    def _try_process(self, path: Path) -> Page | DocumentError:
        from .frontmatter import FrontMatterError

        rel = PurePosixPath(path.relative_to(self.content_dir).as_posix())
        try:
            return self.process(path)
        except (FrontMatterError, UnicodeDecodeError, OSError) as exc:
            logger.debug("Failed to load %s: %s", rel, exc)
            return DocumentError(path=rel, error=exc)

    def process(self, path: Path) -> Page:
        """Read, parse and render a single file.

        Raises:
            FrontMatterError: The front matter is malformed.
            UnicodeDecodeError: The file is not valid UTF-8.
        """
        rel = PurePosixPath(path.relative_to(self.content_dir).as_posix())
        raw = path.read_bytes().decode("utf-8")
        document = self.parser.parse(raw, source=rel.as_posix())
        return self.build_page(document, rel)

    def build_page(self, document: ContentDocument, rel: PurePosixPath) -> Page:
        html, toc = self.renderer.render(document.body)
        slug = page_slug(rel, document)
        date_value = document.date
        if date_value is None:
            date_value = extract_date_from_name(rel.stem)
        return Page(
            document=document,
            content=html,
            path=rel,
            slug=slug,
            url=page_url(rel, slug),
            is_section=rel.name == SECTION_FILENAME,
            date=date_value,
            toc=toc,
        )


def iter_errors(errors: Iterable[DocumentError]) -> Iterable[str]:
    """Format collected errors as ``path:line: message`` strings."""
    for error in errors:
        location = error.path.as_posix()
        if error.line is not None:
            location = f"{location}:{error.line}"
        yield f"{location}: {error.message}"
