"""Site building functionality for Quire.

A build walks the ``content/`` directory, parses every document's front
matter, renders the bodies and returns the resulting pages together with
every per-document error. Errors never stop the pass: a broken document is
left out and reported, the rest are built.

Key functions:
- build_site: Build every content document under a project root.
- write_manifest: Write the built pages as JSON for the site engine.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .config import SiteConfig
from .content import ContentProcessor, DocumentError, Page
from .renderers import MarkdownRenderer

logger = logging.getLogger(__name__)

CONTENT_DIRNAME = "content"


class BuildError(Exception):
    """Error that prevents a build from running at all.

    Attributes:
        path: Path involved in the failure.
        message: Human-readable error message.
    """

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


@dataclass
class BuildResult:
    """Result of a build.

    Attributes:
        config: Configuration the build ran with.
        pages: Successfully built pages, in discovery order.
        errors: Documents that failed, in discovery order.
    """

    config: SiteConfig
    pages: list[Page] = field(default_factory=list)
    errors: list[DocumentError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def build_site(
    config: SiteConfig,
    project_root: Path,
    include_drafts: bool = False,
    workers: int = 1,
) -> BuildResult:
    """Build every content document under ``project_root/content``.

    Args:
        config: Site configuration, loaded once by the caller.
        project_root: Root directory of the project.
        include_drafts: Keep documents marked ``draft = true``.
        workers: Number of threads used to process documents.

    Returns:
        BuildResult with the pages and the collected document errors.

    Raises:
        BuildError: The content directory does not exist.
    """
    content_dir = project_root / CONTENT_DIRNAME
    if not content_dir.is_dir():
        raise BuildError(content_dir, "content directory not found")

    renderer = MarkdownRenderer(config.markdown)
    processor = ContentProcessor(content_dir, renderer)
    pages, errors = processor.load(include_drafts=include_drafts, workers=workers)

    for page in pages:
        if not page.title and not page.is_section:
            logger.warning("%s has no title", page.path)
    logger.info("Built %d pages with %d errors", len(pages), len(errors))
    return BuildResult(config=config, pages=pages, errors=errors)


def write_manifest(result: BuildResult, path: Path) -> None:
    """Write the built pages as a JSON manifest.

    Args:
        result: A finished build.
        path: Destination file; parent directories are created.
    """
    payload = {
        "site": result.config.to_dict(),
        "pages": [page.to_json() for page in result.pages],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False, default=str)
        f.write("\n")
