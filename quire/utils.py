"""Utility functions for Quire.

Key functions:
    slugify: Convert filenames to URL slugs.
    extract_date_from_name: Extract date from filename prefix.
    is_markdown: Check if a path is a Markdown file.
    is_hidden_path: Check if a path has a dot-prefixed component.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import PurePath

_DATE_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[-_](.*))?$")


def slugify(name: str, strip_date: bool = True) -> str:
    """Convert a filename stem to a slug.

    Args:
        name: Filename stem or free text.
        strip_date: Drop a leading YYYY-MM-DD- (or YYYY-MM-DD_) prefix.

    Returns:
        URL-friendly slug, or "index" when nothing usable is left.

    Examples:
        >>> slugify("2024-01-15-Hello World")
        'hello-world'
    """
    cleaned = name
    if strip_date:
        match = _DATE_PREFIX_RE.match(cleaned)
        if match and match.group(4):
            cleaned = match.group(4)
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def extract_date_from_name(name: str) -> datetime | None:
    """Extract a date from a filename with a YYYY-MM-DD prefix.

    Args:
        name: Filename stem (without extension).

    Returns:
        datetime if a valid date prefix is found, None otherwise.

    Examples:
        >>> extract_date_from_name("2024-01-15-hello-world")
        datetime.datetime(2024, 1, 15, 0, 0)

        >>> extract_date_from_name("hello-world")
    """
    match = _DATE_PREFIX_RE.match(name)
    if not match:
        return None
    try:
        return datetime(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def is_markdown(path: PurePath) -> bool:
    """Check if a path is a Markdown file (case-insensitive .md)."""
    return path.suffix.lower() == ".md"


def is_hidden_path(path: PurePath) -> bool:
    """Check if any component of a relative path starts with a dot."""
    return any(part.startswith(".") for part in path.parts)
