"""Protocol definitions for Quire.

These are the seams where a front matter format or a body renderer can be
swapped out without touching the parser or the build.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .renderers import Heading


@runtime_checkable
class MetadataFormat(Protocol):
    """A front matter serialization format.

    Attributes:
        name: Format identifier recorded on parsed documents (e.g. "toml").
        delimiter: The exact line that opens and closes a block.
    """

    name: str
    delimiter: str

    @abstractmethod
    def load(self, text: str) -> Mapping[str, Any]:
        """Deserialize the text between the delimiter lines.

        Args:
            text: Block contents, without the delimiter lines.

        Returns:
            The parsed mapping.

        Raises:
            MetadataSyntaxError: The text is not valid in this format. Its
                ``line`` is 1-based and relative to the block.
        """
        ...


@runtime_checkable
class ContentRenderer(Protocol):
    """Renders a document body to HTML."""

    @abstractmethod
    def render(self, content: str) -> tuple[str, list[Heading]]:
        """Render content to HTML.

        Args:
            content: Document body.

        Returns:
            Tuple of (rendered HTML, list of headings for TOC).
        """
        ...
