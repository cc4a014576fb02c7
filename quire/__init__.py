"""Quire blog content pipeline.

Quire reads a blog's config.toml and its Markdown content, splits each
document into typed front matter and body, renders the body to HTML and
hands the resulting records to a static site engine for templating.

The main entry points are ``quire.frontmatter.parse`` for single documents
and ``quire.build.build_site`` for a whole content directory.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
