"""Command-line interface for Quire.

Commands:
- build: Parse and render every content document, reporting all errors.
- check: Parse individual files and print their front matter as JSON.
- config: Print the resolved site configuration.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path, PurePosixPath

import click

from . import __version__
from .config import ConfigError, SiteConfig, load_config

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@click.group()
@click.version_option(version=__version__, prog_name="quire")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-vv for debug)")
def cli(verbose: int):
    """Quire blog content pipeline."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _root_option(func):
    return click.option(
        "--root",
        "root",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Project root containing config.toml (defaults to the current directory)",
    )(func)


def _load(root: Path | None) -> tuple[Path, SiteConfig]:
    project_root = (root or Path.cwd()).resolve()
    try:
        return project_root, load_config(project_root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None


@cli.command()
@_root_option
@click.option("--drafts", is_flag=True, help="Include draft content")
@click.option("--workers", type=click.IntRange(min=1), default=1, show_default=True,
              help="Threads used to process documents")
@click.option("--manifest", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write built pages as a JSON manifest")
def build(root: Path | None, drafts: bool, workers: int, manifest: Path | None):
    """Build every document under content/."""
    from .build import BuildError, build_site, write_manifest

    project_root, config = _load(root)
    try:
        result = build_site(config, project_root, include_drafts=drafts, workers=workers)
    except BuildError as exc:
        raise click.ClickException(str(exc)) from None

    if manifest is not None:
        write_manifest(result, manifest)
        click.echo(f"Wrote manifest to {manifest}")
    click.echo(f"Built {len(result.pages)} pages for {config.base_url}")

    if result.errors:
        _report_errors(result.errors)
        raise SystemExit(1)


@cli.command()
@click.argument("files", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
def check(files: tuple[Path, ...]):
    """Parse FILES and print their front matter as JSON."""
    from .content import DocumentError
    from .frontmatter import FrontMatterError, parse

    errors: list[DocumentError] = []
    output = {}
    for path in files:
        source = path.as_posix()
        try:
            document = parse(path.read_bytes().decode("utf-8"), source=source)
        except (FrontMatterError, UnicodeDecodeError) as exc:
            errors.append(DocumentError(path=PurePosixPath(source), error=exc))
            continue
        output[source] = {"format": document.format, "metadata": document.metadata_json()}

    click.echo(json.dumps(output, indent=2, ensure_ascii=False))
    if errors:
        _report_errors(errors)
        raise SystemExit(1)


@cli.command(name="config")
@_root_option
def show_config(root: Path | None):
    """Print the resolved site configuration."""
    _, config = _load(root)
    click.echo(json.dumps(config.to_dict(), indent=2, ensure_ascii=False, default=str))


def _report_errors(errors) -> None:
    """Print collected document errors to stderr."""
    from .content import iter_errors

    noun = "document" if len(errors) == 1 else "documents"
    click.echo(click.style(f"{len(errors)} {noun} failed:", fg="red", bold=True), err=True)
    for line in iter_errors(errors):
        click.echo(click.style(f"  {line}", fg="yellow"), err=True)


def main():
    """Entry point for the CLI application."""
    cli()
