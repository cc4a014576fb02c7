import json
import logging
from pathlib import Path

import pytest

from quire.build import BuildError, BuildResult, build_site, write_manifest
from quire.config import MarkdownConfig, SiteConfig


def create_project(tmp_path: Path) -> Path:
    content = tmp_path / "content" / "blog"
    content.mkdir(parents=True)
    (tmp_path / "content" / "_index.md").write_text(
        '+++\ntitle = "Home"\n+++\n', encoding="utf-8"
    )
    (content / "first.md").write_text(
        '+++\ntitle = "First"\ndate = 2024-01-01\n+++\n'
        "```rust\nfn main() {}\n```\n",
        encoding="utf-8",
    )
    (content / "untitled.md").write_text("Just text.\n", encoding="utf-8")
    (content / "draft.md").write_text(
        '+++\ntitle = "Draft"\ndraft = true\n+++\n', encoding="utf-8"
    )
    (content / "broken.md").write_text('+++\ntitle = "x"\n', encoding="utf-8")
    return tmp_path


def make_config(highlight: bool = False) -> SiteConfig:
    return SiteConfig(
        base_url="https://example.com",
        title="Example",
        markdown=MarkdownConfig(highlight_code=highlight, highlight_theme="monokai"),
    )


def test_build_collects_all_errors_without_aborting(tmp_path):
    project = create_project(tmp_path)
    result = build_site(make_config(), project)
    assert isinstance(result, BuildResult)
    assert not result.ok
    assert [e.path.as_posix() for e in result.errors] == ["blog/broken.md"]
    urls = [p.url for p in result.pages]
    assert urls == ["/", "/blog/first/", "/blog/untitled/"]


def test_build_includes_drafts(tmp_path):
    project = create_project(tmp_path)
    result = build_site(make_config(), project, include_drafts=True, workers=3)
    assert "/blog/draft/" in [p.url for p in result.pages]


def test_build_uses_markdown_config(tmp_path):
    project = create_project(tmp_path)
    plain = build_site(make_config(highlight=False), project)
    highlighted = build_site(make_config(highlight=True), project)
    first_plain = next(p for p in plain.pages if p.slug == "first")
    first_hl = next(p for p in highlighted.pages if p.slug == "first")
    assert 'class="language-rust"' in first_plain.content
    assert 'class="highlight"' in first_hl.content


def test_build_logs_missing_titles_and_errors(tmp_path, caplog):
    project = create_project(tmp_path)
    with caplog.at_level(logging.INFO, logger="quire.build"):
        result = build_site(make_config(), project)
    assert "blog/untitled.md has no title" in caplog.text
    assert "Built 3 pages with 1 errors" in caplog.text
    # errors are returned for the caller to report, not logged a second time
    assert [e.path.as_posix() for e in result.errors] == ["blog/broken.md"]
    assert "blog/broken.md" not in caplog.text


def test_clean_build_is_ok(tmp_path):
    content = tmp_path / "content"
    content.mkdir()
    (content / "about.md").write_text('+++\ntitle = "About"\n+++\nHi\n', encoding="utf-8")
    result = build_site(make_config(), tmp_path)
    assert result.ok
    assert result.pages[0].url == "/about/"


def test_missing_content_dir(tmp_path):
    with pytest.raises(BuildError) as excinfo:
        build_site(make_config(), tmp_path)
    assert excinfo.value.path == tmp_path / "content"


def test_write_manifest(tmp_path):
    project = create_project(tmp_path)
    result = build_site(make_config(), project)
    target = tmp_path / "out" / "manifest.json"
    write_manifest(result, target)
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["site"]["base_url"] == "https://example.com"
    first = next(p for p in data["pages"] if p["url"] == "/blog/first/")
    assert first["metadata"] == {"title": "First", "date": "2024-01-01"}
    assert first["source"] == "blog/first.md"
    assert "fn main" in first["content"]
