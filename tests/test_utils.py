from datetime import datetime
from pathlib import PurePosixPath

from quire import utils


def test_slugify_strips_date_prefix():
    assert utils.slugify("2024-01-02-post-title") == "post-title"
    assert utils.slugify("2024-01-02_post_title") == "post-title"
    assert utils.slugify("Mixed Case Slug") == "mixed-case-slug"
    assert utils.slugify("!!!") == "index"
    assert utils.slugify("2024-01-02") == "2024-01-02"
    assert utils.slugify("2024-01-02-kept", strip_date=False) == "2024-01-02-kept"


def test_extract_date_from_name():
    assert utils.extract_date_from_name("2024-01-15-cool") == datetime(2024, 1, 15)
    assert utils.extract_date_from_name("2024-01-15") == datetime(2024, 1, 15)
    assert utils.extract_date_from_name("invalid") is None
    assert utils.extract_date_from_name("2024-13-32-post") is None


def test_path_predicates():
    assert utils.is_markdown(PurePosixPath("post.MD"))
    assert not utils.is_markdown(PurePosixPath("post.txt"))
    assert utils.is_hidden_path(PurePosixPath(".drafts/post.md"))
    assert not utils.is_hidden_path(PurePosixPath("blog/_index.md"))
