import pytest

from exmachina.errors import ContentError
from exmachina.repos.posts_repo import FilesystemPostsRepo, normalize_slug, slug_for_path


@pytest.mark.parametrize(
    "relative, slug",
    [
        ("hello-world/index.md", "/hello-world/"),
        ("notes.md", "/notes/"),
        ("2020/deep/post.markdown", "/2020/deep/post/"),
        ("index.md", "/"),
    ],
)
def test_slug_for_path(relative, slug):
    assert slug_for_path(relative) == slug


def test_normalize_slug_accepts_loose_forms():
    assert normalize_slug("hello") == "/hello/"
    assert normalize_slug("/hello") == "/hello/"
    assert normalize_slug("/hello/") == "/hello/"
    assert normalize_slug("") == "/"


def test_list_blog_docs_finds_markdown_and_skips_hidden(tmp_path):
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "index.md").write_text("# a")
    (tmp_path / "a" / "figure.png").write_bytes(b"png")
    (tmp_path / "b.md").write_text("# b")
    (tmp_path / "_drafts").mkdir()
    (tmp_path / "_drafts" / "c.md").write_text("# c")
    (tmp_path / ".hidden.md").write_text("# hidden")

    docs = FilesystemPostsRepo(tmp_path).list_blog_docs()

    assert docs == [
        {"_id": "a/index.md", "path": "a/index.md", "slug": "/a/"},
        {"_id": "b.md", "path": "b.md", "slug": "/b/"},
    ]


def test_duplicate_slugs_raise(tmp_path):
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "index.md").write_text("# one")
    (tmp_path / "a.md").write_text("# two")

    with pytest.raises(ContentError) as exc:
        FilesystemPostsRepo(tmp_path).list_blog_docs()
    assert "/a/" in str(exc.value)


def test_missing_directory_logs_and_returns_empty(tmp_path, caplog):
    repo = FilesystemPostsRepo(tmp_path / "nope")
    with caplog.at_level("WARNING"):
        assert repo.list_blog_docs() == []
    assert "Content directory not found" in caplog.text


def test_get_blog_doc_by_loose_slug(tmp_path):
    (tmp_path / "b.md").write_text("# b")
    repo = FilesystemPostsRepo(tmp_path)
    assert repo.get_blog_doc("b")["_id"] == "b.md"
    assert repo.get_blog_doc("/missing/") is None


def test_root_index_is_reserved_for_the_listing(tmp_path):
    (tmp_path / "index.md").write_text("# root")
    (tmp_path / "other").mkdir()
    (tmp_path / "other" / "index.md").write_text("# other")

    with pytest.raises(ContentError) as exc:
        FilesystemPostsRepo(tmp_path).list_blog_docs()
    assert exc.value.source == "index.md"
