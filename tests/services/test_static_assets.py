from exmachina.services.static_assets import AssetStore, content_digest


def test_publish_file_is_content_addressed(tmp_path):
    source = tmp_path / "notes.txt"
    source.write_text("hello")
    store = AssetStore(tmp_path / "static", "/blog")

    url = store.publish_file(source)

    digest = content_digest(b"hello")
    assert url == f"/blog/static/{digest}/notes.txt"
    assert (tmp_path / "static" / digest / "notes.txt").read_text() == "hello"
    assert store.exists(digest, "notes.txt")


def test_publish_bytes_does_not_overwrite(tmp_path):
    store = AssetStore(tmp_path / "static")
    store.publish_bytes("abc", "a.bin", b"first")
    store.publish_bytes("abc", "a.bin", b"second")
    assert store.path_for("abc", "a.bin").read_bytes() == b"first"
    assert store.url_for("abc", "a.bin") == "/static/abc/a.bin"
