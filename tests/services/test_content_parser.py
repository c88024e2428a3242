from exmachina.services.content_parser import ContentParser


def test_inline_data_wins_over_file(tmp_path):
    (tmp_path / "a.md").write_text("from file")
    parser = ContentParser(tmp_path)
    assert parser.get_markdown_content({"_id": "a.md", "data": "inline"}) == "inline"


def test_reads_markdown_file_as_text(tmp_path):
    (tmp_path / "post").mkdir()
    (tmp_path / "post" / "index.md").write_text("# Título", encoding="utf-8")
    parser = ContentParser(tmp_path)
    doc = {"_id": "post/index.md", "path": "post/index.md"}
    assert parser.get_markdown_content(doc) == "# Título"
    assert parser.source_dir(doc) == tmp_path / "post"


def test_bytes_are_decoded_for_markdown(tmp_path):
    parser = ContentParser(tmp_path)
    assert parser.get_markdown_content({"_id": "x", "data": b"hi"}) == "hi"


def test_binary_content(tmp_path):
    (tmp_path / "img.png").write_bytes(b"\x89PNG")
    parser = ContentParser(tmp_path)
    assert parser.get_binary_content({"_id": "img.png"}) == b"\x89PNG"
    assert parser.get_binary_content({"_id": "x", "content": "text"}) == b"text"


def test_missing_file_logs_warning(tmp_path, caplog):
    parser = ContentParser(tmp_path)
    with caplog.at_level("WARNING"):
        assert parser.get_markdown_content({"_id": "gone.md"}) == ""
    assert "Content file vanished" in caplog.text
