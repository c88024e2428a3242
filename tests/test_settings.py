from pathlib import Path

from exmachina.settings import Settings, choose_env_file


def test_output_and_static_paths_are_relative_to_site_root():
    s = Settings(SITE_ROOT="/srv/blog", OUTPUT_DIR="public")
    assert s.output_path == Path("/srv/blog/public")
    assert s.static_path == Path("/srv/blog/public/static")


def test_absolute_output_dir_is_kept():
    s = Settings(SITE_ROOT="/srv/blog", OUTPUT_DIR="/tmp/out")
    assert s.output_path == Path("/tmp/out")


def test_path_prefix_is_normalized():
    assert Settings(PATH_PREFIX="").path_prefix == ""
    assert Settings(PATH_PREFIX="blog").path_prefix == "/blog"
    assert Settings(PATH_PREFIX="/blog/").path_prefix == "/blog"


def test_resolve_uses_site_root():
    s = Settings(SITE_ROOT="/srv/blog")
    assert s.resolve("content/blog") == Path("/srv/blog/content/blog")
    assert s.resolve("/abs/path") == Path("/abs/path")


def test_choose_env_file_prefers_env_local(monkeypatch):
    monkeypatch.setattr(Path, "exists", lambda self: str(self) == ".env.local")
    assert choose_env_file() == ".env.local"


def test_choose_env_file_falls_back(monkeypatch):
    monkeypatch.setattr(Path, "exists", lambda self: False)
    assert choose_env_file() == ".env"
