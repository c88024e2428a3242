from fastapi import FastAPI
from fastapi.testclient import TestClient

from exmachina.routers import static


def make_app(root):
    app = FastAPI()
    app.dependency_overrides[static.get_static_root] = lambda: root
    app.include_router(static.router)
    return app


def test_serves_published_asset(tmp_path):
    (tmp_path / "abc").mkdir()
    (tmp_path / "abc" / "pic.png").write_bytes(b"\x89PNG data")
    client = TestClient(make_app(tmp_path))

    res = client.get("/static/abc/pic.png")
    assert res.status_code == 200
    assert res.headers["content-type"] == "image/png"
    assert res.headers["content-length"] == str(len(b"\x89PNG data"))
    assert res.content == b"\x89PNG data"


def test_missing_asset_returns_404(tmp_path):
    client = TestClient(make_app(tmp_path))

    res = client.get("/static/abc/none.png")
    assert res.status_code == 404
    assert res.json()["detail"] == "Asset not found"


def test_paths_outside_static_root_are_rejected(tmp_path):
    root = tmp_path / "static"
    root.mkdir()
    (tmp_path / "secret.txt").write_text("nope")
    client = TestClient(make_app(root))

    res = client.get("/static/%2E%2E/secret.txt")
    assert res.status_code == 404


def test_directories_are_not_served(tmp_path):
    (tmp_path / "abc").mkdir()
    client = TestClient(make_app(tmp_path))

    res = client.get("/static/abc")
    assert res.status_code == 404
