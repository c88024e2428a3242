from pathlib import Path

import pytest

from exmachina import dependencies as deps
from exmachina.errors import PluginConfigError
from exmachina.repos.posts_repo import FilesystemPostsRepo
from exmachina.services.content_parser import ContentParser
from exmachina.services.markdown_pipeline import MarkdownPipeline
from exmachina.services.page_renderer import PageRenderer
from exmachina.services.posts_service import PostsService
from exmachina.services.static_assets import AssetStore
from exmachina.settings import Settings
from exmachina.site_config import site_config
from tests.conftest import make_site_config


@pytest.fixture
def patched_settings(monkeypatch, tmp_path):
    s = Settings(SITE_ROOT=str(tmp_path), PATH_PREFIX="/blog", INCLUDE_DRAFTS=True)
    monkeypatch.setattr(deps, "settings", s)
    return s


def test_site_config_is_the_blog_config():
    assert deps.get_site_config() is site_config
    assert site_config.siteMetadata.title == "Ex Machina"


def test_asset_store_uses_settings(patched_settings, tmp_path):
    store = deps.get_asset_store()
    assert isinstance(store, AssetStore)
    assert store.static_dir == tmp_path / "public" / "static"
    assert store.path_prefix == "/blog"


def test_pipeline_repo_and_parser_follow_config(patched_settings, tmp_path):
    config = make_site_config(transformer_plugins=["smartypants"])
    pipeline = deps.get_pipeline(config=config, assets=deps.get_asset_store())
    repo = deps.get_posts_repo(config=config)
    parser = deps.get_content_parser(config=config)

    assert isinstance(pipeline, MarkdownPipeline)
    assert [p.resolve for p in pipeline.plugins] == ["smartypants"]
    assert isinstance(repo, FilesystemPostsRepo)
    assert repo.root == tmp_path / "content" / "blog"
    assert isinstance(parser, ContentParser)
    assert parser.root == Path(tmp_path / "content" / "blog")


def test_posts_service_honors_include_drafts(patched_settings):
    service = deps.get_posts_service(repo=object(), parser=object(), pipeline=object())
    assert isinstance(service, PostsService)
    assert service.include_drafts is True
    assert service.strict is False


def test_page_renderer_for_full_site_config(patched_settings):
    pipeline = deps.get_pipeline(config=site_config, assets=deps.get_asset_store())
    renderer = deps.get_page_renderer(
        config=site_config,
        pipeline=pipeline,
        manifest=deps.get_manifest_service(config=site_config),
    )
    assert isinstance(renderer, PageRenderer)
    assert ".highlight" in renderer.code_css
    assert renderer.path_prefix == "/blog"
    # the icon is missing under the temporary site root
    assert renderer.manifest["favicon"] is None


def test_missing_blog_source_raises(patched_settings):
    config = make_site_config()
    config.plugins = [p for p in config.plugins if p.resolve != "source-filesystem"]
    with pytest.raises(PluginConfigError):
        deps.get_posts_repo(config=config)


def test_posts_services_share_the_process_render_cache(patched_settings, monkeypatch):
    monkeypatch.setattr(deps, "render_cache", {})
    first = deps.get_posts_service(repo=object(), parser=object(), pipeline=object())
    second = deps.get_posts_service(repo=object(), parser=object(), pipeline=object())
    assert first._rendered is deps.render_cache
    assert second._rendered is first._rendered


def test_manifest_service_follows_the_manifest_plugin(patched_settings):
    assert deps.get_manifest_service(config=make_site_config()) is None
    manifest = deps.get_manifest_service(config=site_config)
    assert manifest.path_prefix == "/blog"
