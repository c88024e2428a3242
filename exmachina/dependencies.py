from fastapi import Depends

from exmachina.repos.posts_repo import FilesystemPostsRepo
from exmachina.services.content_parser import ContentParser
from exmachina.services.markdown_pipeline import MarkdownPipeline
from exmachina.services.page_renderer import PageRenderer
from exmachina.services.posts_service import PostsService
from exmachina.services.site_builder import build_manifest_service, content_dir_for
from exmachina.services.static_assets import AssetStore
from exmachina.settings import settings
from exmachina.site_config import site_config

# Rendered markdown kept for the life of the preview process
render_cache = {}


def get_site_config():
    return site_config


def get_asset_store():
    return AssetStore(settings.static_path, settings.path_prefix)


def get_pipeline(config=Depends(get_site_config), assets=Depends(get_asset_store)):
    return MarkdownPipeline(config.transformer_plugins(), assets)


def get_posts_repo(config=Depends(get_site_config)):
    return FilesystemPostsRepo(content_dir_for(settings, config))


def get_content_parser(config=Depends(get_site_config)):
    return ContentParser(content_dir_for(settings, config))


def get_posts_service(
    repo=Depends(get_posts_repo),
    parser=Depends(get_content_parser),
    pipeline=Depends(get_pipeline),
):
    return PostsService(
        repo=repo,
        parser=parser,
        pipeline=pipeline,
        include_drafts=settings.INCLUDE_DRAFTS,
        render_cache=render_cache,
    )


def get_manifest_service(config=Depends(get_site_config)):
    return build_manifest_service(settings, config)


def get_page_renderer(
    config=Depends(get_site_config),
    pipeline=Depends(get_pipeline),
    manifest=Depends(get_manifest_service),
):
    return PageRenderer(
        config,
        path_prefix=settings.path_prefix,
        code_css=pipeline.stylesheet(),
        manifest=manifest.head_info() if manifest else None,
    )
