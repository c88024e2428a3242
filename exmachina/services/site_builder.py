import datetime
import logging
import shutil
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field

from exmachina.errors import BuildError, ContentError, PluginConfigError
from exmachina.repos.posts_repo import FilesystemPostsRepo
from exmachina.schemas.site import SiteConfig
from exmachina.services.content_parser import ContentParser
from exmachina.services.feed_service import FeedService
from exmachina.services.manifest_service import ManifestService
from exmachina.services.markdown_pipeline import MarkdownPipeline
from exmachina.services.page_renderer import PageRenderer
from exmachina.services.posts_service import PostsService, build_navigation
from exmachina.services.service_worker import (
    SW_FILENAME,
    render_service_worker,
    service_worker_mode,
)
from exmachina.services.static_assets import AssetStore
from exmachina.settings import Settings

logger = logging.getLogger(__name__)


class BuildResult(BaseModel):
    started_at: datetime.datetime = Field(default_factory=datetime.datetime.now)
    finished_at: datetime.datetime | None = None
    posts: int = 0
    pages: List[str] = Field(default_factory=list)
    files: List[str] = Field(default_factory=list)

    def summary_text(self) -> str:
        duration = ""
        if self.finished_at:
            duration = f" in {(self.finished_at - self.started_at).total_seconds():.1f}s"
        return f"Built {self.posts} posts, {len(self.pages)} pages, {len(self.files)} other files{duration}"


def content_dir_for(settings: Settings, site_config: SiteConfig) -> Path:
    path = site_config.source_path("blog")
    if not path:
        raise PluginConfigError("source-filesystem: no source named 'blog' configured")
    return settings.resolve(path)


def build_manifest_service(settings: Settings, site_config: SiteConfig) -> ManifestService | None:
    options = site_config.plugin_options("manifest")
    if options is None:
        return None
    icon = options.get("icon")
    return ManifestService(
        options,
        icon_path=settings.resolve(icon) if icon else None,
        path_prefix=settings.path_prefix,
    )


class SiteBuilder:
    def __init__(self, settings: Settings, site_config: SiteConfig):
        self.settings = settings
        self.site_config = site_config
        self.output_dir = settings.output_path
        content_dir = content_dir_for(settings, site_config)

        self.assets = AssetStore(settings.static_path, settings.path_prefix)
        self.pipeline = MarkdownPipeline(site_config.transformer_plugins(), self.assets)
        self.parser = ContentParser(content_dir)
        self.posts_service = PostsService(
            repo=FilesystemPostsRepo(content_dir),
            parser=self.parser,
            pipeline=self.pipeline,
            include_drafts=settings.INCLUDE_DRAFTS,
            strict=True,
        )
        self.manifest = build_manifest_service(settings, site_config)
        self.renderer = PageRenderer(
            site_config,
            path_prefix=settings.path_prefix,
            code_css=self.pipeline.stylesheet(),
            manifest=self.manifest.head_info() if self.manifest else None,
        )

    def clean(self) -> None:
        if self.output_dir.exists():
            shutil.rmtree(self.output_dir)
            logger.info(f"Removed {self.output_dir}")

    def _write(self, relative: str, text: str) -> Path:
        dest = self.output_dir / relative.lstrip("/")
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(text, encoding="utf-8")
        return dest

    def build(self, clean: bool = True) -> BuildResult:
        result = BuildResult()
        if clean:
            self.clean()
        self.posts_service.clear_cache()
        self.output_dir.mkdir(parents=True, exist_ok=True)

        try:
            posts = self.posts_service.list_posts()
            details = []
            for summary in posts:
                post = self.posts_service.get_post(summary.slug)
                if post is None:
                    raise BuildError(f"Post {summary.slug} disappeared during the build")
                details.append(post)
        except ContentError as e:
            raise BuildError(f"Content error in {e.source or 'content'}: {e}") from e

        result.posts = len(details)
        navigation = build_navigation(posts)

        self._write("index.html", self.renderer.render_index(posts))
        result.pages.append("/")
        for post in details:
            html = self.renderer.render_post(post, navigation[post.slug])
            self._write(f"{post.slug}index.html", html)
            result.pages.append(post.slug)
            logger.debug(f"Wrote {post.slug}")

        self._write("404.html", self.renderer.render_not_found())
        result.files.append("404.html")

        feed_options = self.site_config.plugin_options("feed")
        if feed_options is not None:
            feed = FeedService(
                self.renderer.env,
                self.site_config.siteMetadata,
                feed_options,
                path_prefix=self.settings.path_prefix,
            )
            self._write(feed.output, feed.render(details))
            result.files.append(feed.output.lstrip("/"))

        if self.manifest is not None:
            for path in self.manifest.write(self.output_dir):
                result.files.append(path.relative_to(self.output_dir).as_posix())

        mode = service_worker_mode(self.site_config)
        if mode is not None:
            precache = [f"{self.settings.path_prefix}{page}" for page in result.pages]
            self._write(SW_FILENAME, render_service_worker(self.renderer.env, mode, precache))
            result.files.append(SW_FILENAME)

        result.finished_at = datetime.datetime.now()
        logger.info(result.summary_text())
        return result
