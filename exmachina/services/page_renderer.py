import importlib
import logging
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from exmachina import components
from exmachina.errors import PluginConfigError
from exmachina.schemas.blog import NavigationContext, PostDetail, PostSummary
from exmachina.schemas.site import SiteConfig

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
DEFAULT_TYPOGRAPHY_MODULE = "exmachina.typography"


def load_typography(site_config: SiteConfig):
    """The typography singleton exported by the module the config points at."""
    options = site_config.plugin_options("typography")
    if options is None:
        return None
    module_name = options.get("pathToConfigModule") or DEFAULT_TYPOGRAPHY_MODULE
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise PluginConfigError(f"typography: cannot import {module_name}: {e}") from e
    typography = getattr(module, "typography", None)
    if typography is None:
        raise PluginConfigError(f"typography: {module_name} exports no `typography`")
    return typography


def build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals.update(
        time_to_read_label=components.time_to_read_label,
        format_post_date=components.format_post_date,
        display_title=components.display_title,
        document_title=components.document_title,
        seo_meta=components.seo_meta,
        social_links=components.social_links,
        page_url=components.page_url,
    )
    return env


class PageRenderer:
    def __init__(
        self,
        site_config: SiteConfig,
        path_prefix: str = "",
        code_css: str = "",
        manifest: Optional[dict] = None,
    ):
        self.site_config = site_config
        self.site = site_config.siteMetadata
        self.path_prefix = path_prefix
        self.code_css = code_css
        self.manifest = manifest
        self.env = build_environment()

        typography = load_typography(site_config)
        self.typography_css = typography.inject_styles() if typography else ""
        self.rhythm = typography.rhythm if typography else (lambda lines=1: f"{lines * 1.5}rem")

    def _feed_url(self) -> Optional[str]:
        options = self.site_config.plugin_options("feed")
        if options is None:
            return None
        return f"{self.path_prefix}{options.get('output', '/rss.xml')}"

    def _progress(self, pathname: str) -> Optional[dict]:
        options = self.site_config.plugin_options("page-progress")
        if not components.page_progress_enabled(pathname, options, self.path_prefix):
            return None
        return {
            "height": options.get("height", 3),
            "color": options.get("color", "#663399"),
        }

    def _context(self, pathname: str) -> dict:
        return {
            "lang": "en",
            "site": self.site,
            "path_prefix": self.path_prefix,
            "root_path": components.root_path(self.path_prefix),
            "is_root": components.is_root_path(pathname, self.path_prefix),
            "year": components.copyright_year(),
            "rhythm": self.rhythm,
            "typography_css": self.typography_css,
            "code_css": self.code_css,
            "fonts_link": components.google_fonts_link(
                self.site_config.plugin_options("google-fonts")
            ),
            "manifest": self.manifest,
            "feed_url": self._feed_url(),
            "progress": self._progress(pathname),
            "service_worker": self.site_config.has_plugin("offline"),
        }

    def render_index(self, posts: List[PostSummary]) -> str:
        pathname = components.root_path(self.path_prefix)
        template = self.env.get_template("index.html")
        return template.render(posts=posts, **self._context(pathname))

    def render_post(self, post: PostDetail, navigation: NavigationContext) -> str:
        pathname = components.page_url(post.slug, self.path_prefix)
        template = self.env.get_template("blog_post.html")
        return template.render(post=post, navigation=navigation, **self._context(pathname))

    def render_not_found(self) -> str:
        pathname = f"{self.path_prefix}/404/"
        template = self.env.get_template("not_found.html")
        return template.render(**self._context(pathname))
