import io
import textwrap
from pathlib import Path

import pytest
from PIL import Image

from exmachina.repos.posts_repo import normalize_slug, slug_for_path
from exmachina.schemas.blog import NavigationContext, RenderedContent
from exmachina.schemas.site import PluginConfig, SiteConfig, SiteMetadata, Social
from exmachina.settings import Settings


class FakeRepo:
    """
    Minimal repo stand-in used in service tests.
    """

    def __init__(self, docs):
        self.docs = docs

    def list_blog_docs(self):
        return list(self.docs)

    def get_blog_doc(self, slug):
        wanted = normalize_slug(slug)
        for doc in self.docs:
            if doc.get("slug") == wanted:
                return doc
        return None


class FakeParser:
    """
    Minimal markdown/content parser stand-in.
    """

    def __init__(self, content_by_id: dict[str, str]):
        self.content_by_id = content_by_id

    def get_markdown_content(self, doc: dict) -> str | None:
        raw = self.content_by_id.get(doc.get("_id"))
        if raw is None:
            return None
        return textwrap.dedent(raw).lstrip()

    def source_dir(self, doc: dict) -> Path:
        return Path("/content") / Path(doc["_id"]).parent


class FakePipeline:
    """
    Markdown pipeline stand-in: wraps the body in a paragraph and counts calls.
    """

    def __init__(self):
        self.calls = []

    def render(self, text: str, source_dir: Path) -> RenderedContent:
        self.calls.append((text, source_dir))
        body = " ".join(text.split())
        return RenderedContent(html=f"<p>{body}</p>", text=body, wordCount=len(body.split()))

    def stylesheet(self) -> str:
        return ""


class FakePostsService:
    """
    Minimal posts service stand-in for router tests.
    """

    def __init__(self, list_posts_return=None, get_post_return=None, navigation_return=None):
        self._list_posts_return = list_posts_return or []
        self._get_post_return = get_post_return
        self._navigation_return = navigation_return or NavigationContext()

    def list_posts(self):
        return self._list_posts_return

    def get_post(self, slug: str):
        return self._get_post_return

    def get_navigation(self, slug: str, posts=None):
        return self._navigation_return


def make_doc(relative: str) -> dict:
    return {"_id": relative, "path": relative, "slug": slug_for_path(relative)}


def make_site_config(plugins=None, transformer_plugins=None) -> SiteConfig:
    """A small site config rooted at `content/`; extra plugins are appended."""
    base = [
        PluginConfig(resolve="source-filesystem", options={"path": "content/blog", "name": "blog"}),
        PluginConfig(
            resolve="transformer-markdown",
            options={"plugins": transformer_plugins if transformer_plugins is not None else []},
        ),
    ]
    return SiteConfig(
        siteMetadata=SiteMetadata(
            title="Test Blog",
            author="Ada",
            description="Notes about testing.",
            siteUrl="https://example.com",
            social=Social(github="ada", linkedin="ada-l"),
        ),
        plugins=base + list(plugins or []),
    )


def png_bytes(width: int, height: int, color=(200, 30, 30)) -> bytes:
    out = io.BytesIO()
    Image.new("RGB", (width, height), color).save(out, format="PNG")
    return out.getvalue()


def write_post(root: Path, relative: str, body: str) -> Path:
    path = root / "content" / "blog" / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


@pytest.fixture
def site_settings(tmp_path):
    return Settings(SITE_ROOT=str(tmp_path), OUTPUT_DIR="public", PATH_PREFIX="")
