import pytest

from exmachina.errors import BuildError, PluginConfigError
from exmachina.schemas.site import PluginConfig, SiteConfig
from exmachina.services.site_builder import SiteBuilder, content_dir_for
from tests.conftest import make_site_config, png_bytes, write_post

PLUGINS = [
    PluginConfig(resolve="typography", options={"pathToConfigModule": "exmachina.typography"}),
    PluginConfig(resolve="manifest", options={"name": "Test", "icon": "content/assets/icon.png"}),
    PluginConfig(resolve="remove-serviceworker"),
    PluginConfig(resolve="feed", options={"output": "/rss.xml"}),
]
TRANSFORMERS = [
    "numbered-footnotes",
    {"resolve": "images", "options": {"maxWidth": 590}},
    "copy-linked-files",
    "smartypants",
]


@pytest.fixture
def site(tmp_path):
    write_post(
        tmp_path,
        "first/index.md",
        """
        ---
        title: First
        date: 2020-01-01
        ---
        Hello ![pic](pic.png) and a [file](data.csv).
        """,
    )
    (tmp_path / "content" / "blog" / "first" / "pic.png").write_bytes(png_bytes(800, 400))
    (tmp_path / "content" / "blog" / "first" / "data.csv").write_text("a,b\n1,2\n")
    write_post(
        tmp_path,
        "second.md",
        """
        ---
        title: Second
        date: 2020-02-01
        ---
        A "quoted" word.
        """,
    )
    write_post(
        tmp_path,
        "wip.md",
        """
        ---
        title: Unfinished
        draft: true
        ---
        Later.
        """,
    )
    (tmp_path / "content" / "assets").mkdir(parents=True)
    (tmp_path / "content" / "assets" / "icon.png").write_bytes(png_bytes(512, 512))
    return make_site_config(PLUGINS, TRANSFORMERS)


def test_build_writes_pages_feed_manifest_and_worker(tmp_path, site, site_settings):
    result = SiteBuilder(site_settings, site).build()
    public = tmp_path / "public"

    assert result.posts == 2
    assert result.pages == ["/", "/second/", "/first/"]
    assert (public / "index.html").exists()
    assert (public / "404.html").exists()
    assert "rss.xml" in result.files
    assert "sw.js" in result.files
    assert "manifest.webmanifest" in result.files
    assert (public / "icons" / "icon-512x512.png").exists()
    assert "unregister()" in (public / "sw.js").read_text()

    index = (public / "index.html").read_text()
    assert index.index("Second") < index.index("First")
    assert "Unfinished" not in index

    second = (public / "second" / "index.html").read_text()
    assert "“quoted”" in second
    assert 'href="/first/" rel="prev"' in second

    first = (public / "first" / "index.html").read_text()
    assert 'class="responsive-image-wrapper"' in first
    assert "/data.csv" in first and 'href="/static/' in first
    assert list((public / "static").rglob("data.csv"))

    feed = (public / "rss.xml").read_text()
    assert "<link>https://example.com/second/</link>" in feed
    assert result.finished_at is not None
    assert "Built 2 posts" in result.summary_text()


def test_drafts_are_built_when_enabled(tmp_path, site, site_settings):
    settings = site_settings.model_copy(update={"INCLUDE_DRAFTS": True})
    result = SiteBuilder(settings, site).build()
    assert "/wip/" in result.pages
    assert (tmp_path / "public" / "wip" / "index.html").exists()


def test_clean_build_removes_stale_files(tmp_path, site, site_settings):
    stale = tmp_path / "public" / "old" / "index.html"
    stale.parent.mkdir(parents=True)
    stale.write_text("old")

    SiteBuilder(site_settings, site).build(clean=False)
    assert stale.exists()

    SiteBuilder(site_settings, site).build()
    assert not stale.exists()
    # assets are republished after the output directory is wiped
    assert list((tmp_path / "public" / "static").rglob("pic.png"))


def test_bad_front_matter_fails_the_build(tmp_path, site, site_settings):
    write_post(tmp_path, "broken.md", "---\ntitle: [oops\n---\nBody\n")
    with pytest.raises(BuildError) as exc:
        SiteBuilder(site_settings, site).build()
    assert "broken.md" in str(exc.value)


def test_duplicate_slug_fails_the_build(tmp_path, site, site_settings):
    write_post(tmp_path, "first.md", "---\ntitle: Clash\n---\nBody\n")
    with pytest.raises(BuildError):
        SiteBuilder(site_settings, site).build()


def test_missing_blog_source_is_a_config_error(site_settings):
    with pytest.raises(PluginConfigError):
        content_dir_for(site_settings, SiteConfig())


def test_root_index_post_fails_instead_of_replacing_the_listing(tmp_path, site, site_settings):
    write_post(tmp_path, "index.md", "---\ntitle: Root post\n---\nBody\n")
    with pytest.raises(BuildError) as exc:
        SiteBuilder(site_settings, site).build()
    assert "index.md" in str(exc.value)
    assert not (tmp_path / "public" / "index.html").exists()
