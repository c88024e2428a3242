import datetime
import logging
from email.utils import format_datetime
from typing import List, Optional

from jinja2 import Environment

from exmachina.schemas.blog import PostDetail
from exmachina.schemas.site import SiteMetadata

logger = logging.getLogger(__name__)


def rfc822_date(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError:
        logger.warning(f"Cannot parse post date {value!r} for the feed")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return format_datetime(parsed)


class FeedService:
    def __init__(self, env: Environment, site: SiteMetadata, options: Optional[dict] = None, path_prefix: str = ""):
        self.env = env
        self.site = site
        self.options = options or {}
        self.path_prefix = path_prefix

    @property
    def output(self) -> str:
        return self.options.get("output", "/rss.xml")

    def _absolute(self, path: str) -> str:
        return f"{self.site.siteUrl.rstrip('/')}{self.path_prefix}{path}"

    def render(self, posts: List[PostDetail], now: Optional[datetime.datetime] = None) -> str:
        now = now or datetime.datetime.now(datetime.timezone.utc)
        items = [
            {
                "title": post.title or post.slug,
                "description": post.description or post.excerpt,
                "url": self._absolute(post.slug),
                "pub_date": rfc822_date(post.date),
                "author": self.site.author,
                "html": post.html,
            }
            for post in posts
        ]
        template = self.env.get_template("rss.xml")
        feed = template.render(
            title=self.options.get("title", self.site.title),
            description=self.site.description,
            site_url=self.site.siteUrl,
            feed_url=self._absolute(self.output),
            last_build_date=format_datetime(now),
            items=items,
        )
        logger.debug(f"Rendered feed with {len(items)} items")
        return feed
