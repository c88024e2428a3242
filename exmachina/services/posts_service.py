import datetime
import hashlib
import logging
import math
from typing import Dict, List, Optional

import frontmatter

from exmachina.errors import ContentError
from exmachina.repos.posts_repo import normalize_slug, slug_for_path
from exmachina.schemas.blog import (
    NavigationContext,
    PostDetail,
    PostLink,
    PostSummary,
    RenderedContent,
)

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 265
LIST_EXCERPT_LENGTH = 140
DETAIL_EXCERPT_LENGTH = 160


class PostsService:
    def __init__(
        self,
        repo,
        parser,
        pipeline,
        include_drafts: bool = False,
        strict: bool = False,
        render_cache: Optional[Dict[str, RenderedContent]] = None,
    ):
        self.repo = repo
        self.parser = parser
        self.pipeline = pipeline
        self.include_drafts = include_drafts
        self.strict = strict
        # Shared between instances when the caller passes one in
        self._rendered: Dict[str, RenderedContent] = {} if render_cache is None else render_cache

    def list_posts(self) -> List[PostSummary]:
        posts = []
        for doc in self.repo.list_blog_docs():
            try:
                post_data = parse_post_data(
                    doc, include_content=False, parser=self.parser, render=self._render
                )
            except ContentError as e:
                if self.strict:
                    raise
                logger.warning(f"Skipping {doc.get('_id')}: {e}")
                continue
            if not post_data:
                continue
            if post_data["draft"] and not self.include_drafts:
                logger.debug(f"Skipping draft {post_data['slug']}")
                continue
            posts.append(post_data)

        posts.sort(key=lambda x: x.get("date") or "0000-01-01", reverse=True)
        return [PostSummary(**p) for p in posts]

    def get_post(self, slug: str) -> Optional[PostDetail]:
        doc = self.repo.get_blog_doc(slug)
        if not doc:
            return None
        try:
            post_data = parse_post_data(
                doc, include_content=True, parser=self.parser, render=self._render
            )
        except ContentError as e:
            if self.strict:
                raise
            logger.warning(f"Skipping {doc.get('_id')}: {e}")
            return None
        if not post_data:
            return None
        if post_data["draft"] and not self.include_drafts:
            return None
        return PostDetail(**post_data)

    def clear_cache(self) -> None:
        self._rendered.clear()

    def get_navigation(self, slug: str, posts: Optional[List[PostSummary]] = None) -> NavigationContext:
        if posts is None:
            posts = self.list_posts()
        return build_navigation(posts).get(normalize_slug(slug), NavigationContext())

    def _render(self, doc: dict, content: str) -> RenderedContent:
        """Rendered markdown, memoized per content hash."""
        key = hashlib.sha1(f"{doc.get('_id')}\0{content}".encode("utf-8")).hexdigest()
        rendered = self._rendered.get(key)
        if rendered is None:
            rendered = self.pipeline.render(content, self.parser.source_dir(doc))
            self._rendered[key] = rendered
        return rendered


def parse_post_data(doc: dict, include_content: bool = False, *, parser, render) -> Optional[dict]:
    """Parse frontmatter and return standardized post data"""
    slug = doc.get("slug") or slug_for_path(doc["_id"])
    markdown = parser.get_markdown_content(doc)
    if not markdown:
        logger.warning(f"No markdown content found for post {slug}")
        return None

    try:
        parsed = frontmatter.loads(markdown)
    except Exception as e:
        raise ContentError(f"Invalid front-matter in {doc['_id']}: {e}", source=doc["_id"]) from e
    metadata = parsed.metadata or {}

    rendered = render(doc, parsed.content)
    excerpt_length = DETAIL_EXCERPT_LENGTH if include_content else LIST_EXCERPT_LENGTH

    post_data = {
        "id": doc["_id"],
        "slug": slug,
        "title": _string_or_none(metadata.get("title")),
        "date": _convert_date(metadata.get("date")),
        "description": _string_or_none(metadata.get("description")),
        "excerpt": prune_excerpt(rendered.text, excerpt_length),
        "timeToRead": calculate_reading_time(rendered.wordCount),
        "wordCount": rendered.wordCount,
        "draft": bool(metadata.get("draft", False)),
    }

    if include_content:
        post_data["html"] = rendered.html

    return post_data


def build_navigation(posts: List[PostSummary]) -> Dict[str, NavigationContext]:
    """
    Previous/next links for posts ordered newest first: `previous` is the
    next older post, `next` the next newer one.
    """
    navigation = {}
    for index, post in enumerate(posts):
        older = posts[index + 1] if index + 1 < len(posts) else None
        newer = posts[index - 1] if index > 0 else None
        navigation[post.slug] = NavigationContext(
            previous=_link(older),
            next=_link(newer),
        )
    return navigation


def _link(post: Optional[PostSummary]) -> Optional[PostLink]:
    if post is None:
        return None
    return PostLink(slug=post.slug, title=post.title)


def _string_or_none(value) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _convert_date(value):
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if value is None:
        return None
    return str(value)


def calculate_reading_time(word_count: int) -> int:
    """Minutes at 265 words per minute, rounded half up, never below one."""
    minutes = math.floor(word_count / WORDS_PER_MINUTE + 0.5)
    return minutes or 1


def prune_excerpt(text: str, length: int, ellipsis: str = "…") -> str:
    """Cut `text` to at most `length` characters on a word boundary."""
    text = " ".join(text.split())
    if len(text) <= length:
        return text
    cut = text[:length]
    if not text[length].isspace() and " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    cut = cut.rstrip(" ,.;:!?-–—")
    return f"{cut}{ellipsis}"
