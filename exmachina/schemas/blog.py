from typing import Optional

from pydantic import BaseModel


class PostSummary(BaseModel):
    id: str
    slug: str
    title: Optional[str] = None
    date: Optional[str] = None
    description: Optional[str] = None
    excerpt: str = ""
    timeToRead: int = 1
    wordCount: int = 0
    draft: bool = False


class PostDetail(PostSummary):
    html: str


class PostLink(BaseModel):
    slug: str
    title: Optional[str] = None


class NavigationContext(BaseModel):
    previous: Optional[PostLink] = None
    next: Optional[PostLink] = None


class RenderedContent(BaseModel):
    html: str
    text: str
    wordCount: int
