import logging
from pathlib import Path, PurePosixPath
from typing import List, Optional

from exmachina.errors import ContentError

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")


def slug_for_path(relative_path: str) -> str:
    """`hello/index.md` -> `/hello/`, `notes.md` -> `/notes/`."""
    path = PurePosixPath(relative_path)
    parts = list(path.parent.parts)
    if path.stem != "index":
        parts.append(path.stem)
    parts = [part for part in parts if part not in ("", ".")]
    if not parts:
        return "/"
    return "/" + "/".join(parts) + "/"


def normalize_slug(slug: str) -> str:
    """Accept `hello`, `/hello` and `/hello/` as the same slug."""
    clean = slug.strip().strip("/")
    return f"/{clean}/" if clean else "/"


class FilesystemPostsRepo:
    def __init__(self, content_dir: Path):
        self.root = Path(content_dir)

    def list_blog_docs(self) -> List[dict]:
        if not self.root.is_dir():
            logger.warning(f"Content directory not found: {self.root}")
            return []

        docs = []
        seen = {}
        for path in sorted(self.root.rglob("*")):
            if not path.is_file() or path.suffix.lower() not in MARKDOWN_SUFFIXES:
                continue
            relative = path.relative_to(self.root).as_posix()
            if any(part.startswith((".", "_")) for part in relative.split("/")):
                continue
            slug = slug_for_path(relative)
            if slug == "/":
                raise ContentError(
                    f"{relative} maps to the site root, which is reserved for the post index",
                    source=relative,
                )
            if slug in seen:
                raise ContentError(
                    f"Duplicate slug {slug} for {relative} and {seen[slug]}",
                    source=relative,
                )
            seen[slug] = relative
            docs.append({"_id": relative, "path": relative, "slug": slug})
        return docs

    def get_blog_doc(self, slug: str) -> Optional[dict]:
        wanted = normalize_slug(slug)
        for doc in self.list_blog_docs():
            if doc["slug"] == wanted:
                return doc
        return None
