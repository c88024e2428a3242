import hashlib
import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def content_digest(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


class AssetStore:
    """
    Content-addressed output folder: every file lands in
    `<static_dir>/<digest>/<name>` and is served from `<prefix>/static/...`.
    """

    def __init__(self, static_dir: Path, path_prefix: str = ""):
        self.static_dir = Path(static_dir)
        self.path_prefix = path_prefix

    def url_for(self, digest: str, name: str) -> str:
        return f"{self.path_prefix}/static/{digest}/{name}"

    def path_for(self, digest: str, name: str) -> Path:
        return self.static_dir / digest / name

    def publish_file(self, source: Path) -> str:
        """Copy `source` into the store (once) and return its public URL."""
        source = Path(source)
        digest = content_digest(source.read_bytes())
        dest = self.path_for(digest, source.name)
        if not dest.exists():
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, dest)
            logger.debug(f"Copied {source} -> {dest}")
        return self.url_for(digest, source.name)

    def publish_bytes(self, digest: str, name: str, data: bytes) -> str:
        dest = self.path_for(digest, name)
        if not dest.exists():
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(data)
        return self.url_for(digest, name)

    def exists(self, digest: str, name: str) -> bool:
        return self.path_for(digest, name).exists()
