import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class ContentParser:
    def __init__(self, root: Path):
        self.root = Path(root)

    def get_markdown_content(self, doc: dict) -> str:
        """Get the full markdown content from a document (decoded as text)."""
        raw = self._get_raw_content(doc)
        if isinstance(raw, bytes):
            # If somehow bytes slipped in, decode to string
            return raw.decode("utf-8", errors="ignore")
        return raw or ""

    def get_binary_content(self, doc: dict) -> bytes | None:
        """Get binary content from a document (images and linked files)."""
        raw = self._get_raw_content(doc)
        if isinstance(raw, str):
            return raw.encode("utf-8")
        return raw

    def source_dir(self, doc: dict) -> Path:
        """Directory that relative links inside the document resolve against."""
        return self._resolve(doc).parent

    def _get_raw_content(self, doc: dict) -> str | bytes | None:
        """Inline content wins; otherwise read the file the document points at."""
        for key in ("data", "content"):
            if key in doc:
                return doc[key]

        path = self._resolve(doc)
        try:
            if path.suffix.lower() in (".md", ".markdown"):
                return path.read_text(encoding="utf-8")
            return path.read_bytes()
        except FileNotFoundError:
            logger.warning(f"Content file vanished: {path}")
            return None
        except OSError as e:
            logger.error(f"Error reading {path}: {e}")
            return None

    def _resolve(self, doc: dict) -> Path:
        path = Path(doc.get("path") or doc["_id"])
        return path if path.is_absolute() else self.root / path
