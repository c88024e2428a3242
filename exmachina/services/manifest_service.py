import io
import json
import logging
from pathlib import Path
from typing import Optional

from PIL import Image

from exmachina.errors import BuildError
from exmachina.services.static_assets import content_digest

logger = logging.getLogger(__name__)

ICON_SIZES = (48, 72, 96, 144, 192, 256, 384, 512)
FAVICON_SIZE = 32
MANIFEST_KEYS = (
    "name",
    "short_name",
    "description",
    "start_url",
    "background_color",
    "theme_color",
    "display",
    "lang",
)


class ManifestService:
    """Web app manifest plus the square PNG icons it references."""

    def __init__(self, options: dict, icon_path: Optional[Path] = None, path_prefix: str = ""):
        self.options = options
        self.icon_path = Path(icon_path) if icon_path else None
        self.path_prefix = path_prefix

    def _icon_digest(self) -> str:
        if self.icon_path is None or not self.icon_path.is_file():
            return ""
        return content_digest(self.icon_path.read_bytes())[:8]

    def head_info(self) -> dict:
        """What the page head needs to link the manifest."""
        favicon = None
        digest = self._icon_digest()
        if digest:
            favicon = f"{self.path_prefix}/favicon-{FAVICON_SIZE}x{FAVICON_SIZE}.png?v={digest}"
        return {
            "theme_color": self.options.get("theme_color", "#ffffff"),
            "favicon": favicon,
        }

    def manifest(self) -> dict:
        data = {key: self.options[key] for key in MANIFEST_KEYS if key in self.options}
        if "start_url" in data and self.path_prefix:
            data["start_url"] = f"{self.path_prefix}{data['start_url']}"
        if self.icon_path is not None:
            digest = self._icon_digest()
            data["icons"] = [
                {
                    "src": f"{self.path_prefix}/icons/icon-{size}x{size}.png?v={digest}",
                    "sizes": f"{size}x{size}",
                    "type": "image/png",
                }
                for size in ICON_SIZES
            ]
        return data

    def icon_png(self, size: int) -> bytes:
        """The configured icon resized to a `size` x `size` PNG."""
        if self.icon_path is None or not self.icon_path.is_file():
            raise BuildError(f"manifest: icon not found at {self.icon_path}")
        with Image.open(self.icon_path) as source:
            icon = source.convert("RGBA").resize((size, size), Image.Resampling.LANCZOS)
        out = io.BytesIO()
        icon.save(out, format="PNG")
        return out.getvalue()

    def write(self, output_dir: Path) -> list:
        output_dir = Path(output_dir)
        written = []
        if self.icon_path is not None:
            icons_dir = output_dir / "icons"
            icons_dir.mkdir(parents=True, exist_ok=True)
            for size in ICON_SIZES:
                dest = icons_dir / f"icon-{size}x{size}.png"
                dest.write_bytes(self.icon_png(size))
                written.append(dest)
            favicon = output_dir / f"favicon-{FAVICON_SIZE}x{FAVICON_SIZE}.png"
            favicon.write_bytes(self.icon_png(FAVICON_SIZE))
            written.append(favicon)

        manifest_path = output_dir / "manifest.webmanifest"
        manifest_path.write_text(json.dumps(self.manifest(), indent=2), encoding="utf-8")
        written.append(manifest_path)
        logger.info(f"Wrote web manifest with {len(written) - 1} icons")
        return written
