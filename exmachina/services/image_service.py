import io
import logging
from pathlib import Path
from typing import List, Optional

from PIL import Image, UnidentifiedImageError

from exmachina.services.static_assets import AssetStore, content_digest

logger = logging.getLogger(__name__)

# Multiples of the max width offered in srcset
SRCSET_FACTORS = (0.25, 0.5, 1, 1.5, 2, 3)
RESIZABLE_SUFFIXES = (".jpg", ".jpeg", ".png", ".webp", ".tif", ".tiff")
PASSTHROUGH_SUFFIXES = (".gif", ".svg")


def get_content_type_from_filename(filename: str) -> str:
    """
    Determine content type from file extension
    """
    filename = filename.lower()
    if filename.endswith((".jpg", ".jpeg")):
        return "image/jpeg"
    elif filename.endswith(".png"):
        return "image/png"
    elif filename.endswith(".gif"):
        return "image/gif"
    elif filename.endswith(".svg"):
        return "image/svg+xml"
    elif filename.endswith(".webp"):
        return "image/webp"
    elif filename.endswith((".html", ".htm")):
        return "text/html; charset=utf-8"
    elif filename.endswith(".css"):
        return "text/css"
    elif filename.endswith(".js"):
        return "application/javascript"
    elif filename.endswith(".pdf"):
        return "application/pdf"
    elif filename.endswith(".webmanifest"):
        return "application/manifest+json"
    else:
        return "application/octet-stream"


def responsive_widths(max_width: int, original_width: int) -> List[int]:
    """Widths to generate: multiples of max_width no larger than the original."""
    candidates = sorted({round(max_width * factor) for factor in SRCSET_FACTORS})
    widths = [w for w in candidates if w <= original_width]
    if original_width < candidates[-1] and original_width not in widths:
        widths.append(original_width)
    return sorted(widths)


def resize_image(data: bytes, width: int) -> bytes:
    with Image.open(io.BytesIO(data)) as img:
        fmt = img.format or "PNG"
        height = max(1, round(img.height * width / img.width))
        resized = img.resize((width, height), Image.Resampling.LANCZOS)
        if fmt == "JPEG" and resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")
        out = io.BytesIO()
        resized.save(out, format=fmt)
        return out.getvalue()


class ImageProcessor:
    def __init__(self, assets: AssetStore, max_width: int = 650):
        self.assets = assets
        self.max_width = max_width

    def process(self, source: Path) -> Optional[dict]:
        """
        Publish responsive variants of a local image.

        Returns the attributes needed to render it, or None when the file is
        missing or not an image we can resize.
        """
        source = Path(source)
        suffix = source.suffix.lower()
        if not source.is_file():
            logger.warning(f"Image not found: {source}")
            return None
        if suffix not in RESIZABLE_SUFFIXES:
            return None

        data = source.read_bytes()
        try:
            with Image.open(io.BytesIO(data)) as img:
                original_width, original_height = img.size
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"Cannot read image {source}: {e}")
            return None

        digest = content_digest(data)
        original_url = self.assets.publish_bytes(digest, source.name, data)
        presentation_width = min(self.max_width, original_width)

        srcset = []
        src = original_url
        for width in responsive_widths(self.max_width, original_width):
            name = f"{source.stem}-{width}{suffix}"
            if width == original_width:
                url = original_url
            elif self.assets.exists(digest, name):
                url = self.assets.url_for(digest, name)
            else:
                url = self.assets.publish_bytes(
                    digest, name, resize_image(data, width)
                )
            srcset.append(f"{url} {width}w")
            if width == presentation_width:
                src = url

        logger.debug(f"Processed image {source} into {len(srcset)} sizes")
        return {
            "src": src,
            "srcset": ", ".join(srcset),
            "sizes": f"(max-width: {presentation_width}px) 100vw, {presentation_width}px",
            "original": original_url,
            "width": original_width,
            "height": original_height,
            "presentationWidth": presentation_width,
            "aspectRatio": original_width / original_height,
        }
