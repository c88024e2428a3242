import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from exmachina.services.image_service import get_content_type_from_filename
from exmachina.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()


def get_static_root() -> Path:
    return settings.static_path


@router.get("/static/{asset_path:path}")
async def get_static_asset(asset_path: str, root: Path = Depends(get_static_root)):
    """
    Serve files published by the markdown pipeline (resized images, linked files)
    """
    root = Path(root).resolve()
    path = (root / asset_path).resolve()
    if root not in path.parents or not path.is_file():
        raise HTTPException(status_code=404, detail="Asset not found")

    data = path.read_bytes()
    headers = {
        "Content-Length": str(len(data)),
        "Accept-Ranges": "bytes",
    }
    return Response(
        content=data,
        media_type=get_content_type_from_filename(path.name),
        headers=headers,
    )
