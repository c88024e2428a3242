import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from exmachina.routers import pages, posts, static
from exmachina.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Ex Machina", description="Preview server for the Ex Machina blog")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.static_path.mkdir(parents=True, exist_ok=True)
    logger.info(f"Previewing {settings.site_root.resolve()} (assets in {settings.static_path})")

    try:
        yield
    finally:
        logger.info("Preview server exited gracefully")


app.router.lifespan_context = lifespan

app.include_router(static.router)
app.include_router(posts.router)
# Catch-all post pages, must stay last
app.include_router(pages.router)
