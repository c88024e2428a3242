import logging

from exmachina.errors import ExmachinaError
from exmachina.services.site_builder import SiteBuilder
from exmachina.settings import settings
from exmachina.site_config import site_config

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    try:
        result = SiteBuilder(settings, site_config).build()
        logger.info(f"Build completed successfully into {settings.output_path}: {result.summary_text()}")
    except ExmachinaError as e:
        logger.error(f"Build failed: {e}", exc_info=True)
        raise SystemExit(1)
