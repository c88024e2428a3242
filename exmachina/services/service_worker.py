import logging
from typing import Iterable, Optional

from jinja2 import Environment

from exmachina.schemas.site import SiteConfig

logger = logging.getLogger(__name__)

SW_FILENAME = "sw.js"


def service_worker_mode(site_config: SiteConfig) -> Optional[str]:
    """`offline`, `remove` or None; removal wins when both are configured."""
    if site_config.has_plugin("remove-serviceworker"):
        return "remove"
    if site_config.has_plugin("offline"):
        return "offline"
    return None


def render_service_worker(
    env: Environment,
    mode: str,
    precache_urls: Iterable[str] = (),
    cache_name: str = "exmachina-offline",
) -> str:
    if mode == "remove":
        return env.get_template("sw_remove.js").render()
    urls = sorted(set(precache_urls))
    logger.debug(f"Service worker precaches {len(urls)} urls")
    return env.get_template("sw_offline.js").render(
        cache_name=cache_name, precache_urls=urls
    )
