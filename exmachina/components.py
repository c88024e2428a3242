"""
Presentational helpers shared by the page templates.

Nothing here transforms content; these functions only decide what to show
(labels, fallbacks, meta tags) from data that is already computed.
"""

import datetime
from typing import Dict, List, Optional
from urllib.parse import quote_plus

from exmachina.schemas.site import SiteMetadata, Social

DATE_FORMAT = "%B %d, %Y"
GOOGLE_FONTS_URL = "https://fonts.googleapis.com/css"


def time_to_read_label(minutes: int) -> str:
    return f"{minutes} minute{'' if minutes == 1 else 's'}"


def format_post_date(value: Optional[str]) -> str:
    """ISO date (or datetime) -> `MMMM DD, YYYY`; unparseable values pass through."""
    if not value:
        return ""
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError:
        return value
    return parsed.strftime(DATE_FORMAT)


def display_title(post) -> str:
    return post.title or post.slug


def document_title(title: str, site_title: Optional[str]) -> str:
    return f"{title} | {site_title}" if site_title else title


def seo_meta(
    title: str,
    site: SiteMetadata,
    description: Optional[str] = None,
    meta: Optional[List[Dict[str, str]]] = None,
) -> List[Dict[str, str]]:
    meta_description = description or site.description
    base_meta = [
        {"name": "description", "content": meta_description},
        {"property": "og:title", "content": title},
        {"property": "og:description", "content": meta_description},
        {"property": "og:type", "content": "website"},
        {"name": "twitter:card", "content": "summary"},
        {"name": "twitter:creator", "content": site.author},
        {"name": "twitter:title", "content": title},
        {"name": "twitter:description", "content": meta_description},
    ]
    return base_meta + list(meta or [])


def root_path(path_prefix: str = "") -> str:
    return f"{path_prefix}/"


def is_root_path(pathname: str, path_prefix: str = "") -> bool:
    return pathname == root_path(path_prefix)


def page_url(slug: str, path_prefix: str = "") -> str:
    return f"{path_prefix}{slug}"


def social_links(social: Social) -> List[Dict[str, str]]:
    links = []
    if social.github:
        links.append({"network": "github", "url": f"https://github.com/{social.github}"})
    if social.linkedin:
        links.append(
            {"network": "linkedin", "url": f"https://linkedin.com/in/{social.linkedin}"}
        )
    return links


def google_fonts_link(options: Optional[dict]) -> Optional[Dict[str, str]]:
    """Attributes of the `<link>` that loads the configured Google fonts."""
    if not options or not options.get("fonts"):
        return None
    families = "|".join(
        quote_plus(font, safe=":,") for font in options["fonts"]
    )
    href = f"{GOOGLE_FONTS_URL}?family={families}"
    if options.get("display"):
        href = f"{href}&display={options['display']}"
    attributes = {"rel": "stylesheet"}
    attributes.update(options.get("attributes") or {})
    attributes["href"] = href
    return attributes


def page_progress_enabled(pathname: str, options: Optional[dict], path_prefix: str = "") -> bool:
    """Show the reading progress bar unless the path is excluded (or not included)."""
    if options is None:
        return False
    relative = pathname.removeprefix(path_prefix) or "/"
    include = options.get("includePaths") or []
    exclude = options.get("excludePaths") or []
    if relative in exclude:
        return False
    if include:
        return relative in include
    return True


def copyright_year() -> int:
    return datetime.date.today().year
