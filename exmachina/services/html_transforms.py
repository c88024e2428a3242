"""
Post-processing steps applied to the HTML produced by python-markdown.

Each step mutates a BeautifulSoup tree in place so the pipeline can chain
them in the order the site config lists the plugins.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, Optional
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from exmachina.services.image_service import PASSTHROUGH_SUFFIXES, ImageProcessor
from exmachina.services.static_assets import AssetStore

logger = logging.getLogger(__name__)

FOOTNOTE_ID_RE = re.compile(r"^(fn|fnref\d*):(.+)$")
CJK_RE = re.compile(
    r"[\u4E00-\u9FFF\u3400-\u4DBF\uF900-\uFAFF\u3040-\u309F\uAC00-\uD7AF]"
)
WORD_RE = re.compile(r"\w+(?:['’]\w+)*")

IFRAME_STYLE = "position: absolute; top: 0; left: 0; width: 100%; height: 100%;"
IFRAME_WRAPPER_STYLE = "padding-bottom: {ratio}%; position: relative; height: 0; overflow: hidden;"

# Text on either side of these is never part of the same word
TEXT_BREAK_TAGS = [
    "p", "div", "li", "dt", "dd", "pre", "blockquote", "br", "hr",
    "h1", "h2", "h3", "h4", "h5", "h6", "tr", "td", "th", "figcaption",
]


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _is_local_reference(url: Optional[str]) -> bool:
    if not url:
        return False
    parsed = urlparse(url)
    if parsed.scheme or parsed.netloc:
        return False
    return not url.startswith(("#", "/", "mailto:"))


def _local_path(url: str, source_dir: Path) -> Path:
    return (source_dir / unquote(urlparse(url).path)).resolve()


def renumber_footnotes(soup: BeautifulSoup) -> None:
    """Number footnotes 1..n in order of first reference, whatever their labels."""
    numbers: Dict[str, int] = {}
    for ref in soup.select("a.footnote-ref"):
        label = ref.get("href", "").removeprefix("#fn:")
        if label not in numbers:
            numbers[label] = len(numbers) + 1
        ref.string = str(numbers[label])
        ref["href"] = f"#fn-{numbers[label]}"

    if not numbers:
        return

    for node in soup.find_all(id=FOOTNOTE_ID_RE):
        prefix, label = FOOTNOTE_ID_RE.match(node["id"]).groups()
        if label in numbers:
            node["id"] = f"{prefix}-{numbers[label]}"

    for backref in soup.select("a.footnote-backref"):
        match = FOOTNOTE_ID_RE.match(backref.get("href", "").lstrip("#"))
        if match and match.group(2) in numbers:
            number = numbers[match.group(2)]
            backref["href"] = f"#{match.group(1)}-{number}"
            backref["title"] = f"Jump back to footnote {number} in the text"

    container = soup.select_one("div.footnote ol")
    if container is None:
        return
    items = container.find_all("li", recursive=False)

    def position(item) -> int:
        match = re.match(r"^fn-(\d+)$", item.get("id", ""))
        return int(match.group(1)) if match else len(numbers) + 1

    for item in items:
        item.extract()
    for item in sorted(items, key=position):
        container.append(item)


def process_images(
    soup: BeautifulSoup,
    source_dir: Path,
    images: ImageProcessor,
    assets: AssetStore,
) -> None:
    for img in soup.find_all("img"):
        src = img.get("src")
        if not _is_local_reference(src):
            continue
        path = _local_path(src, source_dir)
        if path.suffix.lower() in PASSTHROUGH_SUFFIXES:
            if path.is_file():
                img["src"] = assets.publish_file(path)
            continue

        result = images.process(path)
        if not result:
            continue

        alt = img.get("alt", "")
        title = img.get("title")
        new_img = soup.new_tag(
            "img",
            attrs={
                "class": "responsive-image",
                "alt": alt,
                "src": result["src"],
                "srcset": result["srcset"],
                "sizes": result["sizes"],
                "loading": "lazy",
                "style": "width: 100%; height: 100%; margin: 0; vertical-align: middle;",
            },
        )
        if title:
            new_img["title"] = title
        link = soup.new_tag(
            "a",
            attrs={
                "class": "responsive-image-link",
                "href": result["original"],
                "target": "_blank",
                "rel": "noopener",
            },
        )
        link.append(new_img)
        wrapper = soup.new_tag(
            "span",
            attrs={
                "class": "responsive-image-wrapper",
                "style": (
                    "position: relative; display: block; margin-left: auto; "
                    f"margin-right: auto; max-width: {result['presentationWidth']}px;"
                ),
            },
        )
        wrapper.append(link)
        img.replace_with(wrapper)


def wrap_iframes(soup: BeautifulSoup, wrapper_style: str = "") -> None:
    for iframe in soup.find_all("iframe"):
        parent = iframe.parent
        if parent is not None and "responsive-iframe-wrapper" in parent.get("class", []):
            continue
        try:
            width = float(iframe.get("width", ""))
            height = float(iframe.get("height", ""))
        except ValueError:
            continue
        if width <= 0:
            continue

        style = IFRAME_WRAPPER_STYLE.format(ratio=f"{height / width * 100:g}")
        if wrapper_style:
            style = f"{style} {wrapper_style}"
        wrapper = soup.new_tag(
            "div", attrs={"class": "responsive-iframe-wrapper", "style": style}
        )
        iframe["style"] = IFRAME_STYLE
        iframe.wrap(wrapper)


def highlight_inline_code(soup: BeautifulSoup, marker: str = "•") -> None:
    """`python•len(x)` in inline code is highlighted as Python."""
    if not marker:
        return
    for code in soup.find_all("code"):
        if code.find_parent("pre") is not None:
            continue
        text = code.get_text()
        if marker not in text:
            continue
        language, source = text.split(marker, 1)
        try:
            lexer = get_lexer_by_name(language.strip())
        except ClassNotFound:
            logger.debug(f"No lexer for inline code language {language!r}")
            continue
        highlighted = highlight(source, lexer, HtmlFormatter(nowrap=True)).rstrip("\n")
        code.clear()
        for node in list(parse_html(highlighted).contents):
            code.append(node)
        code["class"] = ["highlight", f"language-{language.strip()}"]


def copy_linked_files(
    soup: BeautifulSoup,
    source_dir: Path,
    assets: AssetStore,
    ignore_extensions: Iterable[str] = (),
) -> None:
    ignored = {f".{ext.lower().lstrip('.')}" for ext in ignore_extensions}
    ignored.update({".md", ".markdown", ".html", ".htm"})
    for tag_name, attr in (("a", "href"), ("video", "src"), ("source", "src"), ("audio", "src")):
        for tag in soup.find_all(tag_name):
            url = tag.get(attr)
            if not _is_local_reference(url):
                continue
            path = _local_path(url, source_dir)
            if path.suffix.lower() in ignored or not path.is_file():
                continue
            tag[attr] = assets.publish_file(path)


def plain_text(soup: BeautifulSoup) -> str:
    """Readable text of the body, without footnotes or inline styles/scripts."""
    copy = parse_html(str(soup))
    for node in copy.select("div.footnote, script, style, math annotation"):
        node.decompose()
    for node in copy.find_all(TEXT_BREAK_TAGS):
        node.insert_after(" ")
    return " ".join(copy.get_text().split())


def count_words(text: str) -> int:
    cjk = len(CJK_RE.findall(text))
    return cjk + len(WORD_RE.findall(CJK_RE.sub(" ", text)))
