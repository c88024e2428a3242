import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

import markdown
from bs4 import BeautifulSoup
from pygments.formatters import HtmlFormatter

from exmachina.errors import PluginConfigError
from exmachina.schemas.blog import RenderedContent
from exmachina.schemas.site import PluginConfig, normalize_plugins
from exmachina.services import html_transforms
from exmachina.services.image_service import ImageProcessor
from exmachina.services.math_extension import MathExtension
from exmachina.services.static_assets import AssetStore

logger = logging.getLogger(__name__)

BASE_EXTENSIONS = [
    "abbr",
    "attr_list",
    "def_list",
    "fenced_code",
    "footnotes",
    "md_in_html",
    "sane_lists",
    "tables",
]

HtmlStep = Callable[[BeautifulSoup, Path], None]


class MarkdownPipeline:
    """
    Markdown -> HTML transform assembled from the transformer plugin list.

    Plugins either configure a python-markdown extension (highlighting,
    punctuation, math, footnotes) or add an HTML post-processing step that
    runs on the converted document, in the order they are listed.
    """

    def __init__(self, plugins, assets: AssetStore):
        self.plugins: List[PluginConfig] = normalize_plugins(plugins)
        self.assets = assets
        self.extensions: List = list(BASE_EXTENSIONS)
        self.extension_configs: Dict[str, dict] = {}
        self.steps: List[HtmlStep] = []
        self.pygments_style: Optional[str] = None

        for plugin in self.plugins:
            configure = self._configurators.get(plugin.resolve)
            if configure is None:
                raise PluginConfigError(f"Unknown transformer plugin: {plugin.resolve}")
            configure(self, plugin.options)

        logger.debug(
            f"Markdown pipeline: {[p.resolve for p in self.plugins]} "
            f"({len(self.steps)} HTML steps)"
        )

    # --- plugin configurators ---

    def _numbered_footnotes(self, options: dict) -> None:
        self.steps.append(lambda soup, _source_dir: html_transforms.renumber_footnotes(soup))

    def _images(self, options: dict) -> None:
        max_width = options.get("maxWidth", 650)
        if not isinstance(max_width, int) or max_width <= 0:
            raise PluginConfigError(f"images: maxWidth must be a positive int, got {max_width!r}")
        processor = ImageProcessor(self.assets, max_width=max_width)
        self.steps.append(
            lambda soup, source_dir: html_transforms.process_images(
                soup, source_dir, processor, self.assets
            )
        )

    def _responsive_iframe(self, options: dict) -> None:
        wrapper_style = options.get("wrapperStyle", "")
        self.steps.append(
            lambda soup, _source_dir: html_transforms.wrap_iframes(soup, wrapper_style)
        )

    def _syntax_highlight(self, options: dict) -> None:
        self.pygments_style = options.get("style", "default")
        self.extensions.append("codehilite")
        self.extension_configs["codehilite"] = {
            "css_class": "highlight",
            "guess_lang": False,
            "pygments_style": self.pygments_style,
        }
        marker = (options.get("inlineCode") or {}).get("marker")
        if marker:
            self.steps.append(
                lambda soup, _source_dir: html_transforms.highlight_inline_code(soup, marker)
            )

    def _copy_linked_files(self, options: dict) -> None:
        ignored = options.get("ignoreFileExtensions", [])
        self.steps.append(
            lambda soup, source_dir: html_transforms.copy_linked_files(
                soup, source_dir, self.assets, ignored
            )
        )

    def _smartypants(self, options: dict) -> None:
        self.extensions.append("smarty")
        if options:
            self.extension_configs["smarty"] = dict(options)

    def _katex(self, options: dict) -> None:
        strict = options.get("strict", "ignore")
        if strict not in ("ignore", "warn", "error"):
            raise PluginConfigError(f"katex: unsupported strict mode {strict!r}")
        self.extensions.append(MathExtension(strict="error" if strict == "error" else "ignore"))

    _configurators = {
        "numbered-footnotes": _numbered_footnotes,
        "images": _images,
        "responsive-iframe": _responsive_iframe,
        "syntax-highlight": _syntax_highlight,
        "copy-linked-files": _copy_linked_files,
        "smartypants": _smartypants,
        "katex": _katex,
    }

    # --- rendering ---

    def _markdown(self) -> markdown.Markdown:
        return markdown.Markdown(
            extensions=self.extensions,
            extension_configs=self.extension_configs,
            output_format="html",
        )

    def render(self, text: str, source_dir: Path) -> RenderedContent:
        html = self._markdown().convert(text)
        soup = html_transforms.parse_html(html)
        for step in self.steps:
            step(soup, Path(source_dir))
        body_text = html_transforms.plain_text(soup)
        return RenderedContent(
            html=str(soup),
            text=body_text,
            wordCount=html_transforms.count_words(body_text),
        )

    def stylesheet(self) -> str:
        """CSS for highlighted code, empty when highlighting is off."""
        if not self.pygments_style:
            return ""
        return HtmlFormatter(style=self.pygments_style).get_style_defs(".highlight")
