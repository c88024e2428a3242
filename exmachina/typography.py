import logging
import math
import re
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

TABLET_MEDIA_QUERY = "@media only screen and (max-width:768px)"

GENERIC_FONT_FAMILIES = {
    "serif",
    "sans-serif",
    "monospace",
    "cursive",
    "fantasy",
    "system-ui",
    "inherit",
}

Styles = Dict[str, Dict[str, Any]]


def _number(value: float) -> str:
    return f"{round(value, 5):g}"


def _px(value: Union[str, float]) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    return float(value.strip().removesuffix("px"))


def gray(lightness: float, hue: float = 0, dark_background: bool = False) -> str:
    """Translucent black (or white) that reads as `lightness` percent gray."""
    saturation = 0 if hue == 0 else 5
    if dark_background:
        return f"hsla({_number(hue)},{saturation}%,100%,{_number(lightness / 100)})"
    return f"hsla({_number(hue)},{saturation}%,0%,{_number(1 - lightness / 100)})"


def establish_baseline(base_font_size: str, base_line_height: str) -> Dict[str, str]:
    font_size_px = _px(base_font_size)
    return {
        "fontSize": f"{_number(font_size_px / 16 * 100)}%",
        "lineHeight": _number(_px(base_line_height) / font_size_px),
    }


def _kebab(name: str) -> str:
    return re.sub(r"([A-Z])", r"-\1", name).lower()


def _font_stack(families: List[str]) -> str:
    return ",".join(
        family if family in GENERIC_FONT_FAMILIES else f"'{family}'"
        for family in families
    )


def _merge(base: Styles, extra: Styles) -> Styles:
    merged = {key: dict(value) for key, value in base.items()}
    for selector, declarations in extra.items():
        if selector.startswith("@media"):
            merged[selector] = _merge(merged.get(selector, {}), declarations)
        else:
            merged.setdefault(selector, {}).update(declarations)
    return merged


def _render_block(selector: str, declarations: Dict[str, Any]) -> str:
    body = "".join(
        f"{_kebab(prop)}:{value};" for prop, value in declarations.items()
    )
    return f"{selector}{{{body}}}"


def compile_styles(styles: Styles) -> str:
    parts = []
    for selector, declarations in styles.items():
        if selector.startswith("@media"):
            inner = "".join(
                _render_block(inner_selector, inner_declarations)
                for inner_selector, inner_declarations in declarations.items()
            )
            parts.append(f"{selector}{{{inner}}}")
        else:
            parts.append(_render_block(selector, declarations))
    return "".join(parts)


class Typography:
    """
    Vertical-rhythm typography theme.

    Sizes are expressed in rem relative to the base font size, so a rhythm
    of one line is exactly `base_line_height` rem.
    """

    def __init__(
        self,
        base_font_size: str = "16px",
        base_line_height: float = 1.45,
        scale_ratio: float = 2,
        header_font_family: Optional[List[str]] = None,
        body_font_family: Optional[List[str]] = None,
        header_color: str = "inherit",
        body_color: str = "hsla(0,0%,0%,0.8)",
        header_weight: Union[str, int] = "bold",
        body_weight: Union[str, int] = "normal",
        bold_weight: Union[str, int] = "bold",
        block_margin_bottom: float = 1,
        min_line_padding: float = 2,
        round_to_nearest_half_line: bool = True,
        override_styles: Optional[Callable[["Typography"], Styles]] = None,
    ):
        self.base_font_size = base_font_size
        self.base_line_height = base_line_height
        self.scale_ratio = scale_ratio
        self.header_font_family = header_font_family or ["sans-serif"]
        self.body_font_family = body_font_family or ["serif"]
        self.header_color = header_color
        self.body_color = body_color
        self.header_weight = header_weight
        self.body_weight = body_weight
        self.bold_weight = bold_weight
        self.block_margin_bottom = block_margin_bottom
        self.min_line_padding = min_line_padding
        self.round_to_nearest_half_line = round_to_nearest_half_line
        self.override_styles = override_styles
        self._injected: Optional[str] = None

    @property
    def base_font_size_px(self) -> float:
        return _px(self.base_font_size)

    @property
    def base_line_height_px(self) -> float:
        return self.base_font_size_px * self.base_line_height

    def rhythm(self, lines: float = 1) -> str:
        return f"{_number(lines * self.base_line_height)}rem"

    def lines_for_font_size(self, font_size_px: float) -> float:
        line_height_px = self.base_line_height_px
        if self.round_to_nearest_half_line:
            lines = math.ceil(2 * font_size_px / line_height_px) / 2
        else:
            lines = math.ceil(font_size_px / line_height_px)
        if lines * line_height_px - font_size_px < self.min_line_padding * 2:
            lines += 0.5 if self.round_to_nearest_half_line else 1
        return lines

    def scale(self, value: float = 0) -> Dict[str, str]:
        """Font size `scale_ratio ** value` times the base, snapped to the rhythm."""
        font_size_px = self.base_font_size_px * self.scale_ratio**value
        lines = self.lines_for_font_size(font_size_px)
        return {
            "fontSize": f"{_number(font_size_px / self.base_font_size_px)}rem",
            "lineHeight": self.rhythm(lines),
        }

    def base_styles(self) -> Styles:
        block_elements = (
            "h1,h2,h3,h4,h5,h6,hgroup,ul,ol,dl,dd,p,figure,pre,table,fieldset,"
            "blockquote,form,noscript,iframe,img,hr,address"
        )
        styles: Styles = {
            "html": {
                "font": (
                    f"{_number(self.base_font_size_px / 16 * 100)}%/"
                    f"{_number(self.base_line_height)} "
                    f"{_font_stack(self.body_font_family)}"
                ),
                "boxSizing": "border-box",
                "overflowY": "scroll",
            },
            "*,*:before,*:after": {"boxSizing": "inherit"},
            "body": {
                "color": self.body_color,
                "fontFamily": _font_stack(self.body_font_family),
                "fontWeight": self.body_weight,
                "wordWrap": "break-word",
                "fontKerning": "normal",
            },
            "img": {"maxWidth": "100%"},
            block_elements: {
                "marginLeft": 0,
                "marginRight": 0,
                "marginTop": 0,
                "paddingBottom": 0,
                "paddingLeft": 0,
                "paddingRight": 0,
                "paddingTop": 0,
                "marginBottom": self.rhythm(self.block_margin_bottom),
            },
            "b,strong,dt,th": {"fontWeight": self.bold_weight},
            "hr": {
                "background": gray(80),
                "border": "none",
                "height": "1px",
                "marginBottom": f"calc({self.rhythm(1)} - 1px)",
            },
            "ol,ul": {
                "listStylePosition": "outside",
                "listStyleImage": "none",
                "marginLeft": self.rhythm(1),
            },
            "li": {"marginBottom": f"calc({self.rhythm(1)} / 2)"},
            "code,kbd,pre,samp": {**self.scale(-1 / 5)},
            "table": {"borderCollapse": "collapse", "width": "100%"},
            "td,th": {
                "textAlign": "left",
                "borderBottom": f"1px solid {gray(88)}",
                "paddingTop": self.rhythm(1 / 2),
                "paddingBottom": f"calc({self.rhythm(1 / 2)} - 1px)",
            },
            "h1,h2,h3,h4,h5,h6": {
                "color": self.header_color,
                "fontFamily": _font_stack(self.header_font_family),
                "fontWeight": self.header_weight,
                "textRendering": "optimizeLegibility",
            },
            "h1": self.scale(5 / 5),
            "h2": self.scale(3 / 5),
            "h3": self.scale(2 / 5),
            "h4": self.scale(0 / 5),
            "h5": self.scale(-1 / 5),
            "h6": self.scale(-1.5 / 5),
        }
        return styles

    def to_json(self) -> Styles:
        styles = self.base_styles()
        if self.override_styles:
            styles = _merge(styles, self.override_styles(self))
        return styles

    def to_string(self) -> str:
        return compile_styles(self.to_json())

    def inject_styles(self) -> str:
        """Compile the stylesheet once; later calls return the cached copy."""
        if self._injected is None:
            self._injected = self.to_string()
            logger.debug(f"Injected typography styles ({len(self._injected)} chars)")
        return self._injected

    @property
    def injected_styles(self) -> str:
        return self.inject_styles()


def _moraga_overrides(typo: Typography) -> Styles:
    vr = establish_baseline("16px", "24.88px")
    return {
        "h1 a,h2 a,h3 a,h4 a,h5 a,h6 a": {"fontWeight": typo.header_weight},
        "a": {"fontWeight": 400, "color": "#419eda", "textDecoration": "none"},
        "a:hover": {"color": "#2a6496", "textDecoration": "underline"},
        "blockquote": {
            **typo.scale(1 / 5),
            "color": gray(40),
            "paddingLeft": typo.rhythm(3 / 4),
            "marginLeft": 0,
            "borderLeft": f"{typo.rhythm(1 / 4)} solid {gray(87)}",
        },
        TABLET_MEDIA_QUERY: {
            "html": {**vr},
            "blockquote": {
                "marginLeft": typo.rhythm(-3 / 4),
                "marginRight": 0,
                "paddingLeft": typo.rhythm(1 / 2),
            },
            "table": {**typo.scale(-1 / 5)},
        },
    }


typography = Typography(
    base_font_size="18px",
    base_line_height=1.56,
    scale_ratio=2.5,
    header_font_family=["Merriweather", "sans-serif"],
    body_font_family=["Source Sans Pro", "sans-serif"],
    header_color="hsla(0,0%,0%,0.85)",
    body_color="hsla(0,0%,0%,0.7)",
    header_weight="200",
    body_weight=400,
    bold_weight=700,
    override_styles=_moraga_overrides,
)

typography.inject_styles()

rhythm = typography.rhythm
scale = typography.scale
