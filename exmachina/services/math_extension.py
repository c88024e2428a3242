import html
import logging
import re

from latex2mathml.converter import convert as latex_to_mathml
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor
from markdown.preprocessors import Preprocessor

from exmachina.errors import ContentError

logger = logging.getLogger(__name__)

# `$x$` but not `$5 and $10`: no whitespace just inside the delimiters,
# no digit right after the closing one.
INLINE_MATH_RE = r"(?<![\\$])\$(?![\s$])([^$\n]+?)(?<![\s\\])\$(?!\d)"
INLINE_DISPLAY_MATH_RE = r"(?<!\\)\$\$([^$\n]+?)\$\$"


def render_math(source: str, display: bool, strict: str = "ignore") -> str:
    """Render a TeX formula to MathML wrapped in a math container."""
    mode = "block" if display else "inline"
    tag = "div" if display else "span"
    css_class = "math math-display" if display else "math math-inline"
    try:
        mathml = latex_to_mathml(source.strip(), display=mode)
    except Exception as e:
        if strict == "error":
            raise ContentError(f"Cannot render formula {source!r}: {e}") from e
        logger.warning(f"Cannot render formula {source!r}: {e}")
        return (
            f'<{tag} class="{css_class} math-error" title="{html.escape(str(e))}">'
            f"{html.escape(source)}</{tag}>"
        )
    return f'<{tag} class="{css_class}">{mathml}</{tag}>'


class InlineMathProcessor(InlineProcessor):
    def __init__(self, pattern, md, display: bool, strict: str):
        super().__init__(pattern, md)
        self.display = display
        self.strict = strict

    def handleMatch(self, m, data):
        rendered = render_math(m.group(1), self.display, self.strict)
        return self.md.htmlStash.store(rendered), m.start(0), m.end(0)


class DisplayMathPreprocessor(Preprocessor):
    """Pulls `$$ ... $$` blocks out before block parsing sees them."""

    def __init__(self, md, strict: str):
        super().__init__(md)
        self.strict = strict

    def run(self, lines):
        output = []
        buffer = None
        for line in lines:
            stripped = line.strip()
            if buffer is None:
                if stripped.startswith("$$"):
                    rest = stripped[2:]
                    if "$$" not in rest:
                        buffer = [rest] if rest else []
                    elif rest.endswith("$$") and "$$" not in rest[:-2]:
                        output.extend(self._emit(rest[:-2]))
                    else:
                        # Several formulas on one line are inline display math.
                        output.append(line)
                    continue
                output.append(line)
            elif stripped.endswith("$$"):
                head = stripped[:-2]
                if head:
                    buffer.append(head)
                output.extend(self._emit("\n".join(buffer)))
                buffer = None
            else:
                buffer.append(line)
        if buffer is not None:
            # Unterminated block: leave it as text.
            output.append("$$")
            output.extend(buffer)
        return output

    def _emit(self, source: str):
        rendered = render_math(source, display=True, strict=self.strict)
        return ["", self.md.htmlStash.store(rendered), ""]


class MathExtension(Extension):
    def __init__(self, **kwargs):
        self.config = {
            "strict": ["ignore", "'ignore' renders broken formulas as text, 'error' fails"],
        }
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        strict = self.getConfig("strict")
        # After fenced code (25) so code blocks keep their dollars.
        md.preprocessors.register(
            DisplayMathPreprocessor(md, strict), "display_math", 24
        )
        # Between backticks (190) and backslash escapes (180).
        md.inlinePatterns.register(
            InlineMathProcessor(INLINE_DISPLAY_MATH_RE, md, True, strict),
            "inline_display_math",
            186,
        )
        md.inlinePatterns.register(
            InlineMathProcessor(INLINE_MATH_RE, md, False, strict),
            "inline_math",
            185,
        )
