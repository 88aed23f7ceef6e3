"""HTML generator: renders a TML AST forest to HTML text."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from tinyhtml.ast import Doctype, Node, Tag, Text
from tinyhtml.errors import GeneratorDisposed
from tinyhtml.formatter import ExternalFormatter, Formatter, FormatterError
from tinyhtml.tokens import RAW_TEXT_TAGS

logger = logging.getLogger(__name__)

# Single text children shorter than this render on the tag's line
INLINE_TEXT_LIMIT = 80


class IndentStyle(Enum):
    SPACES = "spaces"
    TABS = "tabs"


@dataclass(frozen=True, slots=True)
class GeneratorOptions:
    """Output settings; nothing else affects the generated text."""

    indent_width: int = 2
    indent_style: IndentStyle = IndentStyle.SPACES
    minify: bool = False
    use_external_formatter: bool = True

    def __post_init__(self) -> None:
        if self.indent_width < 0:
            raise ValueError(f"indent_width must not be negative, got {self.indent_width}")
        if not isinstance(self.indent_style, IndentStyle):
            object.__setattr__(self, "indent_style", IndentStyle(self.indent_style))


# ---------------------------------------------------------------------------
# HTML escaping
# ---------------------------------------------------------------------------

_ESCAPES = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;"})


def escape_html(text: str) -> str:
    """Escape text for HTML content and attribute values."""
    return text.translate(_ESCAPES)


def _is_raw_text_parent(name: str) -> bool:
    return name.lower() in RAW_TEXT_TAGS


# ---------------------------------------------------------------------------
# Fallback normalizer
# ---------------------------------------------------------------------------

_BLANK_RUN = re.compile(r"\n\s*\n\s*\n")
_EDGE_BLANKS = re.compile(r"\A\s*\n|\n\s*\Z")


def normalize_html(html: str) -> str:
    """Tidy rendered HTML when the external formatter is unavailable.

    Collapses runs of blank lines to one, drops leading blank lines and the
    trailing newline, and strips trailing whitespace from every line.
    """
    html = _BLANK_RUN.sub("\n\n", html)
    html = _EDGE_BLANKS.sub("", html)
    return "\n".join(line.rstrip() for line in html.split("\n"))


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class _Renderer:
    """Renders one forest into one buffer; a fresh instance per call."""

    def __init__(self, options: GeneratorOptions) -> None:
        self._options = options
        self._newline = "" if options.minify else "\n"
        self._parts: list[str] = []

    def render(self, forest: Sequence[Node]) -> str:
        for node in forest:
            self._render_node(node, 0, "")
            self._parts.append(self._newline)
        return "".join(self._parts)

    def _indent(self, depth: int) -> str:
        if self._options.minify:
            return ""
        if self._options.indent_style is IndentStyle.TABS:
            return "\t" * depth
        return " " * (depth * self._options.indent_width)

    def _render_node(self, node: Node, depth: int, parent: str) -> None:
        match node:
            case Doctype(name=name):
                self._parts.append(f"<!DOCTYPE {name}>")
            case Tag():
                self._render_tag(node, depth)
            case Text(content=content):
                self._render_text(content, depth, parent)

    def _render_tag(self, tag: Tag, depth: int) -> None:
        pad = self._indent(depth)
        name = tag.name
        attrs = _render_attributes(tag)

        if tag.self_closing:
            self._parts.append(f"{pad}<{name}{attrs} />")
            return

        if not tag.children:
            self._parts.append(f"{pad}<{name}{attrs}></{name}>")
            return

        match tag.children:
            case (Text(content=content),):
                if _is_raw_text_parent(name):
                    text = content.strip()
                else:
                    text = escape_html(content)
                if len(text) < INLINE_TEXT_LIMIT and "\n" not in text:
                    self._parts.append(f"{pad}<{name}{attrs}>{text}</{name}>")
                    return

        self._parts.append(f"{pad}<{name}{attrs}>")
        self._parts.append(self._newline)
        for child in tag.children:
            self._render_node(child, depth + 1, name)
            self._parts.append(self._newline)
        self._parts.append(f"{pad}</{name}>")

    def _render_text(self, content: str, depth: int, parent: str) -> None:
        raw = _is_raw_text_parent(parent)

        def emit(text: str) -> str:
            return text if raw else escape_html(text)

        if self._options.minify:
            lines = [line.strip() for line in content.split("\n")]
            joiner = "\n" if raw else " "
            self._parts.append(emit(joiner.join(line for line in lines if line)))
            return

        lines = content.split("\n")
        pad = self._indent(depth)
        if len(lines) == 1:
            self._parts.append(pad + emit(content.strip()))
            return

        last = len(lines) - 1
        for idx, line in enumerate(lines):
            stripped = line.strip()
            if not stripped:
                continue
            self._parts.append(pad + emit(stripped))
            if idx < last:
                self._parts.append("\n")


def _render_attributes(tag: Tag) -> str:
    attrs: list[str] = []
    if tag.classes:
        attrs.append(f'class="{" ".join(tag.classes)}"')
    if tag.id:
        attrs.append(f'id="{tag.id}"')
    for attr in tag.attributes:
        if attr.value is True:
            attrs.append(attr.name)
        elif attr.value is not False:
            attrs.append(f'{attr.name}="{escape_html(attr.value)}"')
    return " " + " ".join(attrs) if attrs else ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class Generator:
    """Renders AST forests to HTML, optionally through an external formatter."""

    def __init__(
        self,
        options: GeneratorOptions | None = None,
        formatter: Formatter | None = None,
    ) -> None:
        self._options = options or GeneratorOptions()
        self._formatter = formatter or ExternalFormatter()
        self._disposed = False

    @property
    def options(self) -> GeneratorOptions:
        return self._options

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        self._disposed = True

    def __enter__(self) -> Generator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    def generate(self, forest: Sequence[Node], options: GeneratorOptions | None = None) -> str:
        """Render *forest* to HTML. *options* override the generator's for this call."""
        if self._disposed:
            raise GeneratorDisposed("generator has been disposed")

        opts = options or self._options
        html = _Renderer(opts).render(forest)

        if opts.minify:
            return html

        if opts.use_external_formatter:
            try:
                return self._formatter.format(html)
            except FormatterError as exc:
                logger.debug("external formatter unavailable, using fallback: %s", exc)

        return normalize_html(html)


def generate(
    forest: Sequence[Node],
    options: GeneratorOptions | None = None,
    formatter: Formatter | None = None,
) -> str:
    """Convenience function: render a forest with a fresh generator."""
    with Generator(options, formatter) as generator:
        return generator.generate(forest)
