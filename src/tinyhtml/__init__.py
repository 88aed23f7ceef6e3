"""TinyHTML: compiles indentation-based TML markup to HTML."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tinyhtml.formatter import Formatter
    from tinyhtml.generator import GeneratorOptions

__version__ = "0.1.0"


def compile(
    source: str,
    options: GeneratorOptions | None = None,
    formatter: Formatter | None = None,
) -> str:
    """Parse TML source and generate HTML."""
    from tinyhtml.generator import generate
    from tinyhtml.parser import parse

    return generate(parse(source), options, formatter)
