"""--debug AST dump to stderr."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TextIO

from tinyhtml.ast import Doctype, Node, Tag, Text


def dump_ast(forest: Sequence[Node], *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable AST tree to *file*."""
    file.write("Document\n")
    for node in forest:
        _dump_node(node, 1, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_node(node: Node, depth: int, f: TextIO) -> None:
    match node:
        case Doctype(name=name):
            f.write(f"{_indent(depth)}Doctype({name!r})\n")
        case Text(content=content):
            f.write(f"{_indent(depth)}Text({content!r})\n")
        case Tag():
            _dump_tag(node, depth, f)


def _dump_tag(tag: Tag, depth: int, f: TextIO) -> None:
    selector = tag.name + "".join(f".{cls}" for cls in tag.classes)
    if tag.id:
        selector += f"#{tag.id}"
    suffix = " (self-closing)" if tag.self_closing else ""
    f.write(f"{_indent(depth)}Tag {selector}{suffix}\n")
    for attr in tag.attributes:
        value = "" if attr.value is True else f"={attr.value!r}"
        f.write(f"{_indent(depth + 1)}Attr {attr.name}{value}\n")
    for child in tag.children:
        _dump_node(child, depth + 1, f)
