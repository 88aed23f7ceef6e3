"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from tinyhtml.ast import Node, Tag, Text
from tinyhtml.generator import GeneratorOptions, generate
from tinyhtml.lexer import tokenize
from tinyhtml.parser import parse
from tinyhtml.tokens import Line

# Rendering without the external formatter keeps output deterministic
PLAIN = GeneratorOptions(use_external_formatter=False)


@pytest.fixture
def lex():
    """Return a helper that tokenizes source into logical lines."""

    def _lex(source: str) -> list[Line]:
        return tokenize(source)

    return _lex


@pytest.fixture
def to_html():
    """Return a helper that compiles TML source with the built-in normalizer."""

    def _to_html(source: str, **overrides: object) -> str:
        options = GeneratorOptions(use_external_formatter=False, **overrides)
        return generate(parse(source), options)

    return _to_html


def assert_tag(
    node: Node,
    name: str,
    num_children: int = 0,
    *,
    classes: tuple[str, ...] = (),
    id: str | None = None,
) -> Tag:
    """Assert basic properties of a Tag node and return it."""
    assert isinstance(node, Tag), f"Expected Tag, got {type(node).__name__}"
    assert node.name == name, f"Expected name '{name}', got '{node.name}'"
    assert node.classes == classes, f"Expected classes {classes}, got {node.classes}"
    assert node.id == id, f"Expected id {id!r}, got {node.id!r}"
    assert len(node.children) == num_children, (
        f"Expected {num_children} children, got {len(node.children)}"
    )
    return node


def text_of(node: Node) -> str:
    """Return the content of a Text node."""
    assert isinstance(node, Text), f"Expected Text, got {type(node).__name__}"
    return node.content
