"""AST node types for parsed TML documents."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Doctype:
    """A !DOCTYPE directive; always a sibling, never a parent."""

    name: str


@dataclass(frozen=True, slots=True)
class Text:
    """Literal text. Multiline blocks keep their line breaks."""

    content: str


@dataclass(frozen=True, slots=True)
class Attribute:
    """An attribute entry; a value of True is a bare boolean flag."""

    name: str
    value: str | bool


@dataclass(frozen=True, slots=True)
class Tag:
    """An element with its selector parts, attributes, and children."""

    name: str
    classes: tuple[str, ...] = ()
    id: str | None = None
    attributes: tuple[Attribute, ...] = ()
    children: tuple[Node, ...] = ()
    self_closing: bool = False

    def __post_init__(self) -> None:
        if self.self_closing and self.children:
            raise ValueError(f"self-closing tag '{self.name}' cannot have children")


Node = Doctype | Tag | Text
