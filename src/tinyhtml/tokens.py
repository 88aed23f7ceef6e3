"""Line types, source positions, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class LineKind(Enum):
    DOCTYPE = auto()  # !DOCTYPE <name>
    PIPE = auto()  # | text, or a bare | opening a multiline block
    TAG = auto()  # starts with an ASCII letter
    TEXT = auto()  # anything else, emitted verbatim


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column."""

    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Line:
    """A non-blank logical line with its indentation and trimmed remainder."""

    kind: LineKind
    indent: int
    text: str
    number: int
    column: int  # column where ``text`` starts

    def position(self, offset: int = 0) -> Position:
        """Position of the character at *offset* within ``text``."""
        return Position(self.number, self.column + offset)


DOCTYPE_PREFIX = "!DOCTYPE "
PIPE = "|"

# Elements rendered as <name /> that never take children
SELF_CLOSING_TAGS = frozenset({"br", "hr", "img", "input", "meta", "link", "source"})

# Parents whose text children are emitted without escaping
RAW_TEXT_TAGS = frozenset({"script", "style"})

MAX_INPUT_BYTES = 10 * 1024 * 1024
MAX_IDENTIFIER_LENGTH = 100
MAX_STRING_LENGTH = 10_000
MAX_ATTRIBUTES_PER_BLOCK = 50
# Deepest tag level accepted below the document root
MAX_NESTING_DEPTH = 128

# Code points rejected anywhere in the input
FORBIDDEN_CHARS = ("\x00", "\ufffe", "\uffff")

_ASCII_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
_IDENT_CHARS = _ASCII_LETTERS | frozenset("0123456789_-")
_QUOTES = ('"', "'")


def is_ident_char(ch: str) -> bool:
    """Return True if ch may appear in a tag, class, id, or attribute name."""
    return ch in _IDENT_CHARS


def is_ascii_letter(ch: str) -> bool:
    """Return True if ch is an ASCII letter."""
    return ch in _ASCII_LETTERS


def unquote(text: str) -> str:
    """Strip one pair of matching quotes when they enclose the whole text."""
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return text[1:-1]
    return text
