"""TML parser: converts classified source lines into an AST forest."""

from __future__ import annotations

from dataclasses import dataclass

from tinyhtml.ast import Attribute, Doctype, Node, Tag, Text
from tinyhtml.errors import InputTooLarge, InvalidInput, ParseError
from tinyhtml.lexer import tokenize
from tinyhtml.tokens import (
    DOCTYPE_PREFIX,
    FORBIDDEN_CHARS,
    MAX_ATTRIBUTES_PER_BLOCK,
    MAX_IDENTIFIER_LENGTH,
    MAX_INPUT_BYTES,
    MAX_NESTING_DEPTH,
    MAX_STRING_LENGTH,
    PIPE,
    SELF_CLOSING_TAGS,
    Line,
    LineKind,
    is_ident_char,
    unquote,
)

# Lower than any real indentation, so every line is a child of the root
_ROOT_INDENT = -1


@dataclass(frozen=True, slots=True)
class TagHead:
    """Everything a tag line declares before its children."""

    name: str
    classes: tuple[str, ...]
    id: str | None
    attributes: tuple[Attribute, ...]
    content: str | None
    multiline: bool
    content_column: int


class Parser:
    """Recursive descent parser over the logical lines of a TML document."""

    def __init__(self, lines: list[Line], source: str) -> None:
        self._lines = lines
        self._source = source
        self._pos = 0

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self) -> Line | None:
        if self._pos < len(self._lines):
            return self._lines[self._pos]
        return None

    def _advance(self) -> Line:
        line = self._lines[self._pos]
        self._pos += 1
        return line

    def _deeper_than(self, indent: int) -> bool:
        line = self._peek()
        return line is not None and line.indent > indent

    # ------------------------------------------------------------------
    # Document level
    # ------------------------------------------------------------------

    def parse(self) -> tuple[Node, ...]:
        return self._parse_children(_ROOT_INDENT, 1)

    def _parse_children(self, parent_indent: int, depth: int) -> tuple[Node, ...]:
        """Collect lines deeper than *parent_indent*; *depth* is their nesting level."""
        children: list[Node] = []
        while self._deeper_than(parent_indent):
            children.append(self._parse_line(self._advance(), depth))
        return tuple(children)

    def _parse_line(self, line: Line, depth: int) -> Node:
        match line.kind:
            case LineKind.DOCTYPE:
                if depth > 1:
                    raise ParseError(
                        "!DOCTYPE is only allowed at the top level",
                        line.position(),
                        self._source,
                    )
                return Doctype(line.text[len(DOCTYPE_PREFIX) :].strip())
            case LineKind.PIPE:
                return self._parse_pipe(line)
            case LineKind.TAG:
                return self._parse_tag(line, depth)
            case _:
                return Text(line.text)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _parse_pipe(self, line: Line) -> Text:
        rest = line.text[len(PIPE) :].strip()
        if not rest:
            return Text(self._parse_block(line.indent))
        return Text(unquote(rest))

    def _parse_block(self, base_indent: int) -> str:
        """Consume every line deeper than *base_indent* as literal text."""
        parts: list[str] = []
        while self._deeper_than(base_indent):
            parts.append(self._advance().text)
        return "\n".join(parts)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def _parse_tag(self, line: Line, depth: int) -> Tag:
        if depth > MAX_NESTING_DEPTH:
            raise ParseError(
                f"nesting too deep: maximum {MAX_NESTING_DEPTH} levels allowed",
                line.position(),
                self._source,
            )
        head = TagHeadParser(line, self._source).parse()

        if head.name in SELF_CLOSING_TAGS:
            if head.content is not None or head.multiline:
                raise ParseError(
                    f"self-closing tag '{head.name}' cannot have content",
                    line.position(head.content_column),
                    self._source,
                )
            # Deeper lines are left for the enclosing collector
            return Tag(head.name, head.classes, head.id, head.attributes, self_closing=True)

        children: list[Node] = []
        if head.multiline:
            if self._deeper_than(line.indent):
                children.append(Text(self._parse_block(line.indent)))
        elif head.content:
            children.append(Text(head.content))
        children.extend(self._parse_children(line.indent, depth + 1))

        return Tag(head.name, head.classes, head.id, head.attributes, tuple(children))


class TagHeadParser:
    """Parses ``name.class#id[attr="v"]: content`` within a single line."""

    def __init__(self, line: Line, source: str) -> None:
        self._line = line
        self._text = line.text
        self._source = source
        self._pos = 0

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self) -> str:
        if self._pos < len(self._text):
            return self._text[self._pos]
        return ""

    def _at_end(self) -> bool:
        return self._pos >= len(self._text)

    def _advance(self) -> str:
        ch = self._text[self._pos]
        self._pos += 1
        return ch

    def _skip_ws(self) -> None:
        while self._peek() in (" ", "\t"):
            self._pos += 1

    def _error(self, message: str, offset: int | None = None) -> ParseError:
        if offset is None:
            offset = self._pos
        return ParseError(message, self._line.position(offset), self._source)

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def parse(self) -> TagHead:
        name = self._read_identifier("expected tag name")

        classes: list[str] = []
        while self._peek() == ".":
            self._advance()
            classes.append(self._read_identifier("expected class name after '.'"))

        tag_id: str | None = None
        if self._peek() == "#":
            self._advance()
            tag_id = self._read_identifier("expected id after '#'")

        attributes: list[Attribute] = []
        while self._peek() == "[":
            attributes.extend(self._parse_attribute_block())
            self._skip_ws()

        self._skip_ws()
        content: str | None = None
        multiline = False
        content_column = self._pos

        if self._peek() == ":":
            self._advance()
            self._skip_ws()
            content_column = self._pos
            if not self._at_end():
                content, multiline = self._parse_content()
        elif not self._at_end():
            raise self._error("expected ':' or end of line after tag head")

        return TagHead(
            name,
            tuple(classes),
            tag_id,
            tuple(attributes),
            content,
            multiline,
            content_column,
        )

    def _read_identifier(self, message: str) -> str:
        start = self._pos
        while is_ident_char(self._peek()):
            if self._pos - start >= MAX_IDENTIFIER_LENGTH:
                raise self._error(
                    f"identifier too long: maximum {MAX_IDENTIFIER_LENGTH} characters allowed",
                    start,
                )
            self._advance()
        if self._pos == start:
            raise self._error(message)
        return self._text[start : self._pos]

    def _parse_attribute_block(self) -> list[Attribute]:
        self._advance()  # consume '['
        attributes: list[Attribute] = []

        while True:
            self._skip_ws()
            if self._at_end():
                raise self._error("expected ']' to close attribute block")
            if self._peek() == "]":
                self._advance()
                return attributes

            name_start = self._pos
            name = self._read_identifier("expected attribute name")
            if len(attributes) >= MAX_ATTRIBUTES_PER_BLOCK:
                raise self._error(
                    f"too many attributes: maximum {MAX_ATTRIBUTES_PER_BLOCK} per block",
                    name_start,
                )

            self._skip_ws()
            if self._peek() == "=":
                self._advance()
                self._skip_ws()
                attributes.append(Attribute(name, self._parse_attribute_value()))
            else:
                attributes.append(Attribute(name, True))

    def _parse_attribute_value(self) -> str:
        if self._peek() in ('"', "'"):
            return self._read_string()
        start = self._pos
        while not self._at_end() and self._peek() not in (" ", "\t", "]"):
            self._advance()
        return self._text[start : self._pos]

    def _read_string(self) -> str:
        start = self._pos
        quote = self._advance()
        chars: list[str] = []

        while not self._at_end() and self._peek() != quote:
            if len(chars) >= MAX_STRING_LENGTH:
                raise self._error(
                    f"string too long: maximum {MAX_STRING_LENGTH} characters allowed",
                    start,
                )
            ch = self._advance()
            if ch == "\\":
                if self._at_end():
                    raise self._error("unexpected end of line in escaped string")
                ch = self._advance()
            chars.append(ch)

        if self._at_end():
            raise self._error(f"unterminated string: expected closing {quote!r}", start)
        self._advance()  # consume closing quote
        return "".join(chars)

    def _parse_content(self) -> tuple[str | None, bool]:
        """Parse what follows ':'; returns (content, is_multiline_sentinel)."""
        if self._peek() == PIPE:
            self._advance()
            rest = self._text[self._pos :].strip()
            if not rest:
                return None, True
            return unquote(rest), False

        if self._peek() == '"':
            content = self._read_string()
            self._skip_ws()
            if not self._at_end():
                raise self._error("unexpected text after quoted content")
            return content, False

        return unquote(self._text[self._pos :].strip()), False


def _validate_source(source: object) -> str:
    if not isinstance(source, str) or not source:
        raise InvalidInput("invalid input: must be a non-empty string")
    if len(source.encode("utf-8", errors="surrogatepass")) > MAX_INPUT_BYTES:
        raise InputTooLarge(
            f"input too large: exceeds the {MAX_INPUT_BYTES // (1024 * 1024)} MiB limit, "
            "consider splitting it into smaller files"
        )
    if any(ch in source for ch in FORBIDDEN_CHARS):
        raise InvalidInput("invalid input: contains null bytes or invalid Unicode characters")
    return source


def parse(source: str) -> tuple[Node, ...]:
    """Convenience function: parse TML source text and return the AST forest."""
    source = _validate_source(source)
    return Parser(tokenize(source), source).parse()
