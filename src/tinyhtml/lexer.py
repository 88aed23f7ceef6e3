"""TML lexer: splits source text into classified, non-blank logical lines."""

from __future__ import annotations

from tinyhtml.tokens import DOCTYPE_PREFIX, PIPE, Line, LineKind, is_ascii_letter


def classify(text: str) -> LineKind:
    """Classify the trimmed remainder of a line."""
    if text.startswith(DOCTYPE_PREFIX):
        return LineKind.DOCTYPE
    if text.startswith(PIPE):
        return LineKind.PIPE
    if is_ascii_letter(text[0]):
        return LineKind.TAG
    return LineKind.TEXT


def tokenize(source: str) -> list[Line]:
    """Trim the source and return its non-blank lines.

    Indentation counts leading space characters only. Line numbers refer to
    the untrimmed source so that error positions match what the user wrote.
    """
    stripped = source.strip()
    if not stripped:
        return []

    leading = source[: len(source) - len(source.lstrip())]
    first_line = leading.count("\n") + 1

    lines: list[Line] = []
    for idx, raw in enumerate(stripped.split("\n")):
        indent = len(raw) - len(raw.lstrip(" "))
        rest = raw[indent:]
        text = rest.strip()
        if not text:
            continue
        column = indent + len(rest) - len(rest.lstrip()) + 1
        lines.append(Line(classify(text), indent, text, first_line + idx, column))
    return lines
