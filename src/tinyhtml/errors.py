"""Error types with formatted source context."""

from __future__ import annotations

from tinyhtml.tokens import Position


class TmlError(Exception):
    """Base class for errors raised while compiling TML."""


class InvalidInput(TmlError):
    """Raised when the source is empty, not text, or contains forbidden characters."""


class InputTooLarge(TmlError):
    """Raised when the source exceeds the maximum accepted size."""


class GeneratorDisposed(TmlError):
    """Raised when a disposed generator is asked to render."""


class ParseError(TmlError):
    """Raised on the first parse error, with position and source context."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.message = message
        self.position = position
        self.source = source
        super().__init__(
            f"TML parse error at line {position.line}, column {position.column}: {message}"
        )

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column

    def format(self, filename: str = "input.tml") -> str:
        lines = self.source.split("\n")
        line_idx = self.position.line - 1
        col = self.position.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\r")
        else:
            source_line = ""

        pad = " " * (col - 1)

        line_num = str(self.position.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.position.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )
