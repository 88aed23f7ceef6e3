"""Tests for parse errors, limits, and input validation."""

from __future__ import annotations

import pytest

from tinyhtml.errors import InputTooLarge, InvalidInput, ParseError, TmlError
from tinyhtml.parser import parse
from tinyhtml.tokens import MAX_INPUT_BYTES, MAX_NESTING_DEPTH


class TestInputValidation:
    def test_empty_string(self) -> None:
        with pytest.raises(InvalidInput, match="non-empty string"):
            parse("")

    @pytest.mark.parametrize("value", [None, b"div", 42])
    def test_non_string(self, value: object) -> None:
        with pytest.raises(InvalidInput):
            parse(value)  # type: ignore[arg-type]

    @pytest.mark.parametrize("char", ["\x00", "\ufffe", "\uffff"])
    def test_forbidden_characters(self, char: str) -> None:
        with pytest.raises(InvalidInput, match="null bytes or invalid Unicode"):
            parse(f"div\n  p: a{char}b")

    def test_too_large(self) -> None:
        with pytest.raises(InputTooLarge, match="10 MiB"):
            parse("1" * (MAX_INPUT_BYTES + 1))

    def test_size_measured_in_utf8_bytes(self) -> None:
        source = "é" * (MAX_INPUT_BYTES // 2 + 1)
        assert len(source) < MAX_INPUT_BYTES
        with pytest.raises(InputTooLarge):
            parse(source)

    def test_exact_limit_accepted(self) -> None:
        forest = parse("1" * MAX_INPUT_BYTES)
        assert len(forest) == 1

    def test_whitespace_only_gives_empty_forest(self) -> None:
        assert parse("   \n\n  ") == ()

    def test_all_errors_share_base(self) -> None:
        with pytest.raises(TmlError):
            parse("")


class TestTagHeadErrors:
    def test_empty_class(self) -> None:
        with pytest.raises(ParseError, match="expected class name"):
            parse("div.")

    def test_empty_id(self) -> None:
        with pytest.raises(ParseError, match="expected id"):
            parse("div#")

    def test_trailing_text(self) -> None:
        with pytest.raises(ParseError, match="expected ':' or end of line"):
            parse("div foo")

    def test_id_before_class_rejected(self) -> None:
        with pytest.raises(ParseError):
            parse("div#main.wide")

    def test_identifier_limit(self) -> None:
        parse("a" * 100)
        with pytest.raises(ParseError, match="identifier too long"):
            parse("a" * 101)

    def test_class_name_limit(self) -> None:
        with pytest.raises(ParseError, match="identifier too long"):
            parse("div." + "c" * 101)

    def test_quoted_content_followed_by_text(self) -> None:
        with pytest.raises(ParseError, match="unexpected text after quoted content"):
            parse('p: "a" b')

    def test_self_closing_with_content(self) -> None:
        with pytest.raises(ParseError, match="self-closing tag 'br' cannot have content"):
            parse("br: text")

    def test_self_closing_with_block(self) -> None:
        with pytest.raises(ParseError, match="self-closing tag 'img' cannot have content"):
            parse("img: |\n  text")


class TestAttributeErrors:
    def test_missing_close_bracket(self) -> None:
        with pytest.raises(ParseError, match="expected ']'"):
            parse('a[href="x"')

    def test_missing_name(self) -> None:
        with pytest.raises(ParseError, match="expected attribute name"):
            parse("a[=x]")

    def test_too_many(self) -> None:
        attrs = " ".join(f"a{i}" for i in range(51))
        with pytest.raises(ParseError, match="too many attributes: maximum 50 per block"):
            parse(f"div[{attrs}]")

    def test_limit_is_per_block(self) -> None:
        first = " ".join(f"a{i}" for i in range(50))
        second = " ".join(f"b{i}" for i in range(50))
        parse(f"div[{first}][{second}]")


class TestStringErrors:
    def test_unterminated(self) -> None:
        with pytest.raises(ParseError, match="unterminated string"):
            parse('a[href="x]')

    def test_unterminated_content(self) -> None:
        with pytest.raises(ParseError, match="unterminated string"):
            parse('p: "never closed')

    def test_backslash_at_end(self) -> None:
        with pytest.raises(ParseError, match="unexpected end of line in escaped string"):
            parse('a[t="x\\')

    def test_length_limit(self) -> None:
        parse('p: "' + "x" * 10_000 + '"')
        with pytest.raises(ParseError, match="string too long"):
            parse('p: "' + "x" * 10_001 + '"')


class TestErrorPositions:
    def test_line_and_column(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse('div\n  p[a="x')
        err = exc_info.value
        assert err.line == 2
        assert err.column == 7
        assert "line 2, column 7" in str(err)

    def test_leading_blank_lines_counted(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("\n\ndiv.\n")
        assert exc_info.value.line == 3
        assert exc_info.value.column == 5

    def test_content_column(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("br: x")
        assert exc_info.value.column == 5

    def test_first_error_only(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("div.\np#")
        assert exc_info.value.line == 1


def _nested_divs(levels: int) -> str:
    return "\n".join(" " * i + "div" for i in range(levels))


class TestNestingErrors:
    def test_deepest_level_accepted(self) -> None:
        (node,) = parse(_nested_divs(MAX_NESTING_DEPTH))
        depth = 1
        while node.children:
            (node,) = node.children
            depth += 1
        assert depth == MAX_NESTING_DEPTH

    def test_one_level_too_deep(self) -> None:
        with pytest.raises(ParseError, match="nesting too deep: maximum 128 levels") as exc_info:
            parse(_nested_divs(MAX_NESTING_DEPTH + 1))
        assert exc_info.value.line == MAX_NESTING_DEPTH + 1
        assert exc_info.value.column == MAX_NESTING_DEPTH + 1

    def test_very_deep_document(self) -> None:
        with pytest.raises(ParseError, match="nesting too deep"):
            parse(_nested_divs(350))

    def test_text_below_deepest_tag(self) -> None:
        source = _nested_divs(MAX_NESTING_DEPTH) + "\n" + " " * MAX_NESTING_DEPTH + "| leaf"
        parse(source)

    def test_indented_doctype(self) -> None:
        with pytest.raises(ParseError, match="only allowed at the top level") as exc_info:
            parse("html\n  !DOCTYPE html")
        assert exc_info.value.line == 2
        assert exc_info.value.column == 3

    def test_doctype_after_root_sibling(self) -> None:
        forest = parse("p: a\n!DOCTYPE html")
        assert len(forest) == 2
