"""
Tokenizer tests

Tests the flat token stream: text, comments, echos and directives, plus the
cases that must fall back to literal text.
"""

import pytest

from blade.lib.tokenizer import Tokenizer
from blade.models.tokens import TokenKind


def kinds(source):
    return [token.kind for token in Tokenizer(source).tokenize()]


class TestTextAndEcho:
    """Test plain text and {{ }} echos"""

    def test_empty_source(self):
        """Empty string tokenizes to an empty list"""
        assert Tokenizer("").tokenize() == []

    def test_plain_text_is_single_token(self):
        """Text without markup is one TEXT token"""
        tokens = Tokenizer("Hello\nWorld").tokenize()

        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.TEXT
        assert tokens[0].value == "Hello\nWorld"

    def test_echo_between_text(self):
        """Echo expression is stripped"""
        tokens = Tokenizer("Hello {{ name }}!").tokenize()

        assert kinds("Hello {{ name }}!") == [TokenKind.TEXT, TokenKind.ECHO, TokenKind.TEXT]
        assert tokens[1].value == "name"
        assert tokens[1].raw == "{{ name }}"

    def test_unclosed_echo_is_text(self):
        """An unclosed {{ stays literal"""
        tokens = Tokenizer("a {{ b").tokenize()

        assert len(tokens) == 1
        assert tokens[0].value == "a {{ b"

    def test_echo_does_not_span_lines(self):
        """A {{ closed only on a later line stays literal"""
        source = "var o = {{ a\n b }};"
        tokens = Tokenizer(source).tokenize()

        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.TEXT
        assert tokens[0].value == source

    def test_echo_after_unclosed_echo_line(self):
        tokens = Tokenizer("{{ a\n{{ b }}").tokenize()

        assert kinds("{{ a\n{{ b }}") == [TokenKind.TEXT, TokenKind.ECHO]
        assert tokens[0].value == "{{ a\n"
        assert tokens[1].value == "b"

    def test_empty_echo_is_text(self):
        """{{ }} with nothing inside stays literal"""
        tokens = Tokenizer("{{ }}").tokenize()

        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.TEXT


class TestComments:
    """Test closed and unclosed comments"""

    def test_closed_comment(self):
        """{{-- ... --}} is a closed comment"""
        tokens = Tokenizer("{{-- note --}}").tokenize()

        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.COMMENT
        assert tokens[0].value == " note "
        assert tokens[0].closed is True

    def test_block_comment(self):
        """{{-- alone on its line opens a comment spanning lines"""
        tokens = Tokenizer("{{--\na\nb --}}x").tokenize()

        assert tokens[0].kind == TokenKind.COMMENT
        assert tokens[0].value == "\na\nb "
        assert tokens[0].closed is True
        assert tokens[1].value == "x"

    def test_block_comment_crlf(self):
        tokens = Tokenizer("{{--\r\na --}}x").tokenize()

        assert tokens[0].value == "\r\na "
        assert tokens[1].value == "x"

    def test_close_on_later_line_is_text(self):
        """A comment with text on its first line ends at that line"""
        tokens = Tokenizer("{{-- a\nkeep --}}").tokenize()

        assert tokens[0].value == " a"
        assert tokens[0].closed is False
        assert tokens[1].kind == TokenKind.TEXT
        assert tokens[1].value == "keep --}}"

    def test_unclosed_comment_stops_before_next_comment(self):
        """Lines between an unclosed comment and a later --}} are kept"""
        tokens = Tokenizer("{{-- todo\n<p>Hi</p>\n{{-- note --}}done").tokenize()

        assert [t.kind for t in tokens] == [
            TokenKind.COMMENT, TokenKind.TEXT, TokenKind.COMMENT, TokenKind.TEXT
        ]
        assert tokens[1].value == "<p>Hi</p>\n"
        assert tokens[2].value == " note "

    def test_unclosed_comment_runs_to_end_of_line(self):
        """Without --}} the comment ends at the line break, which it swallows"""
        tokens = Tokenizer("{{-- note\nabc").tokenize()

        assert tokens[0].kind == TokenKind.COMMENT
        assert tokens[0].value == " note"
        assert tokens[0].closed is False
        assert tokens[0].trailing == "\n"
        assert tokens[1].value == "abc"

    def test_unclosed_comment_crlf(self):
        """A CRLF line break is swallowed whole"""
        tokens = Tokenizer("{{-- note\r\nabc").tokenize()

        assert tokens[0].value == " note"
        assert tokens[0].trailing == "\r\n"
        assert tokens[1].value == "abc"


class TestDirectives:
    """Test @directive recognition"""

    def test_directive_with_arguments(self):
        """Arguments are the text inside the outer parentheses"""
        tokens = Tokenizer("@section('title')").tokenize()

        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.DIRECTIVE
        assert tokens[0].value == "section"
        assert tokens[0].arguments == "'title'"
        assert tokens[0].raw == "@section('title')"

    def test_space_before_parenthesis(self):
        """Blanks between the name and '(' are allowed"""
        tokens = Tokenizer("@if (x)").tokenize()

        assert tokens[0].value == "if"
        assert tokens[0].arguments == "x"

    def test_nested_and_quoted_parentheses(self):
        """Parentheses inside strings and calls do not end the arguments"""
        tokens = Tokenizer("@if (f(')') and x)rest").tokenize()

        assert tokens[0].arguments == "f(')') and x"
        assert tokens[1].value == "rest"

    def test_directive_without_arguments(self):
        """@else, @stop and closers take no parentheses"""
        tokens = Tokenizer("@else (x)").tokenize()

        assert tokens[0].value == "else"
        assert tokens[0].arguments is None
        assert tokens[1].value == " (x)"

    def test_statement_directive_swallows_line_break(self):
        """One line break after a directive belongs to the directive"""
        tokens = Tokenizer("@stop\n\nabc").tokenize()

        assert tokens[0].trailing == "\n"
        assert tokens[1].value == "\nabc"

    def test_statement_directive_swallows_crlf(self):
        tokens = Tokenizer("@stop\r\nabc").tokenize()

        assert tokens[0].trailing == "\r\n"
        assert tokens[1].value == "abc"


class TestLiteralFallbacks:
    """Test markup that is not a directive and stays text"""

    @pytest.mark.parametrize("source", [
        "me@example.com",
        "@parent",
        "@unknown(1)",
        "@if x",
        "@if (a",
        "@section",
    ])
    def test_stays_text(self, source):
        """Non-directives are one TEXT token holding the source"""
        tokens = Tokenizer(source).tokenize()

        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.TEXT
        assert tokens[0].value == source

    def test_adjacent_text_is_merged(self):
        """Rejected candidates do not split the surrounding text"""
        tokens = Tokenizer("a @foo {{ b").tokenize()

        assert len(tokens) == 1


class TestLineNumbers:
    """Test line tracking"""

    def test_line_numbers(self):
        """Every token records the line it starts on"""
        tokens = Tokenizer("a\n@if (x)\nb {{ c }}").tokenize()

        assert [t.line_number for t in tokens] == [1, 2, 3, 3]
