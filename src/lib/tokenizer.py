"""
Tokenizer for blade template syntax

Transforms template text into a flat stream of tokens: literal text,
comments, echos and directives. There is no tree: block structure is only
recovered later, by the Compiler's single emission pass.

Recognised syntax:
- {{-- comment --}}   comment closed on the same line
- {{-- comment        unclosed comment, runs to end of line
- {{--\n ... --}}     block comment spanning lines
- {{ expression }}    single-line echo
- @name               directive without arguments (@else, @stop, @endif)
- @name(arguments)    directive with a parenthesised argument list

Only names registered in the DirectiveRegistry are directives. Anything that
does not tokenize cleanly (unregistered @words, an unclosed {{, a directive
missing its parentheses) is kept as literal text.

Example:
    >>> tokens = Tokenizer("Hello {{ name }}!").tokenize()
    >>> [t.kind.value for t in tokens]
    ['text', 'echo', 'text']
    >>> tokens[1].value
    'name'
"""

import re
from typing import List, Optional

from ..models.tokens import Token, TokenKind, DirectiveMatch
from ..models.directives import ArgumentMode


class Tokenizer:
    """
    Tokenizer for blade @directive / {{ echo }} syntax

    Handles:
    - Directive name validation against the registry
    - Balanced, quote-aware argument parentheses
    - Line breaks swallowed after statement directives
    - Line number tracking for every token
    """

    candidate_pattern = re.compile(r'\{\{|@')
    directive_pattern = re.compile(r'@(\w+)')

    def __init__(self, source: str, registry=None):
        """
        Initialize tokenizer with source text

        Args:
            source: Raw template text
            registry: Optional DirectiveRegistry for validating directive names

        Attributes:
            source: Source text being tokenized
            position: Current character position in source
            tokens: Accumulated token stream
            registry: DirectiveRegistry for validating directive names
        """
        self.source = source
        self.position = 0
        self.tokens: List[Token] = []
        self._line_position = 0
        self._line_number = 1

        if registry is None:
            from .directives import DirectiveRegistry
            registry = DirectiveRegistry()
        self.registry = registry

    def tokenize(self) -> List[Token]:
        """
        Tokenize source text into a flat token stream

        Returns:
            List of tokens in source order. Empty source gives an empty list.
            Adjacent literal text is always a single TEXT token.
        """
        self.tokens = []
        self.position = 0
        text_start = 0

        while True:
            match = self.candidate_pattern.search(self.source, self.position)
            if not match:
                break

            start = match.start()
            if self.source.startswith('{{--', start):
                token = self.comment_read(start)
            elif self.source.startswith('{{', start):
                token = self.echo_read(start)
            else:
                token = self.directive_read(start)

            if token is None:
                # Not a token after all, keep scanning past this character
                self.position = start + 1
                continue

            self.text_flush(text_start, start)
            self.tokens.append(token)
            text_start = self.position

        self.text_flush(text_start, len(self.source))
        return self.tokens

    def text_flush(self, start: int, end: int) -> None:
        """Append source[start:end] as a TEXT token if non-empty"""
        if end <= start:
            return
        text = self.source[start:end]
        self.tokens.append(Token(
            kind=TokenKind.TEXT,
            value=text,
            raw=text,
            line_number=self.lineNumber_at(start),
        ))

    def comment_read(self, start: int) -> Token:
        """
        Read a {{-- comment starting at start

        A --}} on the same line closes the comment. Otherwise the comment
        runs to the end of the line and swallows the line break. Only a
        {{-- with nothing after it on its line opens a block comment, which
        may span lines up to the next --}}.

        Example:
            "{{-- note --}}"      -> Token(COMMENT, " note ", closed=True)
            "{{-- note\\nabc"      -> Token(COMMENT, " note", closed=False,
                                            trailing="\\n")
            "{{--\\na\\nb --}}"     -> Token(COMMENT, "\\na\\nb ", closed=True)
        """
        body_start = start + 4
        newline = self.source.find('\n', body_start)
        line_end = len(self.source) if newline == -1 else newline

        close = self.source.find('--}}', body_start, line_end)
        if close == -1 and newline != -1 and self.source[body_start:line_end] in ('', '\r'):
            close = self.source.find('--}}', body_start)

        if close != -1:
            self.position = close + 4
            return Token(
                kind=TokenKind.COMMENT,
                value=self.source[body_start:close],
                raw=self.source[start:self.position],
                line_number=self.lineNumber_at(start),
                closed=True,
            )

        if newline == -1:
            body_end = len(self.source)
            trailing = ""
            self.position = len(self.source)
        else:
            body_end = newline
            trailing = "\n"
            if newline > body_start and self.source[newline - 1] == '\r':
                body_end = newline - 1
                trailing = "\r\n"
            self.position = newline + 1

        return Token(
            kind=TokenKind.COMMENT,
            value=self.source[body_start:body_end],
            raw=self.source[start:body_end],
            line_number=self.lineNumber_at(start),
            closed=False,
            trailing=trailing,
        )

    def echo_read(self, start: int) -> Optional[Token]:
        """
        Read a {{ expression }} starting at start

        Echos do not span lines: a {{ with no }} before the next line break
        is literal text.

        Returns:
            ECHO token, or None for an unclosed or empty echo
        """
        newline = self.source.find('\n', start + 2)
        line_end = len(self.source) if newline == -1 else newline
        close = self.source.find('}}', start + 2, line_end)
        if close == -1:
            return None

        expression = self.source[start + 2:close].strip()
        if not expression:
            return None

        self.position = close + 2
        return Token(
            kind=TokenKind.ECHO,
            value=expression,
            raw=self.source[start:self.position],
            line_number=self.lineNumber_at(start),
        )

    def directive_find(self, start: int) -> Optional[DirectiveMatch]:
        """
        Match a registered @name directive at start

        The "@" must not be preceded by a word character, so e-mail
        addresses such as "me@example.com" stay text.

        Returns:
            DirectiveMatch with name and span, or None
        """
        if start > 0 and (self.source[start - 1].isalnum() or self.source[start - 1] == '_'):
            return None

        match = self.directive_pattern.match(self.source, start)
        if not match:
            return None

        name = match.group(1)
        if self.registry.spec_get(name) is None:
            return None

        return DirectiveMatch(name=name, position=start, end=match.end())

    def directive_read(self, start: int) -> Optional[Token]:
        """
        Read an @directive (and its argument list) starting at start

        Returns:
            DIRECTIVE token, or None if the text is not a well-formed
            registered directive
        """
        match = self.directive_find(start)
        if match is None:
            return None

        spec = self.registry.spec_get(match.name)
        end = match.end
        arguments = None

        if spec.arguments == ArgumentMode.REQUIRED:
            paren = end
            while paren < len(self.source) and self.source[paren] in ' \t':
                paren += 1
            if paren >= len(self.source) or self.source[paren] != '(':
                return None

            close = self.paren_findMatching(paren)
            if close is None:
                return None

            arguments = self.source[paren + 1:close]
            end = close + 1

        raw = self.source[start:end]
        trailing = ""
        if self.source.startswith('\r\n', end):
            trailing = "\r\n"
        elif self.source.startswith('\n', end):
            trailing = "\n"

        self.position = end + len(trailing)
        return Token(
            kind=TokenKind.DIRECTIVE,
            value=match.name,
            raw=raw,
            arguments=arguments,
            line_number=self.lineNumber_at(start),
            trailing=trailing,
        )

    def paren_findMatching(self, start_pos: int) -> Optional[int]:
        """
        Find matching closing parenthesis using depth tracking

        Parentheses inside single- or double-quoted strings are ignored,
        and a backslash escapes the next character inside a string.

        Args:
            start_pos: Character position of opening '(' in source

        Returns:
            Position of the matching ')', or None if EOF is reached first

        Example:
            For source "@if (f(')') and x)" at position 4:
            Returns 17

            Depth tracking: (1 f(2 ')' )1 and x)0
        """
        depth = 0
        quote = None
        pos = start_pos

        while pos < len(self.source):
            char = self.source[pos]
            if quote:
                if char == '\\':
                    pos += 2
                    continue
                if char == quote:
                    quote = None
            elif char in ('"', "'"):
                quote = char
            elif char == '(':
                depth += 1
            elif char == ')':
                depth -= 1
                if depth == 0:
                    return pos
            pos += 1

        return None

    def lineNumber_at(self, position: int) -> int:
        """
        Line number of a source position

        Tokens are read left to right, so the count of line breaks is carried
        from the last call instead of rescanning from the start.
        """
        if position < self._line_position:
            self._line_number -= self.source.count('\n', position, self._line_position)
        else:
            self._line_number += self.source.count('\n', self._line_position, position)
        self._line_position = position
        return self._line_number
