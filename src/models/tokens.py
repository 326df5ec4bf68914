"""
Tokenizer-specific data models

Type-safe structures for the flat token stream produced by the Tokenizer.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class TokenKind(Enum):
    """
    Kinds of tokens in a template

    The compiler emits one kind of fragment statement per token kind.
    """
    TEXT = "text"            # literal output
    COMMENT = "comment"      # {{-- ... --}} or {{-- ... (to end of line)
    ECHO = "echo"            # {{ expression }}
    DIRECTIVE = "directive"  # @name or @name(arguments)


@dataclass
class DirectiveMatch:
    """
    Result of finding a directive pattern in source text

    Returned by Tokenizer.directive_find() when an @name pattern naming a
    registered directive is located.

    Attributes:
        name: The directive name (e.g., "section", "endforeach")
        position: Character position of the "@" in source
        end: Character position just past the directive name

    Example:
        For source "<p>@yield('title')</p>" at position 0:
        DirectiveMatch(name="yield", position=3, end=9)
    """
    name: str
    position: int
    end: int


@dataclass
class Token:
    """
    A single element of the flat token stream

    Attributes:
        kind: What the token is (text, comment, echo or directive)
        value: Literal text for TEXT, comment body for COMMENT, expression
               for ECHO, directive name for DIRECTIVE
        raw: Exact source slice the token was read from (directives that
             pass through unchanged are re-emitted from this)
        arguments: Text between the directive's outer parentheses, or None
                   when the directive was written without parentheses
        line_number: Source line number where the token starts
        closed: For COMMENT tokens, whether an explicit --}} closed it
        trailing: Line break swallowed directly after a statement directive
                  ("" when nothing was swallowed)

    Example:
        For source "@section('title')\\n" at line 1:
        Token(kind=TokenKind.DIRECTIVE, value="section",
              raw="@section('title')", arguments="'title'",
              line_number=1, trailing="\\n")
    """
    kind: TokenKind
    value: str
    raw: str = ""
    arguments: Optional[str] = None
    line_number: int = 1
    closed: bool = True
    trailing: str = ""

    def directive_is(self, name: str) -> bool:
        """Check if this token is the directive with the given name"""
        return self.kind == TokenKind.DIRECTIVE and self.value == name
