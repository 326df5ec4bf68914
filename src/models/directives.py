"""
Directive specification and metadata models

Defines the structure and categories of blade directives for
tokenizing, emission and registry management.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Callable, Set


class DirectiveCategory(Enum):
    """
    Categories of blade directives

    Used for organization, documentation generation, and validation.
    """
    INHERITANCE = "inheritance"  # @extends
    CONTROL = "control"          # @if, @foreach, @unless, @endif ...
    COMPOSITION = "composition"  # @include, @each
    SECTION = "section"          # @section, @stop, @show, @yield


class ArgumentMode(Enum):
    """
    Whether a directive is written with a parenthesised argument list

    REQUIRED directives written without parentheses are not directives at
    all and pass through as text. NONE directives never consume a following
    parenthesis, so "@else (x)" leaves " (x)" as text.
    """
    NONE = "none"
    REQUIRED = "required"


@dataclass
class DirectiveSpec:
    """
    Specification for a blade directive

    Defines metadata and the emission handler for a directive.
    Used by DirectiveRegistry to manage available directives.

    Attributes:
        name: Directive name (without leading @)
        category: Category for organization
        description: Human-readable description
        handler: Emission function (token, builder) -> None
        arguments: Whether the directive takes a parenthesised argument list
    """
    name: str
    category: DirectiveCategory
    description: str
    handler: Callable
    arguments: ArgumentMode = ArgumentMode.NONE


# Words that look like directives but are placeholders resolved at render time
RESERVED_WORDS: Set[str] = {
    'parent',  # @parent - replaced inside section content by Composition
}


def reserved_is(directive_name: str) -> bool:
    """Check if a directive name is reserved"""
    return directive_name in RESERVED_WORDS
