"""
Custom Pygments lexer for blade syntax highlighting

Provides syntax highlighting for @directive / {{ echo }} markup, and builds
the HTML listings written by the command line's --listing option (template
source next to its compiled Python fragment, under a legend built from the
directive registry's descriptions). Directive names highlighted by the
lexer come from the registry's categories.

Token types:
- Comment.Multiline: {{-- comments --}}
- Keyword: control directives (@if, @foreach, @endif ...)
- Name.Decorator: section and composition directives (@section, @yield ...)
- Punctuation: {{ }} and directive parentheses
- Python tokens: echo expressions and directive arguments (via PythonLexer)
- Other: template text
"""

import html
from typing import List, Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import RegexLexer, bygroups, using
from pygments.lexers import PythonLexer
from pygments.token import Comment, Keyword, Name, Other, Punctuation, Text

from ..models.directives import DirectiveCategory
from ..models.tokens import TokenKind
from .directives import DirectiveRegistry
from .tokenizer import Tokenizer


def names_join(registry: DirectiveRegistry, *categories: DirectiveCategory) -> str:
    """Regex alternation of the directive names in categories, longest first"""
    names = [spec.name for category in categories for spec in registry.directives_listByCategory(category)]
    return '|'.join(sorted(names, key=len, reverse=True))


_registry = DirectiveRegistry()
CONTROL_DIRECTIVES = names_join(_registry, DirectiveCategory.CONTROL)
COMPOSITION_DIRECTIVES = names_join(
    _registry, DirectiveCategory.INHERITANCE, DirectiveCategory.COMPOSITION, DirectiveCategory.SECTION
)


class BladeLexer(RegexLexer):
    """
    Lexer for blade templates

    Example:
        @section('title'){{ page.title }}@stop

    Tokens:
        @section → Name.Decorator
        ('title') → Punctuation + Python
        {{ → Punctuation
        page.title → Python
    """

    name = 'Blade'
    aliases = ['blade']
    filenames = ['*.blade.html']

    tokens = {
        'root': [
            # Comments: block (opening line empty), closed on one line, or to end of line
            (r'\{\{--\r?\n(.|\n)*?--\}\}', Comment.Multiline),
            (r'\{\{--.*?--\}\}', Comment.Multiline),
            (r'\{\{--.*?$', Comment.Single),

            # Echo expressions
            (r'(\{\{)([^\n]+?)(\}\})', bygroups(Punctuation, using(PythonLexer), Punctuation)),

            # Directives with arguments (single level of nested parentheses)
            (r'(@(?:%s))(\s*)(\()((?:[^()]|\([^()]*\))*)(\))' % CONTROL_DIRECTIVES,
             bygroups(Keyword, Text, Punctuation, using(PythonLexer), Punctuation)),
            (r'(@(?:%s))(\s*)(\()((?:[^()]|\([^()]*\))*)(\))' % COMPOSITION_DIRECTIVES,
             bygroups(Name.Decorator, Text, Punctuation, using(PythonLexer), Punctuation)),

            # Bare directives
            (r'@(?:%s)\b' % CONTROL_DIRECTIVES, Keyword),
            (r'@(?:%s)\b' % COMPOSITION_DIRECTIVES, Name.Decorator),

            # Section parent placeholder
            (r'@parent\b', Name.Builtin),

            # Everything else is template text
            (r'[^@{]+', Other),
            (r'[@{]', Other),
        ],
    }


def get_lexer() -> BladeLexer:
    """
    Get the BladeLexer instance

    Returns:
        BladeLexer instance ready for use with Pygments
    """
    return BladeLexer()


def directives_used(source: str, registry: Optional[DirectiveRegistry] = None) -> List[str]:
    """Names of the directives a template uses, in order of first use"""
    names: List[str] = []
    for token in Tokenizer(source, registry=registry).tokenize():
        if token.kind == TokenKind.DIRECTIVE and token.value not in names:
            names.append(token.value)
    return names


def legend_render(names: List[str], registry: DirectiveRegistry) -> str:
    """HTML table describing each directive in names"""
    if not names:
        return ""
    rows = "".join(
        f"<tr><td><code>@{html.escape(name)}</code></td>"
        f"<td>{registry.spec_get(name).category.value}</td>"
        f"<td>{html.escape(registry.spec_get(name).description)}</td></tr>\n"
        for name in names
    )
    return f"<table>\n{rows}</table>\n"


def listing_render(view: str, source: str, fragment: str, style: str = 'default',
                   registry: Optional[DirectiveRegistry] = None) -> str:
    """
    Build a standalone HTML page showing a template and its compiled fragment

    The page opens with a legend of the directives the template uses.

    Args:
        view: View name, used as the page title
        source: Template text
        fragment: Compiled Python fragment
        style: Pygments style name
        registry: Directive registry the template was compiled with

    Returns:
        HTML document with inline styles
    """
    registry = registry or _registry
    formatter = HtmlFormatter(style=style, noclasses=True)
    title = html.escape(view)

    return (
        "<!DOCTYPE html>\n"
        f"<html><head><meta charset=\"utf-8\"><title>{title}</title></head><body>\n"
        f"<h2>{title}: directives</h2>\n"
        f"{legend_render(directives_used(source, registry), registry)}"
        f"<h2>{title}: template</h2>\n"
        f"{highlight(source, BladeLexer(), formatter)}\n"
        f"<h2>{title}: compiled fragment</h2>\n"
        f"{highlight(fragment, PythonLexer(), formatter)}\n"
        "</body></html>\n"
    )
