"""
Compiler for blade templates to Python fragments

Transforms template text into module-level Python source that the View
executes. Compilation is an explicit, ordered list of named steps over a
CompileState, each runnable on its own:

    tokenize  source text    -> flat token stream
    extends   token stream   -> token stream with a leading @extends hoisted
    emit      token stream   -> Python fragment text

Example:
    >>> Compiler().compile("Hello {{ name }}")
    "__echo('Hello ')\\n__echo(name)\\n"
"""

from typing import Callable, List, Optional, Tuple

from ..config import appsettings
from ..models.state import CompileState, pipeline
from ..models.tokens import Token, TokenKind
from .directives import DirectiveRegistry, echo_statement
from .tokenizer import Tokenizer
from .log import LOG


class CodeBuilder:
    """
    Accumulates indented fragment lines

    Tracks the current block depth so closing directives only need to
    dedent. An opened block that receives no statement gets a "pass".
    """

    def __init__(self, indent_unit: Optional[str] = None) -> None:
        self.lines: List[str] = []
        self.level = 0
        self.indent_unit = indent_unit if indent_unit is not None else appsettings.fragment_indent
        self.block_empty = False

    def line_add(self, code: str) -> None:
        """Add a statement at the current depth"""
        self.lines.append(self.indent_unit * self.level + code)
        self.block_empty = False

    def comment_add(self, text: str) -> None:
        """Add a comment line; comments do not count as block statements"""
        self.lines.append(self.indent_unit * self.level + "#" + text.rstrip())

    def block_open(self, header: str) -> None:
        """Add a block header (ending in ':') and indent"""
        self.line_add(header)
        self.level += 1
        self.block_empty = True

    def block_close(self) -> bool:
        """
        Dedent one block

        Returns:
            False if there was no open block to close
        """
        if self.level == 0:
            return False
        if self.block_empty:
            self.line_add("pass")
        self.level -= 1
        return True

    def block_continue(self, header: str) -> None:
        """
        Close the current block and open a sibling (elif/else)

        With no open block the header is written at depth 0, which yields a
        fragment Python refuses to compile when the view is rendered.
        """
        self.block_close()
        self.block_open(header)

    def source_get(self) -> str:
        """Fragment text; a trailing empty block is given its "pass" """
        if self.block_empty:
            self.line_add("pass")
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"


class Compiler:
    """
    Compiles blade template text to a Python fragment

    Responsibilities:
    - Run the named compile steps in order
    - Hoist a leading @extends into a trailing @include
    - Emit one fragment statement (or block header) per token
    """

    def __init__(self, registry: Optional[DirectiveRegistry] = None) -> None:
        """
        Initialize compiler

        Args:
            registry: Optional DirectiveRegistry (a default one is created)
        """
        self.directives = registry or DirectiveRegistry()
        self.steps: List[Tuple[str, Callable[[CompileState], CompileState]]] = [
            ('tokenize', self.source_tokenize),
            ('extends', self.extends_hoist),
            ('emit', self.fragment_emit),
        ]

    def compile(self, source: str, name: Optional[str] = None) -> str:
        """
        Compile template text to fragment text

        Args:
            source: Raw template text
            name: Optional logical view name, for log messages

        Returns:
            Python fragment text (empty string for an empty template)
        """
        state = pipeline(CompileState(source=source, name=name), *[step for _, step in self.steps])
        LOG(f"Compiled {name or '<string>'}: {len(state.tokens)} tokens, "
            f"{state.fragment.count(chr(10))} fragment lines", level=3)
        return state.fragment

    def step_run(self, step_name: str, state: CompileState) -> CompileState:
        """
        Run a single named compile step

        Raises:
            KeyError: If no step has that name
        """
        for name, step in self.steps:
            if name == step_name:
                return step(state)
        raise KeyError(f"Unknown compile step '{step_name}'")

    def source_tokenize(self, inputstate: CompileState) -> CompileState:
        """Step 'tokenize': split the source into tokens"""
        state = inputstate.copy()
        state.tokens = Tokenizer(state.source, registry=self.directives).tokenize()
        return state

    def extends_hoist(self, inputstate: CompileState) -> CompileState:
        """
        Step 'extends': move a leading @extends to the end as an @include

        Only applies when the very first token is @extends. Its whole line
        (the directive and anything after it up to the line break) is taken
        off the top and re-added after the rest of the document, separated
        from it by the line break it ended with, and with the directive
        turned into an @include of the same parent. The parent then renders
        after the child's sections have been captured.

        Example:
            "@extends('foo')\\r\\nfoo"  ->  tokens for "foo\\r\\n@include('foo')"
        """
        state = inputstate.copy()
        tokens = state.tokens
        if not tokens or not tokens[0].directive_is('extends'):
            return state

        head = tokens[0]
        first_line: List[Token] = []
        rest: List[Token] = []
        separator = head.trailing

        if separator:
            rest = tokens[1:]
        else:
            for index in range(1, len(tokens)):
                token = tokens[index]

                if token.trailing:
                    first_line.append(Token(
                        kind=token.kind, value=token.value, raw=token.raw,
                        arguments=token.arguments, line_number=token.line_number,
                        closed=token.closed,
                    ))
                    separator = token.trailing
                    rest = tokens[index + 1:]
                    break

                if token.kind == TokenKind.TEXT and '\n' in token.value:
                    cut = token.value.index('\n')
                    before, after = token.value[:cut], token.value[cut + 1:]
                    separator = "\n"
                    if before.endswith('\r'):
                        before, separator = before[:-1], "\r\n"
                    if before:
                        first_line.append(Token(kind=TokenKind.TEXT, value=before, raw=before,
                                                line_number=token.line_number))
                    if after:
                        rest.append(Token(kind=TokenKind.TEXT, value=after, raw=after,
                                          line_number=token.line_number + 1))
                    rest.extend(tokens[index + 1:])
                    break

                first_line.append(token)

        include = Token(
            kind=TokenKind.DIRECTIVE,
            value='include',
            raw=f"@include({head.arguments})",
            arguments=head.arguments,
            line_number=head.line_number,
        )

        hoisted = list(rest)
        if separator:
            hoisted.append(Token(kind=TokenKind.TEXT, value=separator, raw=separator,
                                 line_number=head.line_number))
        hoisted.append(include)
        hoisted.extend(first_line)

        LOG(f"Hoisted @extends({head.arguments}) to the end of {state.name or '<string>'}", level=3)
        state.tokens = hoisted
        return state

    def fragment_emit(self, inputstate: CompileState) -> CompileState:
        """
        Step 'emit': linear emission pass over the token stream

        Adjacent TEXT tokens (the extends step can leave them side by side)
        are written as a single output statement.
        """
        state = inputstate.copy()
        builder = CodeBuilder()
        pending_text: List[str] = []

        for token in state.tokens:
            if token.kind == TokenKind.TEXT:
                pending_text.append(token.value)
                continue

            if pending_text:
                builder.line_add(echo_statement(repr(''.join(pending_text))))
                pending_text = []

            self.token_emit(token, builder)

        if pending_text:
            builder.line_add(echo_statement(repr(''.join(pending_text))))

        state.fragment = builder.source_get()
        return state

    def token_emit(self, token: Token, builder: CodeBuilder) -> None:
        """
        Emit a single non-text token

        Args:
            token: COMMENT, ECHO or DIRECTIVE token
            builder: CodeBuilder receiving the lines
        """
        if token.kind == TokenKind.COMMENT:
            for line in token.value.split('\n'):
                builder.comment_add(line)
        elif token.kind == TokenKind.ECHO:
            builder.line_add(echo_statement(token.value))
        else:
            handler = self.directives.get(token.value)
            if handler is None:
                LOG(f"Unknown directive '@{token.value}'", level=2, warning=True)
                builder.line_add(echo_statement(repr(token.raw + token.trailing)))
                return
            handler(token, builder)
