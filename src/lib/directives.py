"""
Directive implementations for blade

Each directive handler emits Python fragment lines for one DIRECTIVE token
into the Compiler's CodeBuilder. Uses DirectiveSpec for metadata and for the
Tokenizer's argument rules.

Fragments run at module level inside a namespace holding the view data plus
two runtime bindings:
    __blade   the Composition of the current render
    __echo    writes to the current output buffer
"""

from typing import Any, Callable, Dict, List, Optional

from ..models.directives import DirectiveSpec, DirectiveCategory, ArgumentMode, reserved_is
from ..models.tokens import Token
from .log import LOG


RUNTIME_NAME = '__blade'
ECHO_NAME = '__echo'


def echo_statement(expression: str) -> str:
    """Fragment statement writing an expression to the output buffer"""
    return f"{ECHO_NAME}({expression})"


def runtime_call(method: str, arguments: Optional[str] = None) -> str:
    """Fragment expression calling a Composition method"""
    return f"{RUNTIME_NAME}.{method}({arguments or ''})"


class DirectiveRegistry:
    """
    Registry of directive specifications and handlers

    Maps directive names to DirectiveSpec objects containing metadata
    and emission handlers.
    """

    def __init__(self) -> None:
        """Initialize the directive registry and register all built-in directives"""
        self.specs: Dict[str, DirectiveSpec] = {}
        self.inheritanceDirectives_register()
        self.controlDirectives_register()
        self.compositionDirectives_register()
        self.sectionDirectives_register()

    def register(self, spec: DirectiveSpec) -> None:
        """
        Register a directive specification

        Raises:
            ValueError: If the name is reserved for a render-time placeholder
        """
        if reserved_is(spec.name):
            raise ValueError(f"'@{spec.name}' is reserved and cannot be registered as a directive")
        self.specs[spec.name] = spec

    def get(self, name: str) -> Optional[Callable[[Token, Any], None]]:
        """
        Get directive handler by name

        Args:
            name: Directive name to look up

        Returns:
            Handler function or None if not found
        """
        spec = self.spec_get(name)
        return spec.handler if spec else None

    def spec_get(self, name: str) -> Optional[DirectiveSpec]:
        """Get full directive specification by name"""
        return self.specs.get(name)

    def directives_listByCategory(self, category: DirectiveCategory) -> List[DirectiveSpec]:
        """Get all directives in a category, in registration order"""
        return [spec for spec in self.specs.values() if spec.category == category]

    def inheritanceDirectives_register(self) -> None:
        """
        Register @extends

        A leading @extends never reaches its handler: the Compiler's extends
        step has already turned it into an @include at the end of the
        document. Anywhere else it is left in the output untouched.
        """

        def extends_handler(token: Token, builder: Any) -> None:
            """Handle a non-leading @extends(...) - pass through as text"""
            LOG(f"@extends on line {token.line_number} is not the first token; kept as text", level=2)
            builder.line_add(echo_statement(repr(token.raw + token.trailing)))

        self.register(DirectiveSpec(
            name='extends',
            category=DirectiveCategory.INHERITANCE,
            description='Render a parent layout after this template (must be the first token)',
            handler=extends_handler,
            arguments=ArgumentMode.REQUIRED
        ))

    def controlDirectives_register(self) -> None:
        """Register control structures: conditionals and loops"""

        def make_opening(keyword: str) -> Callable[[Token, Any], None]:
            """Factory for block openings: @if, @foreach, @for, @while"""
            def handler(token: Token, builder: Any) -> None:
                """Open a Python block headed by the directive's arguments"""
                builder.block_open(f"{keyword} {token.arguments.strip()}:")
            return handler

        def closing_handler(token: Token, builder: Any) -> None:
            """Handle @endif, @endforeach, @endfor, @endwhile, @endunless"""
            if not builder.block_close():
                LOG(f"@{token.value} on line {token.line_number} closes no open block", level=1, warning=True)

        def elseif_handler(token: Token, builder: Any) -> None:
            """Handle @elseif(cond) - continue the enclosing if"""
            builder.block_continue(f"elif {token.arguments.strip()}:")

        def else_handler(token: Token, builder: Any) -> None:
            """Handle @else - continue the enclosing if"""
            builder.block_continue("else:")

        def unless_handler(token: Token, builder: Any) -> None:
            """Handle @unless(cond) - negated if"""
            builder.block_open(f"if not ({token.arguments.strip()}):")

        openings = [
            ('if', 'if', 'Conditional block'),
            ('foreach', 'for', 'Loop over an iterable'),
            ('for', 'for', 'Loop (same as @foreach)'),
            ('while', 'while', 'Loop while a condition holds'),
        ]

        for name, keyword, desc in openings:
            self.register(DirectiveSpec(
                name=name,
                category=DirectiveCategory.CONTROL,
                description=desc,
                handler=make_opening(keyword),
                arguments=ArgumentMode.REQUIRED
            ))

        self.register(DirectiveSpec(
            name='elseif',
            category=DirectiveCategory.CONTROL,
            description='Alternative condition of an @if block',
            handler=elseif_handler,
            arguments=ArgumentMode.REQUIRED
        ))

        self.register(DirectiveSpec(
            name='else',
            category=DirectiveCategory.CONTROL,
            description='Fallback branch of an @if / @unless block',
            handler=else_handler
        ))

        self.register(DirectiveSpec(
            name='unless',
            category=DirectiveCategory.CONTROL,
            description='Conditional block entered when the condition is false',
            handler=unless_handler,
            arguments=ArgumentMode.REQUIRED
        ))

        for name in ('endif', 'endforeach', 'endfor', 'endwhile', 'endunless'):
            self.register(DirectiveSpec(
                name=name,
                category=DirectiveCategory.CONTROL,
                description=f'Close the block opened by @{name[3:]}',
                handler=closing_handler
            ))

    def compositionDirectives_register(self) -> None:
        """Register cross-template directives: @include and @each"""

        def include_handler(token: Token, builder: Any) -> None:
            """
            Handle @include('view'[, parameters])

            The caller's variables (locals() of the module-level fragment)
            are forwarded so the included view sees the caller's scope.
            """
            arguments = f"{token.arguments}, scope=locals()"
            builder.line_add(echo_statement(runtime_call('make', arguments)))

        def each_handler(token: Token, builder: Any) -> None:
            """Handle @each('view', data, 'iterator'[, 'empty'])"""
            builder.line_add(echo_statement(runtime_call('each_show', token.arguments)))

        self.register(DirectiveSpec(
            name='include',
            category=DirectiveCategory.COMPOSITION,
            description="Render another view with the caller's variables",
            handler=include_handler,
            arguments=ArgumentMode.REQUIRED
        ))

        self.register(DirectiveSpec(
            name='each',
            category=DirectiveCategory.COMPOSITION,
            description='Render a view once per entry of a collection',
            handler=each_handler,
            arguments=ArgumentMode.REQUIRED
        ))

    def sectionDirectives_register(self) -> None:
        """Register section capture and output directives"""

        def section_handler(token: Token, builder: Any) -> None:
            """Handle @section('name') and @section('name', content)"""
            builder.line_add(runtime_call('section_start', token.arguments))

        def stop_handler(token: Token, builder: Any) -> None:
            """Handle @stop - close the innermost open section"""
            builder.line_add(runtime_call('section_stop'))

        def show_handler(token: Token, builder: Any) -> None:
            """Handle @show - close the innermost section and output it"""
            builder.line_add(echo_statement(runtime_call('section_yield')))

        def yield_handler(token: Token, builder: Any) -> None:
            """Handle @yield('name') - output a section ('' if undefined)"""
            builder.line_add(echo_statement(runtime_call('content_yield', token.arguments)))

        self.register(DirectiveSpec(
            name='section',
            category=DirectiveCategory.SECTION,
            description='Start capturing a section, or define it inline',
            handler=section_handler,
            arguments=ArgumentMode.REQUIRED
        ))

        self.register(DirectiveSpec(
            name='stop',
            category=DirectiveCategory.SECTION,
            description='Finish capturing the current section',
            handler=stop_handler
        ))

        self.register(DirectiveSpec(
            name='show',
            category=DirectiveCategory.SECTION,
            description='Finish capturing the current section and output it',
            handler=show_handler
        ))

        self.register(DirectiveSpec(
            name='yield',
            category=DirectiveCategory.SECTION,
            description='Output the content of a section',
            handler=yield_handler,
            arguments=ArgumentMode.REQUIRED
        ))
