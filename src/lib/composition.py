"""
Composition runtime for blade renders

A Composition is created for every top-level render and handed to every
view rendered inside it (includes, @each rows, parent layouts) as the
fragment's __blade binding. It owns:

- the output buffer stack that __echo writes to
- the SectionState shared by the whole template tree
- a frame per rendering view, so a failing view discards exactly its own
  buffers and open sections

Because nothing here lives on the Environment, renders running at the
same time (threads, interleaved coroutines) never see each other's sections.
"""

import io
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..config import appsettings
from .directives import RUNTIME_NAME
from .exceptions import BladeError
from .sections import SectionState
from .log import LOG


class Composition:
    """
    Per-render section, buffer and view-data runtime

    Methods called from compiled fragments:
        section_start / section_stop / section_yield   @section, @stop, @show
        content_yield                                  @yield
        make                                           @include
        each_show                                      @each
    """

    def __init__(self, environment: Any, sections: Optional[SectionState] = None) -> None:
        """
        Args:
            environment: Environment providing shared data and views
            sections: Existing section state to continue (fresh if None)
        """
        self.environment = environment
        self.sections = sections if sections is not None else SectionState()
        self.buffers: List[io.StringIO] = []
        self.frames: List[Tuple[int, int]] = []

    def echo(self, value: Any) -> None:
        """
        Write a value to the innermost output buffer

        None writes nothing; anything else is written as str(value). The
        value is converted before the buffer is chosen, since converting a
        View renders it and renders push and pop their own buffers.

        Raises:
            BladeError: If no buffer is open
        """
        if value is None:
            return
        text = str(value)
        if not self.buffers:
            raise BladeError("No output buffer is open: echo is only valid while rendering or capturing")
        self.buffers[-1].write(text)

    @contextmanager
    def buffer_capture(self) -> Iterator[io.StringIO]:
        """
        Capture output for one view render

        Pushes a fresh buffer and records how deep the buffer and section
        stacks were. On every exit, normal or not, both stacks are cut back
        to that depth: the view's output is discarded unless the caller
        read it from the yielded buffer first, and sections the view left
        open are dropped.

        Yields:
            The StringIO collecting this view's output
        """
        buffer_depth = len(self.buffers)
        section_depth = len(self.sections.stack)
        buffer = io.StringIO()
        self.buffers.append(buffer)
        self.frames.append((buffer_depth, section_depth))
        try:
            yield buffer
        finally:
            self.frames.pop()
            del self.buffers[buffer_depth:]
            dropped = self.sections.truncate(section_depth)
            if dropped:
                LOG(f"Discarded unclosed section(s): {', '.join(dropped)}", level=1, warning=True)

    def section_start(self, name: str, content: Optional[str] = None) -> None:
        """
        Start a section

        Without content (None or ''), output from here on is captured until
        the matching section_stop(). With content, the section is extended
        directly and nothing is captured.
        """
        if content is not None and content != '':
            self.section_extend(name, str(content))
            return
        self.sections.push(name)
        self.buffers.append(io.StringIO())

    def section_inject(self, name: str, content: str) -> None:
        """Define a section inline"""
        self.section_start(name, content)

    def section_stop(self) -> str:
        """
        Finish the innermost section capture

        Returns:
            Name of the section that was stopped

        Raises:
            SectionUnderflowError: If the current view has no open section
        """
        floor = self.frames[-1][1] if self.frames else 0
        name = self.sections.pop(floor)
        content = self.buffers.pop().getvalue()
        self.section_extend(name, content)
        return name

    def section_extend(self, name: str, content: str) -> None:
        """Store content for a section (see SectionState.extend)"""
        self.sections.extend(name, content)

    def section_yield(self) -> str:
        """Stop the innermost section and return its content"""
        return self.content_yield(self.section_stop())

    def content_yield(self, name: str) -> str:
        """Content of a section, or '' if it was never defined"""
        return self.sections.content_get(name)

    def make(self, view: str, parameters: Optional[Dict[str, Any]] = None,
             scope: Optional[Dict[str, Any]] = None) -> Any:
        """
        Create a view that renders inside this composition

        Args:
            view: Logical view name
            parameters: Explicit parameters for the view
            scope: Caller's variables (a fragment's locals()); names starting
                   with "__" are runtime bindings and are not forwarded

        Returns:
            View sharing this composition's sections; str() renders it
        """
        from .view import View

        data = {key: value for key, value in (scope or {}).items() if not key.startswith('__')}
        data.update(parameters or {})
        return View(self.environment, view, data, composition=self)

    def each_show(self, view: str, data: Any, iterator: str, empty: Optional[str] = None) -> str:
        """
        Render a view once per entry of a collection

        Mappings are iterated by item, anything else with enumerate(). Each
        render gets the entry's key as "key" and its value under iterator.

        Args:
            view: View rendered per entry
            data: Collection to iterate (None counts as empty)
            iterator: Variable name the entry's value is bound to
            empty: Output for an empty collection: "raw|text" gives text,
                   anything else is a view name rendered without parameters

        Returns:
            Concatenated renders, or the empty output
        """
        if empty is None:
            empty = appsettings.raw_prefix

        if data is None:
            entries = []
        elif isinstance(data, Mapping):
            entries = list(data.items())
        else:
            entries = list(enumerate(data))

        if entries:
            return ''.join(
                str(self.make(view, {'key': key, iterator: value}))
                for key, value in entries
            )

        raw = appsettings.rawText_extract(empty)
        if raw is not None:
            return raw
        return str(self.make(empty))

    def viewData_get(self, parameters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Data visible to a view: shared data overlaid with its parameters

        Args:
            parameters: The view's own parameters (win over shared data)

        Returns:
            Merged dict including the __blade back-reference to this composition
        """
        data = dict(self.environment.shared_get())
        data.update(parameters or {})
        data[RUNTIME_NAME] = self
        return data
