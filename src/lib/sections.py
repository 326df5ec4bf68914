"""
Section stack and section table

SectionState holds the names of sections being captured (a LIFO stack, so
captures may nest) and the finalized content of every section defined so
far. Entries in the table are only ever written whole, by extend(); a
section being captured is not visible until it is stopped.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config import appsettings
from .exceptions import SectionUnderflowError


@dataclass
class SectionState:
    """
    Per-render section state

    Attributes:
        stack: Names of sections currently being captured, innermost last
        table: Section name -> finalized content
    """
    stack: List[str] = field(default_factory=list)
    table: Dict[str, str] = field(default_factory=dict)

    def push(self, name: str) -> None:
        """Begin capturing a section"""
        self.stack.append(name)

    def pop(self, floor: int = 0) -> str:
        """
        Stop capturing the innermost section

        Args:
            floor: Stack depth that belongs to enclosing templates; entries
                   at or below it cannot be popped

        Returns:
            Name of the section that was being captured

        Raises:
            SectionUnderflowError: If no section above floor is open
        """
        if len(self.stack) <= floor:
            raise SectionUnderflowError()
        return self.stack.pop()

    def extend(self, name: str, content: str, placeholder: Optional[str] = None) -> None:
        """
        Store section content, folding it into any earlier definition

        If the section already has content, every placeholder ("@parent")
        inside that earlier content is replaced by the new content and the
        result is stored. Otherwise the new content is stored as-is.

        A child template captures its sections before its parent layout
        runs, so the earlier content is the child's and the new content is
        the parent's: "@parent" in a child marks where the parent's version
        of the section goes.

        Example:
            >>> state = SectionState()
            >>> state.extend('a', 'X@parentY')
            >>> state.extend('a', 'Z')
            >>> state.table['a']
            'XZY'
        """
        if placeholder is None:
            placeholder = appsettings.parent_placeholder

        if name in self.table:
            self.table[name] = self.table[name].replace(placeholder, content)
        else:
            self.table[name] = content

    def content_get(self, name: str) -> str:
        """Finalized content of a section, or '' if never defined"""
        return self.table.get(name, '')

    def truncate(self, depth: int) -> List[str]:
        """
        Drop open sections above depth

        Returns:
            Names of the sections that were dropped, outermost first
        """
        dropped = self.stack[depth:]
        del self.stack[depth:]
        return dropped
