"""
View: a named template plus parameters, ready to render

get() executes the view's compiled fragment against its merged view data and
returns the produced text. Failures never leak partial output: the render's
buffers are discarded before the exception propagates.
"""

from typing import Any, Dict, Optional

from .directives import ECHO_NAME
from .exceptions import BladeError, RenderError
from .log import LOG


class View:
    """
    A renderable view

    Item access reads and writes the view's parameters:
        view['title'] = 'Home'
    """

    def __init__(self, environment: Any, view: str, parameters: Optional[Dict[str, Any]] = None,
                 composition: Any = None) -> None:
        """
        Args:
            environment: Environment providing the loader and shared data
            view: Logical view name
            parameters: Parameters for this view
            composition: Composition of the render this view belongs to;
                         None for a top-level view (a fresh one is created)
        """
        self.environment = environment
        self.view = view
        self.parameters: Dict[str, Any] = dict(parameters or {})
        self.composition = composition

    def with_value(self, key: str, value: Any) -> "View":
        """Add a parameter to the view"""
        self.parameters[key] = value
        return self

    def get(self) -> str:
        """
        Render the view

        Returns:
            Produced text

        Raises:
            ViewNotFoundError: If the view (or a view it includes) is missing
            SectionUnderflowError: If a template stops a section it never started
            RenderError: If the fragment fails to compile or raises
        """
        from .composition import Composition

        composition = self.composition or Composition(self.environment)
        self.environment.composing_fire(self)
        data = composition.viewData_get(self.parameters)

        LOG(f"Rendering '{self.view}'", level=2)
        with composition.buffer_capture() as buffer:
            try:
                code = self.environment.code_get(self.view)
                namespace = dict(data)
                namespace[ECHO_NAME] = composition.echo
                exec(code, namespace)
            except BladeError:
                raise
            except Exception as e:
                raise RenderError(self.view, e) from e
            return buffer.getvalue()

    def __getitem__(self, key: str) -> Any:
        return self.parameters[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.parameters[key] = value

    def __delitem__(self, key: str) -> None:
        del self.parameters[key]

    def __contains__(self, key: str) -> bool:
        return key in self.parameters

    def __str__(self) -> str:
        return self.get()
