"""
Exceptions raised by the template store, composition runtime and renderer.

Malformed templates are never reported at compile time; they surface as a
RenderError when the compiled fragment executes.
"""


class BladeError(Exception):
    """Base class for all blade errors"""
    pass


class ViewNotFoundError(BladeError):
    """Raised when a view name (or its namespace) cannot be resolved"""

    def __init__(self, view: str, reason: str = "") -> None:
        self.view = view
        message = f"View '{view}' not found"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class SectionUnderflowError(BladeError):
    """Raised when @stop / @show is reached with no open section"""

    def __init__(self, message: str = "Cannot stop a section: no section is being captured") -> None:
        super().__init__(message)


class RenderError(BladeError):
    """
    Raised when a compiled fragment fails to compile or execute.

    The original exception is chained as __cause__. Any output the failing
    render had buffered is discarded before this propagates.
    """

    def __init__(self, view: str, error: BaseException) -> None:
        self.view = view
        self.error = error
        super().__init__(f"Error rendering view '{view}': {type(error).__name__}: {error}")
