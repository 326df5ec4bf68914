"""
blade - Template engine compiling @directive / {{ echo }} markup to Python

Templates are compiled once to Python fragments, cached on disk, and
executed against view data with section-based layout inheritance.
"""

__version__ = "1.0.0"

from .lib import (
    Compiler,
    Tokenizer,
    DirectiveRegistry,
    Environment,
    Loader,
    View,
    Composition,
    BladeError,
    ViewNotFoundError,
    SectionUnderflowError,
    RenderError,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Compiler",
    "Tokenizer",
    "DirectiveRegistry",
    "Environment",
    "Loader",
    "View",
    "Composition",
    "BladeError",
    "ViewNotFoundError",
    "SectionUnderflowError",
    "RenderError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
