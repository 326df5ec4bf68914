"""
blade core library: compiler, template store and rendering runtime
"""

__version__ = "1.0.0"

from .tokenizer import Tokenizer
from .compiler import Compiler, CodeBuilder
from .directives import DirectiveRegistry
from .sections import SectionState
from .composition import Composition
from .loader import Loader
from .environment import Environment
from .view import View
from .exceptions import BladeError, ViewNotFoundError, SectionUnderflowError, RenderError
from .log import LOG, state_connectToLogger

__all__ = [
    "Tokenizer",
    "Compiler",
    "CodeBuilder",
    "DirectiveRegistry",
    "SectionState",
    "Composition",
    "Loader",
    "Environment",
    "View",
    "BladeError",
    "ViewNotFoundError",
    "SectionUnderflowError",
    "RenderError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
