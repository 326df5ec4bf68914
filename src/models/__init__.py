"""
Models package for blade

Contains data structures and type definitions for the compile and render pipelines.
"""

from .state import ProgramState, CompileState, pipeline
from .directives import DirectiveSpec, DirectiveCategory, ArgumentMode, RESERVED_WORDS
from .tokens import Token, TokenKind, DirectiveMatch

__all__ = [
    "ProgramState",
    "CompileState",
    "pipeline",
    "DirectiveSpec",
    "DirectiveCategory",
    "ArgumentMode",
    "RESERVED_WORDS",
    "Token",
    "TokenKind",
    "DirectiveMatch",
]
