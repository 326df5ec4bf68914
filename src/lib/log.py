"""
Verbosity-gated logging for the compiler, loader and renderer

LOG() writes through loguru when the ProgramState connected to the current
context allows the message's level. Library code (Compiler, Loader,
Composition) logs through it too: with no state connected, as when blade is
embedded in another application, LOG is silent.

Records carry the calling module and line, and problems with a template
(blocks closed twice, sections left open) are logged at WARNING so they
stand out from compile and render progress.

Usage:
    from blade.lib.log import LOG, state_connectToLogger

    state_connectToLogger(state)

    LOG("Rendered view 'home'", level=1)
    LOG("Compiling layouts/master.blade.html", level=2)
    LOG("@endif closes no open block", level=1, warning=True)
"""

import sys
from contextvars import ContextVar
from typing import Any, Optional

from loguru import logger

from ..config import appsettings

_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger.remove()
logger.add(sys.stderr, format=appsettings.log_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Make a state's verbosity govern LOG() calls in the current context

    Args:
        state: Object with a verbosity attribute (normally ProgramState)
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, warning: bool = False) -> None:
    """
    Log message if the connected state's verbosity is at least level

    Args:
        message: Log message
        level: Minimum verbosity (1=normal, 2=verbose -v, 3=debug -vv)
        warning: Log at WARNING instead of DEBUG
    """
    state = _program_state.get()
    if state is None or getattr(state, 'verbosity', 0) < level:
        return

    logger.opt(depth=1).log("WARNING" if warning else "DEBUG", message)
