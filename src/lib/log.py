"""
Centralized logging using Loguru with context-aware verbosity.

This module provides a LOG() function that respects the current ProgramState's
verbosity level without requiring explicit state passing.

Features:
- Context-aware logging tied to ProgramState verbosity
- Rich formatting with timestamps, colors, and metadata
- Thread-safe using contextvars, so independent documents transformed in
  different contexts never share a verbosity
- Silent when no state is connected (library use, tests)
- No sink is configured at import; the CLI installs one with sink_install()

Usage:
    from readmix.lib.log import LOG, state_connectToLogger

    # At start of pipeline function:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("This message appears if verbosity >= 1", level=1)
    LOG("Debug details appear if verbosity >= 2", level=2)
    LOG("Verbose trace appears if verbosity >= 3", level=3)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# Format of the readmix sink
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Call this at the start of the CLI pipeline to make the state's
    verbosity setting available to LOG() calls throughout that context.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata

    Verbosity levels:
        1 = Normal output (default)
        2 = Verbose (-v)
        3 = Debug (-vv or higher)

    Example:
        LOG("Updated README.md", level=1)
        LOG("Resolved rdmx:section at README.md:12:11", level=3)
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        # depth=1 reports the caller's function/line rather than LOG itself
        logger.opt(depth=1).debug(message, **kwargs)


# Handler installed by sink_install(), replaced on each call
_sink_id: Optional[int] = None


def sink_install(sink: Any = sys.stderr) -> int:
    """
    Send LOG() output to `sink` with the readmix format.

    Only the command line calls this: importing readmix leaves loguru's
    configuration alone. Handlers added by other code are kept; loguru's
    default stderr handler is replaced.

    Args:
        sink: Any loguru sink (stream, path, callable)

    Returns:
        Handler id of the installed sink
    """
    global _sink_id
    if _sink_id is not None:
        logger.remove(_sink_id)
    else:
        try:
            logger.remove(0)
        except ValueError:
            LOG("Default loguru handler already removed", level=3)
    _sink_id = logger.add(sink, format=logger_format, level="DEBUG")
    return _sink_id
