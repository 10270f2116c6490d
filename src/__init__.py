"""
readmix - Regenerate marked regions of text documents

Directive comments delimit regions whose content is produced by pluggable
generators; everything outside the regions is left byte for byte.
"""

__version__ = "1.0.0"
__author__ = "readmix contributors"

from .lib import (
    Parser,
    Readmix,
    GeneratorRegistry,
    ReadmixError,
    ParseError,
    format_error,
    LOG,
    state_connectToLogger,
)
from .models import Generator, ParamSpec, Success, Failure

__all__ = [
    "Parser",
    "Readmix",
    "GeneratorRegistry",
    "ReadmixError",
    "ParseError",
    "format_error",
    "Generator",
    "ParamSpec",
    "Success",
    "Failure",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
