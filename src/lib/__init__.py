"""
readmix - Regenerate marked regions of text documents

Directive comments delimit regions whose content is produced by pluggable
generators; everything outside the regions is left byte for byte.
"""

__version__ = "1.0.0"
__author__ = "readmix contributors"

from .parser import Parser, blocks_toText
from .renderer import Readmix
from .registry import GeneratorRegistry
from .errors import ReadmixError, ParseError, format_error
from .log import LOG, state_connectToLogger

__all__ = [
    "Parser",
    "blocks_toText",
    "Readmix",
    "GeneratorRegistry",
    "ReadmixError",
    "ParseError",
    "format_error",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
