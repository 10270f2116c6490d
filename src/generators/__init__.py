"""
Generators package for readmix

Contains the built-in generator of the rdmx namespace.
"""

from .builtin import BuiltIn

__all__ = ["BuiltIn"]
