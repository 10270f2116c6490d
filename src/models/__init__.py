"""
Models package for readmix

Contains data structures and type definitions for the transform pipeline.
"""

from .state import ProgramState, pipeline
from .tags import Position, Token, TokenKind, Variable, ParamEntry, DirectiveHeader
from .blocks import (
    TextChunk,
    StartChunk,
    EndChunk,
    TextNode,
    DirectiveNode,
    ResolvedCall,
    GeneratedNode,
)
from .generator import Generator, ActionSpec, ParamSpec, Success, Failure

__all__ = [
    "ProgramState",
    "pipeline",
    "Position",
    "Token",
    "TokenKind",
    "Variable",
    "ParamEntry",
    "DirectiveHeader",
    "TextChunk",
    "StartChunk",
    "EndChunk",
    "TextNode",
    "DirectiveNode",
    "ResolvedCall",
    "GeneratedNode",
    "Generator",
    "ActionSpec",
    "ParamSpec",
    "Success",
    "Failure",
]
