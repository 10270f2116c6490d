"""
Directive header models

Positions, tokens and parsed header structures produced by the tag lexer
and grammar. Tokens are transient: the grammar consumes them immediately
and only DirectiveHeader survives into the chunk sequence.
"""

from enum import Enum
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Union


class Position(NamedTuple):
    """1-based (line, column) location in a source document"""
    line: int
    col: int

    def __str__(self) -> str:
        return f"{self.line}:{self.col}"


def position_advance(pos: Position, text: str) -> Position:
    """
    Advance a position over a run of text.

    A "\\r\\n" pair counts as a single line break. A lone "\\r" advances the
    column like any other character.

    Args:
        pos: Starting position
        text: Text consumed from that position

    Returns:
        Position of the character following `text`

    Example:
        >>> position_advance(Position(1, 1), "ab\\r\\ncd")
        Position(line=2, col=3)
    """
    line, col = pos
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c == "\n":
            line, col = line + 1, 1
        elif c == "\r" and i + 1 < n and text[i + 1] == "\n":
            line, col = line + 1, 1
            i += 1
        else:
            col += 1
        i += 1
    return Position(line, col)


class TokenKind(Enum):
    """Token categories emitted by the tag lexer"""
    IDENTIFIER = "identifier"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    VARIABLE = "variable"
    COLON = "colon"
    SLASH = "slash"


@dataclass(frozen=True)
class Token:
    """
    A lexical token from a directive header

    Attributes:
        kind: Token category
        value: Decoded value (unescaped string, int, float, bool, identifier
               or variable name); None for punctuation
        loc: Position of the token's first character
    """
    kind: TokenKind
    value: Union[str, int, float, bool, None]
    loc: Position

    def describe(self) -> str:
        """Short source-like rendering used in syntax error messages"""
        if self.kind is TokenKind.COLON:
            return "':'"
        if self.kind is TokenKind.SLASH:
            return "'/'"
        if self.kind is TokenKind.VARIABLE:
            return f"'${self.value}'"
        if self.kind is TokenKind.STRING:
            return repr(self.value)
        if self.kind is TokenKind.BOOL:
            return "'true'" if self.value else "'false'"
        return f"'{self.value}'"


@dataclass(frozen=True)
class Variable:
    """Unresolved `$name` reference, replaced before parameter validation"""
    name: str

    def __str__(self) -> str:
        return f"${self.name}"


Value = Union[str, int, float, bool, Variable]


@dataclass(frozen=True)
class ParamEntry:
    """One `key:value` pair of a directive header, in source order"""
    key: str
    value: Value
    loc: Position


@dataclass(frozen=True)
class DirectiveHeader:
    """
    Parsed directive marker

    Attributes:
        namespace: Generator namespace (defaults to the built-in namespace
                   for ':action' spelling)
        action: Action name within the namespace
        params: Ordered parameters, or None for a block end
        raw: Exact source text of the marker, delimiters and owned newline
             included
        loc: Position right after the comment opener
    """
    namespace: str
    action: str
    params: Optional[List[ParamEntry]]
    raw: str = ""
    loc: Position = Position(1, 1)

    @property
    def is_end(self) -> bool:
        return self.params is None

    @property
    def key(self) -> tuple[str, str]:
        """(namespace, action) pair used to match starts with ends"""
        return (self.namespace, self.action)
