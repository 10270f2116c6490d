"""
Pygments lexer for readmix directive headers

Tokenizes the text between a directive's comment opener and its closer:

    <!-- rdmx ns:action key:"value" n:1 x:1.5 flag:true v:$var -->
             ^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

Token types:
- Number.Float / Number.Integer: numeric literals (float has priority)
- String.Double / String.Single: quoted strings with backslash escapes
- Keyword.Constant: true / false
- Name.Variable: $name references
- Name: identifiers
- Punctuation: ':'
- Operator: '/' (block end marker)
- Whitespace: blanks and commas, which carry no meaning at all

The same lexer highlights directive headers when registered with Pygments.
"""

import re
from typing import Dict, List

from pygments.lexer import RegexLexer
from pygments.token import (
    Error,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Whitespace,
)

from ..models.tags import Position, Token, TokenKind, position_advance
from .errors import TagLexError


class TagLexer(RegexLexer):
    """
    Lexer for the readmix directive header language

    Example:
        :section name:"usage", level:2

    Tokens:
        : → Punctuation
        section → Name
        name → Name
        "usage" → String.Double
        , → Whitespace (ignored)
        2 → Number.Integer
    """

    name = 'Readmix tag'
    aliases = ['rdmx-tag', 'readmix-tag']
    filenames = []

    tokens = {
        'root': [
            # Whitespace and commas are insignificant everywhere
            (r'[\s,]+', Whitespace),

            # Literals, in priority order
            (r'[0-9]+\.[0-9]+(?:[eE][-+]?[0-9]+)?', Number.Float),
            (r'[0-9]+', Number.Integer),
            (r'"(?:\\[\s\S]|[^"\\])*"', String.Double),
            (r"'(?:\\[\s\S]|[^'\\])*'", String.Single),
            (r'(?:true|false)(?![a-zA-Z0-9_])', Keyword.Constant),

            # Names
            (r'\$[a-zA-Z_][a-zA-Z0-9_]*', Name.Variable),
            (r'[a-zA-Z_][a-zA-Z0-9_]*', Name),

            # Separators
            (r':', Punctuation),
            (r'/', Operator),
        ],
    }


TOKEN_KINDS: Dict[object, TokenKind] = {
    Number.Float: TokenKind.FLOAT,
    Number.Integer: TokenKind.INTEGER,
    String.Double: TokenKind.STRING,
    String.Single: TokenKind.STRING,
    Keyword.Constant: TokenKind.BOOL,
    Name.Variable: TokenKind.VARIABLE,
    Name: TokenKind.IDENTIFIER,
    Punctuation: TokenKind.COLON,
    Operator: TokenKind.SLASH,
}

STRING_ESCAPES: Dict[str, str] = {
    '"': '"',
    "'": "'",
    's': ' ',
    't': '\t',
    'r': '\r',
    'n': '\n',
    '\\': '\\',
}

_escape_re = re.compile(r'\\([\s\S])')


def string_unescape(body: str) -> str:
    r"""
    Decode backslash escapes of a quoted string body.

    Unrecognized escapes keep the escaped character: "\q" decodes to "q".

    Example:
        >>> string_unescape(r'say \"hi\"\sthere\n')
        'say "hi" there\n'
    """
    return _escape_re.sub(lambda m: STRING_ESCAPES.get(m.group(1), m.group(1)), body)


def tokenValue_decode(kind: TokenKind, text: str):
    """Convert the matched text of a token to its value"""
    if kind is TokenKind.FLOAT:
        return float(text)
    if kind is TokenKind.INTEGER:
        return int(text)
    if kind is TokenKind.STRING:
        return string_unescape(text[1:-1])
    if kind is TokenKind.BOOL:
        return text == 'true'
    if kind is TokenKind.VARIABLE:
        return text[1:]
    if kind is TokenKind.IDENTIFIER:
        return text
    return None


_lexer = TagLexer()


def tokenize(text: str, loc: Position = Position(1, 1)) -> List[Token]:
    """
    Tokenize a directive header.

    Args:
        text: Text between the comment opener and closer
        loc: Position of the first character of `text` in the document

    Returns:
        Tokens in source order, whitespace and commas removed

    Raises:
        TagLexError: On the first character matching no rule, with its position

    Example:
        >>> [t.kind.value for t in tokenize(":section name:intro")]
        ['colon', 'identifier', 'identifier', 'colon', 'identifier']
    """
    tokens: List[Token] = []
    pos = loc

    for _index, ttype, value in _lexer.get_tokens_unprocessed(text):
        if ttype is Error:
            raise TagLexError(value, pos)

        kind = TOKEN_KINDS.get(ttype)
        if kind is not None:
            tokens.append(Token(kind, tokenValue_decode(kind, value), pos))

        pos = position_advance(pos, value)

    return tokens


def get_lexer() -> TagLexer:
    """
    Get the TagLexer instance

    Returns:
        TagLexer instance ready for use with Pygments
    """
    return _lexer
