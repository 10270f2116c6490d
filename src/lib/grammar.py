"""
Recursive descent grammar for directive headers

Grammar (one token of lookahead):

    directive        := '/'? namespacedAction params
    namespacedAction := ':' identifier              -- default namespace
                      | identifier ':' identifier   -- explicit namespace
    params           := (identifier ':' value)*
    value            := string | integer | float | bool | identifier | variable

A leading '/' marks a block end, which accepts no parameters. Bare
identifiers used as values are plain strings.
"""

from typing import List, Optional

from ..config import appsettings
from ..models.tags import DirectiveHeader, ParamEntry, Token, TokenKind, Value, Variable
from .errors import TagGrammarError


LITERAL_KINDS = (TokenKind.STRING, TokenKind.INTEGER, TokenKind.FLOAT, TokenKind.BOOL)


class TagGrammar:
    """
    Parser turning a token list into a DirectiveHeader

    Example:
        >>> from readmix.lib.lexer import tokenize
        >>> header = TagGrammar(tokenize("ns:act a:1 b:x")).parse()
        >>> header.namespace, header.action, [p.value for p in header.params]
        ('ns', 'act', [1, 'x'])
    """

    def __init__(self, tokens: List[Token], default_namespace: Optional[str] = None) -> None:
        self.tokens = tokens
        self.pos = 0
        self.default_namespace = default_namespace or appsettings.default_namespace

    def parse(self) -> DirectiveHeader:
        """
        Parse the complete token list.

        Returns:
            DirectiveHeader without raw text; params is None for a block end

        Raises:
            TagGrammarError: "syntax_error" on unexpected tokens or end of
                input, "illegal_block_end_params" when a block end carries
                parameters (loc of the first key)
        """
        is_end = self.token_accept(TokenKind.SLASH) is not None
        namespace, action = self.namespacedAction_parse()
        params = self.params_parse()

        if is_end:
            if params:
                raise TagGrammarError(
                    "illegal_block_end_params",
                    params[0].loc,
                    "block end does not accept parameters",
                )
            return DirectiveHeader(namespace=namespace, action=action, params=None)

        return DirectiveHeader(namespace=namespace, action=action, params=params)

    def namespacedAction_parse(self) -> tuple[str, str]:
        """Parse ':action' or 'namespace:action'"""
        token = self.token_peek()
        if token is None:
            raise TagGrammarError("syntax_error", None, "expected an action")

        if token.kind is TokenKind.COLON:
            self.pos += 1
            action = self.identifier_expect()
            return (self.default_namespace, action)

        if token.kind is TokenKind.IDENTIFIER:
            self.pos += 1
            self.token_expect(TokenKind.COLON)
            action = self.identifier_expect()
            return (str(token.value), action)

        raise self.error_unexpected(token)

    def params_parse(self) -> List[ParamEntry]:
        """Parse the remaining `key:value` pairs in order"""
        params: List[ParamEntry] = []
        while self.token_peek() is not None:
            key_token = self.token_peek()
            key = self.identifier_expect()
            self.token_expect(TokenKind.COLON)
            value = self.value_parse()
            params.append(ParamEntry(key=key, value=value, loc=key_token.loc))
        return params

    def value_parse(self) -> Value:
        token = self.token_peek()
        if token is None:
            raise TagGrammarError("syntax_error", None, "expected a value")

        self.pos += 1
        if token.kind in LITERAL_KINDS:
            return token.value
        if token.kind is TokenKind.IDENTIFIER:
            return str(token.value)
        if token.kind is TokenKind.VARIABLE:
            return Variable(str(token.value))

        raise self.error_unexpected(token)

    def token_peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def token_accept(self, kind: TokenKind) -> Optional[Token]:
        """Consume the next token if it is of `kind`"""
        token = self.token_peek()
        if token is not None and token.kind is kind:
            self.pos += 1
            return token
        return None

    def token_expect(self, kind: TokenKind) -> Token:
        token = self.token_peek()
        if token is None:
            raise TagGrammarError("syntax_error", None, f"expected {kind.value}")
        if token.kind is not kind:
            raise self.error_unexpected(token)
        self.pos += 1
        return token

    def identifier_expect(self) -> str:
        return str(self.token_expect(TokenKind.IDENTIFIER).value)

    def error_unexpected(self, token: Token) -> TagGrammarError:
        return TagGrammarError("syntax_error", token.loc, f"syntax error before {token.describe()}")


def header_parse(tokens: List[Token], default_namespace: Optional[str] = None) -> DirectiveHeader:
    """Convenience wrapper: parse a token list into a DirectiveHeader"""
    return TagGrammar(tokens, default_namespace).parse()
