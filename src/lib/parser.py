"""
Parser for rdmx directive comments

Transforms a text document into a tree of text and directive nodes.

The parser operates in two phases:
1. Scanning: walk the document tracking (line, column), cut it into text
   chunks and directive marker chunks, and parse each marker's header
2. Building: match every block start with its block end by
   (namespace, action) at the same nesting depth

Directive format:

    <!-- rdmx ns:action key:value -->
    content
    <!-- rdmx /ns:action -->

The three-dash spelling `<!--- rdmx ... --->` is accepted for any opener or
closer independently. Exactly one newline following a marker belongs to the
marker's raw text, so `raw_header + content + raw_footer` reconstructs the
source byte for byte.

Example:
    >>> nodes = Parser("a<!-- rdmx :x -->b<!-- rdmx /:x -->c").parse()
    >>> [type(n).__name__ for n in nodes]
    ['TextNode', 'DirectiveNode', 'TextNode']
    >>> nodes[1].children[0].content
    'b'
"""

from dataclasses import replace
from typing import List, Optional, Tuple

from ..config import AppSettings, appsettings
from ..models.tags import Position, position_advance
from ..models.blocks import (
    BlockNode,
    Chunk,
    DirectiveNode,
    EndChunk,
    StartChunk,
    TextChunk,
    TextNode,
)
from .errors import ParseError, TagGrammarError, TagLexError
from .grammar import TagGrammar
from .lexer import tokenize
from .log import LOG


CLOSER_2 = "-->"
CLOSER_3 = "--->"

# Expected closer of the top level; never equal to a (namespace, action) pair
_EOF = object()


class Parser:
    """
    Parser for documents containing rdmx directives

    Handles:
    - Two opener and two closer spellings, mixed freely
    - Nested directives, including same-name nesting
    - One owned newline after each marker
    - Error reporting with file, line and column
    """

    def __init__(
        self,
        source: str,
        file: Optional[str] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        """
        Initialize parser with source text

        Args:
            source: Raw document text
            file: Logical file name used in nodes and errors
            settings: Settings providing markers and default namespace

        Attributes:
            source: Source text being parsed
            file: File name reported in errors
            openers: Recognized comment openers, three-dash first
        """
        self.settings = settings or appsettings
        self.source = source
        self.file = file if file is not None else self.settings.nofile_name
        self.openers = self.settings.openers_make()

    def parse(self) -> List[BlockNode]:
        """
        Parse source text into a block tree

        Returns:
            Top-level nodes in document order

        Raises:
            ParseError: On the first lexical, syntax or structural error
        """
        chunks = self.chunks_scan()
        LOG(f"Scanned {len(chunks)} chunks from {self.file}", level=3)
        return self.blocks_build(chunks)

    def chunks_scan(self) -> List[Chunk]:
        """
        Cut the document into text and directive chunks.

        Returns:
            Chunks in document order, positions strictly increasing

        Raises:
            ParseError: unterminated_comment_tag, syntax_error or
                illegal_block_end_params
        """
        source = self.source
        chunks: List[Chunk] = []

        pos = 0
        loc = Position(1, 1)
        text_start = 0
        text_loc = loc

        while True:
            candidate = source.find("<!-", pos)
            if candidate == -1:
                break

            loc = position_advance(loc, source[pos:candidate])
            pos = candidate

            opener = self.opener_match(pos)
            if opener is None:
                loc = Position(loc.line, loc.col + 1)
                pos += 1
                continue

            if pos > text_start:
                chunks.append(TextChunk(source[text_start:pos], text_loc))

            chunk, pos, loc = self.directive_scan(pos, loc, opener)
            chunks.append(chunk)
            text_start, text_loc = pos, loc

        if len(source) > text_start:
            chunks.append(TextChunk(source[text_start:], text_loc))

        return chunks

    def opener_match(self, pos: int) -> Optional[str]:
        for opener in self.openers:
            if self.source.startswith(opener, pos):
                return opener
        return None

    def closer_find(self, pos: int) -> Tuple[int, str]:
        """
        Find the first closer at or after `pos`.

        Returns:
            (index, closer) or (-1, "") when the comment is never closed
        """
        at_2 = self.source.find(CLOSER_2, pos)
        at_3 = self.source.find(CLOSER_3, pos)
        if at_3 != -1 and at_3 < at_2:
            return at_3, CLOSER_3
        if at_2 != -1:
            return at_2, CLOSER_2
        return -1, ""

    def directive_scan(
        self, pos: int, loc: Position, opener: str
    ) -> Tuple[Chunk, int, Position]:
        """
        Scan one directive marker starting at `pos`.

        Args:
            pos: Index of the opener in source
            loc: Position of the opener
            opener: Matched opener spelling

        Returns:
            (chunk, index after the marker, position after the marker)
        """
        header_loc = Position(loc.line, loc.col + len(opener))
        content_start = pos + len(opener)

        closer_at, closer = self.closer_find(content_start)
        if closer_at == -1:
            raise ParseError("unterminated_comment_tag", header_loc, opener, self.file)

        after = closer_at + len(closer)
        newline = self.newline_take(after)
        end = after + len(newline)

        content = self.source[content_start:closer_at]
        raw = self.source[pos:end]
        next_loc = position_advance(header_loc, self.source[content_start:end])

        header = self.header_parse(content, header_loc, raw)
        header = replace(header, raw=raw, loc=header_loc)

        if header.is_end:
            return EndChunk(header, header_loc), end, next_loc
        return StartChunk(header, header_loc), end, next_loc

    def newline_take(self, pos: int) -> str:
        """Return the single newline owned by a marker ending at `pos`, if any"""
        if self.source.startswith("\r\n", pos):
            return "\r\n"
        if self.source.startswith("\n", pos):
            return "\n"
        return ""

    def header_parse(self, content: str, loc: Position, raw: str):
        """
        Lex and parse a directive header, wrapping failures as ParseError.

        Args:
            content: Text between opener and closer
            loc: Position of the first character of content
            raw: Full marker source, reported with errors
        """
        try:
            tokens = tokenize(content, loc)
            return TagGrammar(tokens, self.settings.default_namespace).parse()
        except TagLexError as e:
            raise ParseError("syntax_error", e.loc, raw, self.file, ("illegal", e.chars)) from e
        except TagGrammarError as e:
            if e.kind == "illegal_block_end_params":
                raise ParseError(e.kind, e.loc, raw, self.file) from e
            raise ParseError("syntax_error", e.loc or loc, raw, self.file, ("syntax", e.detail)) from e

    def blocks_build(self, chunks: List[Chunk]) -> List[BlockNode]:
        """
        Match block starts and ends into a tree.

        Args:
            chunks: Flat chunk sequence from chunks_scan()

        Returns:
            Top-level nodes

        Raises:
            ParseError: no_block_end for a start never closed, no_block_start
                for an end closing nothing open at its depth,
                nesting_too_deep when the nesting exceeds the interpreter
                stack, at the outermost start of the deepest block
        """
        try:
            nodes, _index = self.children_build(chunks, 0, _EOF)
        except RecursionError as e:
            root, depth = self.nestingRoot_find(chunks)
            raise ParseError("nesting_too_deep", root.loc, root.header.raw, self.file, depth) from e
        return nodes

    def nestingRoot_find(self, chunks: List[Chunk]) -> Tuple[StartChunk, int]:
        """Top-level start chunk of the deepest nesting, and that depth"""
        root: Optional[StartChunk] = None
        best: Optional[StartChunk] = None
        depth = deepest = 0
        for chunk in chunks:
            if isinstance(chunk, StartChunk):
                if depth == 0:
                    root = chunk
                depth += 1
                if depth > deepest:
                    best, deepest = root, depth
            elif isinstance(chunk, EndChunk):
                depth = max(depth - 1, 0)
        return best, deepest

    def children_build(
        self, chunks: List[Chunk], index: int, expected: object
    ) -> Tuple[List[BlockNode], int]:
        """
        Build nodes until the end chunk matching `expected` or end of input.

        The matching end chunk is not consumed: its index is returned so the
        caller one level up can attach it as the footer.

        Returns:
            (nodes, index of the matching end chunk or len(chunks))
        """
        nodes: List[BlockNode] = []

        while index < len(chunks):
            chunk = chunks[index]

            if isinstance(chunk, TextChunk):
                nodes.append(TextNode(chunk.content))
                index += 1
                continue

            if isinstance(chunk, StartChunk):
                header = chunk.header
                children, index = self.children_build(chunks, index + 1, header.key)
                if index >= len(chunks):
                    raise ParseError("no_block_end", chunk.loc, header.raw, self.file)

                footer = chunks[index].header
                nodes.append(DirectiveNode(
                    namespace=header.namespace,
                    action=header.action,
                    params=list(header.params or []),
                    raw_header=header.raw,
                    raw_footer=footer.raw,
                    children=children,
                    file=self.file,
                    loc=chunk.loc,
                ))
                index += 1
                continue

            if chunk.header.key == expected:
                return nodes, index

            raise ParseError("no_block_start", chunk.loc, chunk.header.raw, self.file)

        return nodes, index


def blocks_toText(nodes: List[BlockNode]) -> str:
    """
    Reconstruct the source text of unrendered nodes.

    Args:
        nodes: Nodes produced by Parser.parse()

    Returns:
        The exact text the nodes were parsed from
    """
    parts: List[str] = []
    for node in nodes:
        if isinstance(node, TextNode):
            parts.append(node.content)
        else:
            parts.append(node.raw_header)
            parts.append(blocks_toText(node.children))
            parts.append(node.raw_footer)
    return "".join(parts)
