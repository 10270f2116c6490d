"""
Chunk and block tree models

Types flowing through the pipeline, in order:

    Parser.chunks_scan()  -> TextChunk | StartChunk | EndChunk  (flat)
    Parser.blocks_build() -> TextNode | DirectiveNode           (tree)
    Readmix.blocks_resolve() -> TextNode | GeneratedNode        (tree)
    Readmix.blocks_render()  -> GeneratedNode with `rendered` set
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple, Union, TYPE_CHECKING

from .tags import DirectiveHeader, ParamEntry, Position

if TYPE_CHECKING:
    from .generator import Generator


@dataclass(frozen=True)
class TextChunk:
    """Plain text run between directive markers"""
    content: str
    loc: Position


@dataclass(frozen=True)
class StartChunk:
    """Block-start marker"""
    header: DirectiveHeader
    loc: Position


@dataclass(frozen=True)
class EndChunk:
    """Block-end marker (header.params is None)"""
    header: DirectiveHeader
    loc: Position


Chunk = Union[TextChunk, StartChunk, EndChunk]


@dataclass(frozen=True)
class TextNode:
    """Immutable text leaf of the block tree"""
    content: str


@dataclass(frozen=True)
class DirectiveNode:
    """
    A matched start/end directive pair and everything between them

    raw_header and raw_footer hold the exact source bytes of both markers so
    that `raw_header + content + raw_footer` reconstructs the original block.

    Attributes:
        namespace: Generator namespace
        action: Action name
        params: Ordered, unresolved parameters
        raw_header: Source text of the start marker
        raw_footer: Source text of the end marker
        children: Nested nodes, in document order
        file: Logical file name of the document
        loc: Position of the start marker's content
    """
    namespace: str
    action: str
    params: List[ParamEntry]
    raw_header: str
    raw_footer: str
    children: List["BlockNode"]
    file: str
    loc: Position


BlockNode = Union[TextNode, DirectiveNode]


@dataclass(frozen=True)
class ResolvedCall:
    """Generator handle, action and validated parameters of a directive"""
    generator: "Generator"
    namespace: str
    action: str
    params: Dict[str, Any]


@dataclass(frozen=True)
class GeneratedNode:
    """
    A directive bound to its generator, optionally rendered

    Attributes:
        node: Source directive
        call: Resolved generator call
        section_name: Declared name when the action is a named container
        children: Resolved children (TextNode | GeneratedNode)
        rendered: (header, generated content, footer) once rendered
    """
    node: DirectiveNode
    call: ResolvedCall
    section_name: Optional[str]
    children: List["ResolvedNode"]
    rendered: Optional[Tuple[str, str, str]] = field(default=None)

    def rendered_with(self, content: str) -> "GeneratedNode":
        """Return a copy carrying the rendered header/content/footer triple"""
        return replace(self, rendered=(self.node.raw_header, content, self.node.raw_footer))

    @property
    def loc(self) -> Position:
        return self.node.loc

    @property
    def file(self) -> str:
        return self.node.file


ResolvedNode = Union[TextNode, GeneratedNode]
