"""
Render context handed to generators

A generator sees its position among its siblings and a few services of the
pipeline that is rendering it:

    previous   already rendered siblings, in document order
    following  siblings not rendered yet, in document order
    children   the directive's own resolved, unrendered children

Nothing in the context may be mutated by a generator.
"""

from dataclasses import dataclass
from typing import Any, List, TYPE_CHECKING

from ..models.blocks import GeneratedNode, ResolvedNode
from ..models.tags import Position
from .errors import SectionNotFoundError, UndefinedVariableError

if TYPE_CHECKING:
    from .renderer import Readmix


@dataclass(frozen=True)
class RenderContext:
    readmix: "Readmix"
    node: GeneratedNode
    previous: List[ResolvedNode]
    following: List[ResolvedNode]

    @property
    def children(self) -> List[ResolvedNode]:
        return self.node.children

    @property
    def file(self) -> str:
        return self.node.file

    @property
    def loc(self) -> Position:
        return self.node.loc

    def children_render(self) -> str:
        """
        Render the directive's children in order.

        May be called any number of times; each call renders the children
        afresh.

        Returns:
            Concatenated text of the rendered children
        """
        return self.readmix.blocks_render(self.node.children)

    def section_lookup(self, name: str) -> GeneratedNode:
        """
        Find the closest rendered named container among preceding siblings.

        Only directives whose action declares a container, at the same
        nesting depth and already rendered, are visible. When several share
        the name, the last one in document order wins.

        Args:
            name: Declared container name

        Returns:
            The rendered GeneratedNode; its content is `node.rendered[1]`

        Raises:
            SectionNotFoundError: If no visible container has that name
        """
        for sibling in reversed(self.previous):
            if (
                isinstance(sibling, GeneratedNode)
                and sibling.section_name is not None
                and sibling.section_name == name
                and sibling.rendered is not None
            ):
                return sibling
        raise SectionNotFoundError(name)

    def var_get(self, key: str) -> Any:
        """
        Read a variable of the pipeline.

        Raises:
            UndefinedVariableError: If the variable is not defined; the
                pipeline reports it as undef_var at the calling directive
        """
        variables = self.readmix.variables
        if key not in variables:
            raise UndefinedVariableError(key)
        return variables[key]
