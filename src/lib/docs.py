"""
Documentation helpers

docs_generate() renders the action catalog of a generator as markdown, and
section_extract() pulls the current content of a named section out of a
file, for inclusion in other documentation.

Example:
    from readmix.generators import BuiltIn
    from readmix.lib.docs import docs_generate

    print(docs_generate(BuiltIn().actions()))
"""

from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from ..config import appsettings
from ..models.blocks import BlockNode, DirectiveNode
from .params import paramSpec_coerce
from .parser import Parser, blocks_toText
from .registry import actionSpec_coerce


def value_format(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


def paramsDoc_generate(params: Mapping[str, Any]) -> str:
    """
    Markdown list documenting a parameter schema.

    Example:
        >>> print(paramsDoc_generate({"name": {"type": "string", "required": True,
        ...                                    "doc": "The name."}}), end="")
        * `name` (`string`) - Required. The name.
    """
    if not params:
        return "This action takes no parameters.\n"

    lines: List[str] = []
    for key, raw in params.items():
        spec = paramSpec_coerce(key, raw)
        text = f"* `{key}` (`{spec.type}`) -"
        if spec.required:
            text += " Required."
        if spec.doc:
            text += " " + " ".join(spec.doc.split())
        if spec.default is not None:
            text += f" The default value is `{value_format(spec.default)}`."
        lines.append(text + "\n")
    return "".join(lines)


def docs_generate(actions: Mapping[str, Any]) -> str:
    """
    Generate markdown documentation of an action catalog.

    Args:
        actions: Action name -> ActionSpec (or catalog dict), as returned by
            a generator's actions()

    Returns:
        Markdown starting with a "## Readmix Actions" heading, one "###"
        section per action in catalog order
    """
    parts: List[str] = ["## Readmix Actions\n\n"]
    for name, raw in actions.items():
        spec = actionSpec_coerce(name, raw)
        parts.append(f"### {name}\n\n")
        if spec.doc:
            parts.append(f"{spec.doc}\n\n")
        parts.append("#### Parameters\n\n")
        parts.append(paramsDoc_generate(spec.params))
        parts.append("\n")
    return "".join(parts)


def sectionNode_find(nodes: List[BlockNode], name: str, namespace: str) -> Optional[DirectiveNode]:
    """Depth-first search for the first section declaring `name`"""
    for node in nodes:
        if not isinstance(node, DirectiveNode):
            continue
        if (
            node.namespace == namespace
            and node.action == "section"
            and [(p.key, p.value) for p in node.params] == [("name", name)]
        ):
            return node
        found = sectionNode_find(node.children, name, namespace)
        if found is not None:
            return found
    return None


def section_extract(path: Union[str, Path], name: str) -> str:
    """
    Return the current raw content of a named section in a file.

    Blocks are not rendered: nested directives are returned as written.

    Args:
        path: File to read
        name: Section name, as in `<!-- rdmx :section name:examples -->`

    Returns:
        Text between the section's header and footer

    Raises:
        ParseError: If the file does not parse
        ValueError: If no such section exists
    """
    text = Path(path).read_bytes().decode("utf-8")
    nodes = Parser(text, str(path)).parse()
    node = sectionNode_find(nodes, name, appsettings.default_namespace)
    if node is None:
        raise ValueError(f"section {name!r} could not be found in {path}")
    return blocks_toText(node.children)
