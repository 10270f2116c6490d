"""
Resolution and render pipeline for readmix documents

Transforms a document in three passes:
1. Parse: text -> tree of TextNode / DirectiveNode
2. Resolve: bind every directive to its generator and validated params;
   the whole tree is resolved before any generator runs
3. Render: walk each sibling list in document order, invoking generators
   with a RenderContext; a generator decides whether (and how often) its
   children are rendered

Text outside directives is copied untouched, and every directive keeps its
raw header and footer, so only directive bodies ever change.

Resolve and render recurse once per nesting level, the render taking about
five interpreter frames per level. With the default recursion limit of 1000,
directives nest up to roughly 150 levels; deeper documents fail with a
nesting_too_deep error at the outermost directive.

Example:
    >>> rdmx = Readmix(vars={"name": "World"}, scopes=[])
    >>> rdmx.transform_string("a<!-- rdmx :section name:$name -->b<!-- rdmx /:section -->c")
    'a<!-- rdmx :section name:$name -->b<!-- rdmx /:section -->c'
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..config import AppSettings, appsettings
from ..generators import BuiltIn
from ..models.blocks import (
    BlockNode,
    DirectiveNode,
    GeneratedNode,
    ResolvedCall,
    ResolvedNode,
    TextNode,
)
from ..models.generator import Failure, Success
from ..models.tags import ParamEntry, Variable
from .backup import BackupCallback, backupCallback_make, backup_skip
from .context import RenderContext
from .errors import (
    InvalidParamsError,
    ReadmixError,
    SectionNotFoundError,
    UndefinedVariableError,
    fileError_make,
)
from .log import LOG
from .params import params_validate
from .parser import Parser
from .registry import GeneratorRegistry
from .scopes import scopes_default, vars_merge


class Readmix:
    """
    Configured transform pipeline

    Holds everything a transform reads: the generator registry, the merged
    variable table and the backup callback. None of it changes after
    construction, so one instance may transform any number of documents.

    Attributes:
        registry: Namespace -> generator, with compiled parameter schemas
        variables: Merged variable table
        backup: Callback (path, original_bytes) run before a file is written
    """

    def __init__(
        self,
        generators: Optional[Mapping[str, Any]] = None,
        vars: Optional[Mapping[str, Any]] = None,
        scopes: Optional[List[Any]] = None,
        backup_enabled: Optional[bool] = None,
        backup_dir: Optional[str] = None,
        backup_datetime: Optional[datetime] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        """
        Build a pipeline.

        Args:
            generators: Namespace -> generator, added to the built-in
                generators; a namespace given here replaces the built-in one
            vars: Explicit variables, overriding every scope
            scopes: Variable scopes in precedence order; None uses the
                default scope (pyproject.toml), [] uses none
            backup_enabled: Back up files before writing; None uses settings
            backup_dir: Backup root directory; None uses settings
            backup_datetime: Time stamping the backup directory; None is now
            settings: AppSettings instance; None uses the global settings

        Raises:
            TypeError: Invalid generator, vars or scope return value
            ValueError: Invalid action catalog or parameter schema
        """
        self.settings = settings or appsettings

        self.registry = GeneratorRegistry()
        self.registry.register(self.settings.default_namespace, BuiltIn())
        for namespace, generator in (generators or {}).items():
            self.registry.register(namespace, generator)

        if scopes is None:
            scopes = scopes_default()
        self.variables: Dict[str, Any] = vars_merge(scopes, vars)

        if backup_enabled is None:
            backup_enabled = self.settings.backup_enabled
        self.backup: BackupCallback
        if backup_enabled:
            self.backup = backupCallback_make(
                backup_dir or self.settings.backup_root,
                backup_datetime,
                self.settings,
            )
        else:
            self.backup = backup_skip

    def parse_string(self, text: str, source_path: Optional[str] = None) -> List[BlockNode]:
        """Parse a document without resolving or rendering it"""
        return Parser(text, source_path, self.settings).parse()

    def transform_string(self, text: str, source_path: Optional[str] = None) -> str:
        """
        Transform a document.

        Args:
            text: Document content
            source_path: File name reported in errors

        Returns:
            The document with every directive body regenerated

        Raises:
            ParseError: On lexical, syntax or structural errors
            ReadmixError: On the first resolution or generator error, or
                nesting_too_deep when the directives nest deeper than the
                interpreter stack allows
        """
        nodes = self.parse_string(text, source_path)
        try:
            resolved = self.blocks_resolve(nodes)
            LOG(f"Resolved {len(resolved)} top-level blocks", level=3)
            return self.blocks_render(resolved)
        except RecursionError as e:
            root, depth = nestingRoot_find(nodes)
            file = root.file if root is not None else (source_path or self.settings.nofile_name)
            raise ReadmixError(
                "nesting_too_deep", root.loc if root is not None else None, file, depth
            ) from e

    def blocks_resolve(self, nodes: List[BlockNode]) -> List[ResolvedNode]:
        """
        Bind every directive of a tree to its generator call.

        Siblings are resolved in document order, the children of a
        directive before the directive itself.

        Args:
            nodes: Parsed nodes

        Returns:
            Same tree with DirectiveNode replaced by GeneratedNode
        """
        resolved: List[ResolvedNode] = []
        for node in nodes:
            if isinstance(node, TextNode):
                resolved.append(node)
                continue
            children = self.blocks_resolve(node.children)
            call, section_name = self.call_resolve(node)
            resolved.append(GeneratedNode(
                node=node,
                call=call,
                section_name=section_name,
                children=children,
            ))
        return resolved

    def call_resolve(self, node: DirectiveNode) -> Tuple[ResolvedCall, Optional[str]]:
        """
        Resolve namespace, action, variables and parameters of a directive.

        Returns:
            (ResolvedCall, declared container name or None)

        Raises:
            ReadmixError: unresolved_generator, unknown_action, undef_var or
                params_validation_error, at the directive's position
        """
        entry = self.registry.generator_resolve(node.namespace)
        if entry is None:
            raise ReadmixError("unresolved_generator", node.loc, node.file, node.namespace)

        errctx = (node.namespace, entry.generator, node.action)
        found = self.registry.action_resolve(node.namespace, node.action)
        if found is None:
            raise ReadmixError("unknown_action", node.loc, node.file, (node.action, errctx))
        spec, schema = found

        try:
            pairs = self.variables_swap(node.params)
        except UndefinedVariableError as e:
            raise ReadmixError("undef_var", node.loc, node.file, e.name) from e

        try:
            params = params_validate(schema, pairs)
        except InvalidParamsError as e:
            raise ReadmixError(
                "params_validation_error", node.loc, node.file, (e.detail, errctx)
            ) from e

        section_name = None
        if spec.container is not None and params.get(spec.container) is not None:
            section_name = str(params[spec.container])

        call = ResolvedCall(
            generator=entry.generator,
            namespace=node.namespace,
            action=node.action,
            params=params,
        )
        return call, section_name

    def variables_swap(self, params: List[ParamEntry]) -> List[Tuple[str, Any]]:
        """
        Replace variable references by their values.

        Raises:
            UndefinedVariableError: For the first variable not in the table
        """
        swapped: List[Tuple[str, Any]] = []
        for entry in params:
            value = entry.value
            if isinstance(value, Variable):
                if value.name not in self.variables:
                    raise UndefinedVariableError(value.name)
                value = self.variables[value.name]
            swapped.append((entry.key, value))
        return swapped

    def blocks_render(self, nodes: List[ResolvedNode]) -> str:
        """
        Render a sibling list in document order.

        Each directive sees the siblings rendered before it and the raw
        siblings after it. This is also the operation generators use, via
        RenderContext.children_render(), to render their own children.

        Args:
            nodes: Resolved siblings

        Returns:
            Concatenated output of all siblings
        """
        rendered: List[ResolvedNode] = []
        for index, node in enumerate(nodes):
            if isinstance(node, TextNode):
                rendered.append(node)
            else:
                rendered.append(self.node_render(node, list(rendered), nodes[index + 1:]))
        return blocks_toOutput(rendered)

    def node_render(
        self,
        node: GeneratedNode,
        previous: List[ResolvedNode],
        following: List[ResolvedNode],
    ) -> GeneratedNode:
        """
        Invoke the generator of one directive.

        Returns:
            Copy of the node carrying its rendered header, content, footer

        Raises:
            ReadmixError: generator_error when the generator returns a
                Failure, invalid_generator_return for any other non-Success
                value, undef_var when it reads an undefined variable; a section
                lookup that finds nothing is a generator_error
        """
        call = node.call
        context = RenderContext(readmix=self, node=node, previous=previous, following=following)
        LOG(f"Rendering {call.namespace}:{call.action} at {node.file}:{node.loc}", level=3)

        try:
            result = call.generator.generate(call.action, dict(call.params), context)
        except UndefinedVariableError as e:
            raise ReadmixError("undef_var", node.loc, node.file, e.name) from e
        except SectionNotFoundError as e:
            raise ReadmixError(
                "generator_error",
                node.loc,
                node.file,
                (call.generator, call.action, call.params, ("section_not_found", e.name)),
            ) from e

        if isinstance(result, Success) and isinstance(result.content, str):
            return node.rendered_with(result.content)

        if isinstance(result, Failure):
            raise ReadmixError(
                "generator_error",
                node.loc,
                node.file,
                (call.generator, call.action, call.params, result.reason),
            )

        raise ReadmixError(
            "invalid_generator_return",
            node.loc,
            node.file,
            (call.generator, call.action, call.params, result),
        )

    def update_file(self, path: Union[str, Path]) -> str:
        """
        Transform a file in place.

        The file is read as UTF-8 without newline translation. The original
        bytes are backed up and the file is written only after the whole
        document transformed successfully.

        Args:
            path: File to update

        Returns:
            The new content

        Raises:
            ReadmixError: file_error on I/O failures, or any transform error;
                the file is unchanged in every error case
        """
        path_str = str(path)
        LOG(f"Reading {path_str}", level=2)

        try:
            original = Path(path).read_bytes()
        except OSError as e:
            raise fileError_make(e, path_str) from e

        try:
            text = original.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ReadmixError("file_error", file=path_str, arg="invalid utf-8 content") from e

        output = self.transform_string(text, source_path=path_str)

        try:
            self.backup(path_str, original)
        except OSError as e:
            raise fileError_make(e, e.filename or path_str) from e

        try:
            Path(path).write_bytes(output.encode("utf-8"))
        except OSError as e:
            raise fileError_make(e, path_str) from e

        LOG(f"Updated {path_str}", level=1)
        return output

    def __repr__(self) -> str:
        return f"Readmix(namespaces={self.registry.namespaces()})"


def blocks_toOutput(nodes: List[ResolvedNode]) -> str:
    """Concatenate text nodes and rendered directives"""
    parts: List[str] = []
    for node in nodes:
        if isinstance(node, TextNode):
            parts.append(node.content)
        elif node.rendered is not None:
            parts.extend(node.rendered)
        else:
            raise ValueError(f"block at {node.file}:{node.loc} was not rendered")
    return "".join(parts)


def nestingRoot_find(nodes: List[BlockNode]) -> Tuple[Optional[DirectiveNode], int]:
    """
    Find the top-level directive holding the most deeply nested block.

    Walks the tree with an explicit stack so it works on trees too deep for
    the recursive passes.

    Returns:
        (top-level DirectiveNode or None, nesting depth)
    """
    best: Optional[DirectiveNode] = None
    best_depth = 0
    for root in nodes:
        if not isinstance(root, DirectiveNode):
            continue
        stack = [(root, 1)]
        while stack:
            node, depth = stack.pop()
            if depth > best_depth:
                best, best_depth = root, depth
            stack.extend(
                (child, depth + 1) for child in node.children if isinstance(child, DirectiveNode)
            )
    return best, best_depth
