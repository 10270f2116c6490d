"""
Evaluation of Python code from a named section

The first fenced code block of the section must be tagged `python`. The
code runs in a fresh namespace; when its last statement is an expression,
the value of that expression is pretty-printed as the block's content.

Line numbers in syntax errors and tracebacks refer to the document, not to
the code block.
"""

import ast
import pprint
import traceback
from types import CodeType
from typing import Any, Dict, Optional, Tuple

from ..lib.errors import SectionNotFoundError
from ..models.generator import Failure, Success
from .section import fences_split


EVAL_LANGUAGE = "python"


def eval_generate(params: Dict[str, Any], context: Any):
    """
    Evaluate the code block of a previously rendered section.

    Args:
        params: {"section": name, "catch": bool}
        context: RenderContext of the calling directive

    Returns:
        Success with a ```python block holding the pretty-printed value, or
        with a plain ``` block holding the exception banner when `catch` is
        set; Failure when the section, the code block or valid code is
        missing, or when the code raises and `catch` is not set
    """
    name = params["section"]
    try:
        section = context.section_lookup(name)
    except SectionNotFoundError:
        return Failure(("section_not_found", name))

    header, content, _footer = section.rendered
    first_line = section.loc.line + header.count("\n")

    try:
        parts = fences_split(content, first_line)
    except ValueError as e:
        return Failure(("invalid_code_block", str(e)))

    code = next((part for part in parts if part[0] == "code"), None)
    if code is None:
        return Failure(("code_block_not_found", name))

    _kind, language, start_line, source = code
    if language != EVAL_LANGUAGE:
        return Failure(("unsupported_language", language or "none"))

    try:
        body, last = code_compile(source, section.file, start_line)
    except SyntaxError as e:
        return Failure(f"invalid python code in {e.filename}:{e.lineno}: {e.msg}")

    try:
        value = code_run(body, last)
    except Exception as e:
        banner = "".join(traceback.format_exception_only(type(e), e)).strip()
        if params.get("catch"):
            return Success(f"```\n{banner}\n```\n")
        return Failure(("eval_error", banner))

    return Success(f"```python\n{pprint.pformat(value)}\n```\n")


def code_compile(source: str, file: str, start_line: int) -> Tuple[CodeType, Optional[CodeType]]:
    """
    Compile code, splitting off a trailing expression.

    Args:
        source: Python source
        file: Document name used in tracebacks
        start_line: Document line of the first line of source

    Returns:
        (statements, trailing expression or None)

    Raises:
        SyntaxError: With lineno relative to the document
    """
    offset = start_line - 1
    try:
        tree = ast.parse(source, filename=file)
    except SyntaxError as e:
        if e.lineno is not None:
            e.lineno += offset
        raise

    # compile() errors below already carry document lines
    ast.increment_lineno(tree, offset)

    last: Optional[CodeType] = None
    if tree.body and isinstance(tree.body[-1], ast.Expr):
        expression = ast.Expression(body=tree.body.pop().value)
        last = compile(expression, file, "eval")
    body = compile(tree, file, "exec")
    return body, last


def code_run(body: CodeType, last: Optional[CodeType]) -> Any:
    namespace: Dict[str, Any] = {"__name__": "__readmix_eval__"}
    exec(body, namespace)
    if last is None:
        return None
    return eval(last, namespace)
