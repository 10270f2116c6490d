"""
Named sections

A section renders its children unchanged. Its value lies in its name: later
siblings find the rendered section with RenderContext.section_lookup().
"""

import re
from typing import Any, Dict, List, Tuple, Union

from ..models.generator import Success


FENCE_OPEN = re.compile(r"^```([A-Za-z0-9_+.-]*)[ \t]*$")
FENCE_CLOSE = re.compile(r"^```[ \t]*$")

TextPart = Tuple[str, int, str]
CodePart = Tuple[str, str, int, str]


def section_generate(params: Dict[str, Any], context: Any) -> Success:
    return Success(context.children_render())


def fences_split(content: str, first_line: int = 1) -> List[Union[TextPart, CodePart]]:
    """
    Split markdown content into text runs and fenced code blocks.

    Args:
        content: Markdown text
        first_line: Document line number of the first line of content

    Returns:
        Parts in order, either ("text", line, text) or
        ("code", language, line_of_first_code_line, code)

    Raises:
        ValueError: If a fence is opened and never closed

    Example:
        >>> fences_split("intro\\n```python\\nx = 1\\n```\\n", first_line=10)
        [('text', 10, 'intro\\n'), ('code', 'python', 12, 'x = 1\\n')]
    """
    parts: List[Union[TextPart, CodePart]] = []
    lines = content.splitlines(keepends=True)

    text: List[str] = []
    text_line = first_line
    index = 0
    while index < len(lines):
        line = lines[index]
        opened = FENCE_OPEN.match(line.rstrip("\r\n"))
        if opened is None:
            text.append(line)
            index += 1
            continue

        if text:
            parts.append(("text", text_line, "".join(text)))
            text = []

        fence_line = first_line + index
        code: List[str] = []
        index += 1
        while index < len(lines) and not FENCE_CLOSE.match(lines[index].rstrip("\r\n")):
            code.append(lines[index])
            index += 1
        if index >= len(lines):
            raise ValueError(f"code block opened at line {fence_line} is not closed")

        parts.append(("code", opened.group(1), fence_line + 1, "".join(code)))
        index += 1
        text_line = first_line + index

    if text:
        parts.append(("text", text_line, "".join(text)))
    return parts
