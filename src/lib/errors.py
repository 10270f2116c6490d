"""
Error taxonomy for readmix

Every failure of a document transform surfaces as exactly one ReadmixError
(or its ParseError subclass) carrying a kind, the file and position of the
offending directive, and a kind-specific argument. The messages always start
from `file:line:col` so editors can jump to the directive.

Internal exceptions (TagLexError, TagGrammarError, UndefinedVariableError,
SectionNotFoundError) are raised by the components that detect them and
converted to the public taxonomy by the scanner or the render pipeline.
"""

import errno
from typing import Any, Optional

from ..models.tags import Position


class ReadmixError(Exception):
    """
    Transform, resolution, generator and file errors

    Attributes:
        kind: Error kind (e.g. "undef_var", "generator_error")
        loc: Position of the directive, None for file errors
        file: Logical file name
        arg: Kind-specific detail
    """

    def __init__(
        self,
        kind: str,
        loc: Optional[Position] = None,
        file: Optional[str] = None,
        arg: Any = None,
    ) -> None:
        self.kind = kind
        self.loc = loc
        self.file = file
        self.arg = arg
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    @property
    def file_loc(self) -> str:
        if self.loc is None:
            return f"{self.file}"
        return f"{self.file}:{self.loc.line}:{self.loc.col}"

    @property
    def message(self) -> str:
        kind = self.kind
        arg = self.arg

        if kind == "generator_error":
            generator, action, params, reason = arg
            return (
                f"generator error in {self.file_loc}, "
                f"({generator!r}, {action!r}, {params!r}), got: {reason!r}"
            )

        if kind == "unresolved_generator":
            return (
                f"unknown generator namespace error in {self.file_loc}, "
                f"no generator registered for {arg!r}"
            )

        if kind == "invalid_generator_return":
            generator, action, params, retval = arg
            return (
                f"invalid generator return value in {self.file_loc}, "
                f"({generator!r}, {action!r}, {params!r}), "
                f"expected Success or Failure, got: {retval!r}"
            )

        if kind == "file_error":
            if arg == "eisdir":
                return f"updating directories is not supported yet, tried to update {self.file}"
            return f"file error when accessing {self.file}, got: {arg}"

        if kind == "undef_var":
            return f"undefined variable ${arg} in {self.file_loc}"

        if kind == "unknown_action":
            action, (namespace, generator, _action) = arg
            return (
                f"unknown action {namespace}:{action} in {self.file_loc} "
                f"for generator {generator!r}"
            )

        if kind == "params_validation_error":
            detail, (namespace, generator, action) = arg
            return (
                f"invalid params for {namespace}:{action} in {self.file_loc} "
                f"for generator {generator!r}, {detail}"
            )

        if kind == "nesting_too_deep":
            return f"directives nested too deeply in {self.file_loc}, {arg} levels"

        return f"{kind} in {self.file_loc}: {arg!r}"


class ParseError(ReadmixError):
    """
    Lexical, syntax and structural errors of a document

    Attributes:
        source: Raw comment text collected up to the failure
    """

    def __init__(
        self,
        kind: str,
        loc: Optional[Position],
        source: str,
        file: Optional[str],
        arg: Any = None,
    ) -> None:
        self.source = source
        super().__init__(kind, loc=loc, file=file, arg=arg)

    @property
    def message(self) -> str:
        where = self.file_loc
        source = self.source.rstrip("\r\n")

        if self.kind == "illegal_block_end_params":
            return f"cannot set arguments on block end at {where}: {source}"
        if self.kind == "unterminated_comment_tag":
            return f"HTML comment closing bracket not found {where}: {source}"
        if self.kind == "no_block_end":
            return f"no block end found for block start at {where}: {source}"
        if self.kind == "nesting_too_deep":
            return f"directives nested too deeply at {where}, {self.arg} levels: {source}"
        if self.kind == "no_block_start":
            return f"no block start found for block end at {where}: {source}"
        if self.kind == "syntax_error" and self.arg and self.arg[0] == "illegal":
            return f"syntax error before {self.arg[1]} in {where}: {source}"
        if self.kind == "syntax_error" and self.arg:
            return f"parse error in {where}, {self.arg[1]}: {source}"
        return f"parse error in {where}: {source}"


class TagLexError(Exception):
    """Character matching no token rule"""

    def __init__(self, chars: str, loc: Position) -> None:
        self.chars = chars
        self.loc = loc
        super().__init__(f"illegal characters {chars!r} at {loc}")


class TagGrammarError(Exception):
    """Token sequence rejected by the tag grammar (loc None: end of input)"""

    def __init__(self, kind: str, loc: Optional[Position], detail: str = "") -> None:
        self.kind = kind
        self.loc = loc
        self.detail = detail
        super().__init__(detail or kind)


class UndefinedVariableError(Exception):
    """Variable missing from the pipeline's variable table"""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"undefined variable ${name}")


class SectionNotFoundError(LookupError):
    """No rendered named container with that name among preceding siblings"""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"section {name!r} not found")


class InvalidParamsError(ValueError):
    """Directive parameters rejected by an action's parameter schema"""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


def fileError_make(exc: OSError, path: str) -> ReadmixError:
    """
    Convert an OSError to a file_error carrying the lowercase errno name.

    Args:
        exc: Error raised by a file operation
        path: Path of the file being read or written

    Returns:
        ReadmixError of kind "file_error" (arg e.g. "enoent", "eisdir")
    """
    name = errno.errorcode.get(exc.errno, "") if exc.errno is not None else ""
    return ReadmixError("file_error", file=path, arg=(name.lower() or str(exc)))


def format_error(error: ReadmixError) -> str:
    """Human-readable message for any readmix error"""
    return error.message
