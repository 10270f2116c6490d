"""
Variable scopes

A scope is any object with a `vars_get()` method returning a mapping of
variable name to scalar value. The pipeline merges all scopes once, at
construction:

    - scopes listed first take precedence over later ones
    - variables passed explicitly take precedence over every scope

Usage:
    from readmix.lib.scopes import DefaultsScope, vars_merge

    variables = vars_merge([MyScope(), DefaultsScope()], {"greeting": "hi"})
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, runtime_checkable

from ..config import appsettings
from .log import LOG


@runtime_checkable
class Scope(Protocol):
    """Source of variables for directive parameters and generators"""

    def vars_get(self) -> Dict[str, Any]:
        ...


class DefaultsScope:
    """
    Variables describing the current project, read from pyproject.toml

    Provides:
        package_name: [project] name
        app_vsn: [project] version

    A missing pyproject.toml, or a missing key, provides nothing.
    """

    def __init__(self, pyproject_path: Optional[str] = None) -> None:
        self.pyproject_path = Path(pyproject_path or appsettings.pyproject_file)

    def vars_get(self) -> Dict[str, Any]:
        if not self.pyproject_path.is_file():
            LOG(f"No {self.pyproject_path} found, default variables are empty", level=3)
            return {}

        with open(self.pyproject_path, "rb") as f:
            project = tomllib.load(f).get("project", {})

        variables: Dict[str, Any] = {}
        if "name" in project:
            variables["package_name"] = project["name"]
        if "version" in project:
            variables["app_vsn"] = project["version"]
        return variables

    def __repr__(self) -> str:
        return f"DefaultsScope(path='{self.pyproject_path}')"


def scopes_default() -> list:
    """Scopes used when the pipeline is not given any"""
    return [DefaultsScope()]


def vars_merge(scopes: Iterable[Any], external: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Merge scope variables and explicit variables into one table.

    Args:
        scopes: Scopes in precedence order, first wins
        external: Explicit variables, overriding all scopes

    Returns:
        Merged variable table

    Raises:
        TypeError: If a scope's vars_get() does not return a mapping, or if
            external is not a mapping
    """
    if external is None:
        external = {}
    if not isinstance(external, Mapping):
        raise TypeError(f"invalid vars, expected a mapping, got: {external!r}")

    merged: Dict[str, Any] = dict(external)
    for scope in scopes:
        provided = scope.vars_get()
        if not isinstance(provided, Mapping):
            raise TypeError(
                f"invalid return value from {scope!r}.vars_get(), expected a mapping, got: {provided!r}"
            )
        merged = {**provided, **merged}
    return merged
