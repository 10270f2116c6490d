"""
Project configuration loader for the readmix command line.

A project may declare, in .readmix.yaml at its root:

    generators:
      docs: mypackage.readmix:DocsGenerator   # namespace -> module:attr
    scopes:
      - mypackage.readmix:GitScope
      - default                              # the pyproject.toml scope
    vars:
      channel: stable

Classes are instantiated without arguments; other objects are used as is.
Only the CLI reads this file: library users pass the same values to
Readmix() directly.
"""

import importlib
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..config import appsettings
from .scopes import DefaultsScope


DEFAULT_SCOPE = "default"


class ProjectConfigError(Exception):
    """Raised when project configuration loading or validation fails"""
    pass


def object_import(ref: str) -> Any:
    """
    Import an object from a `module:attr` reference.

    Args:
        ref: Reference such as "mypackage.readmix:DocsGenerator"

    Returns:
        The object; classes are instantiated without arguments

    Raises:
        ProjectConfigError: On a malformed reference or failed import
    """
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise ProjectConfigError(f"invalid reference {ref!r}, expected 'module:attr'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ProjectConfigError(f"cannot import {module_name!r} for {ref!r}: {e}") from e

    try:
        obj = getattr(module, attr)
    except AttributeError as e:
        raise ProjectConfigError(f"{module_name!r} has no attribute {attr!r}") from e

    if isinstance(obj, type):
        obj = obj()
    return obj


class ProjectConfig:
    """
    Represents a project's readmix configuration.

    A missing file is an empty configuration unless the file was asked for
    explicitly.
    """

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Load the project configuration.

        Args:
            config_path: Explicit configuration file; None looks for the
                default file name in the working directory

        Raises:
            ProjectConfigError: If an explicit file is missing, or any file
                does not parse as a YAML mapping
        """
        explicit = config_path is not None
        self.config_path = Path(config_path or appsettings.project_config_file)

        if not self.config_path.exists():
            if explicit:
                raise ProjectConfigError(f"Configuration file not found: {self.config_path}")
            self.config: Dict[str, Any] = {}
            self.loaded = False
            return

        self.config = self._config_load()
        self.loaded = True

    def _config_load(self) -> Dict[str, Any]:
        """Load and parse the YAML configuration"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ProjectConfigError(f"Failed to parse {self.config_path}: {e}")
        except OSError as e:
            raise ProjectConfigError(f"Failed to load {self.config_path}: {e}")

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ProjectConfigError(f"{self.config_path} must contain a mapping")
        return config

    def config_get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Supports nested keys with dot notation:
          project.config_get('vars.channel', 'stable')
        """
        keys: list[str] = key.split('.')
        value: Any = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def generators_load(self) -> Dict[str, Any]:
        """Import the declared generators, by namespace"""
        declared = self.config_get('generators', {}) or {}
        if not isinstance(declared, dict):
            raise ProjectConfigError("'generators' must map namespaces to 'module:attr'")
        return {str(ns): object_import(str(ref)) for ns, ref in declared.items()}

    def scopes_load(self) -> Optional[List[Any]]:
        """
        Import the declared scopes.

        Returns:
            Scopes in declaration order, or None when the key is absent so
            the pipeline falls back to its default scopes
        """
        declared = self.config_get('scopes')
        if declared is None:
            return None
        if not isinstance(declared, list):
            raise ProjectConfigError("'scopes' must be a list")
        return [
            DefaultsScope() if ref == DEFAULT_SCOPE else object_import(str(ref))
            for ref in declared
        ]

    def vars_get(self) -> Dict[str, Any]:
        declared = self.config_get('vars', {}) or {}
        if not isinstance(declared, dict):
            raise ProjectConfigError("'vars' must be a mapping")
        return {str(k): v for k, v in declared.items()}

    def __repr__(self) -> str:
        return f"ProjectConfig(path='{self.config_path}', loaded={self.loaded})"
