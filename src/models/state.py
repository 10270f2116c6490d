"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from functools import reduce
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the update pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the update progresses.

    Pipeline stages and their state additions:
        - Initial: paths, backup, backupDir, var, config, verbosity
        - env_check: projectConfig, envOK
        - vars_parse: variables
        - readmix_build: readmix
        - files_update: updateResults
        - results_report: exitCode

    Attributes:
        paths: Files to update
        backup: Backup override from the CLI (None: use settings)
        backupDir: Backup root override from the CLI
        var: Raw "key=value" variable definitions
        config: Optional path to the project configuration file
        verbosity: Logging verbosity level (0-3)
        envOK: Environment validation passed
        projectConfig: Loaded ProjectConfig
        variables: Parsed CLI variables
        readmix: Configured Readmix pipeline
        updateResults: path -> error message, None on success
        exitCode: Process exit status
    """

    # CLI arguments
    paths: List[str] = field(default_factory=list)
    backup: Optional[bool] = field(default=None)
    backupDir: Optional[str] = field(default=None)
    var: List[str] = field(default_factory=list)
    config: Optional[str] = field(default=None)
    verbosity: int = field(default=1)

    # Pipeline state
    envOK: bool = field(default=False)
    projectConfig: Optional[Any] = field(default=None)  # ProjectConfig at runtime
    variables: Dict[str, Any] = field(default_factory=dict)
    readmix: Optional[Any] = field(default=None)  # Readmix at runtime
    updateResults: Dict[str, Optional[str]] = field(default_factory=dict)
    exitCode: int = field(default=0)

    @classmethod
    def state_createFromNamespace(cls: Type["ProgramState"], options: Namespace) -> "ProgramState":
        """
        Create ProgramState from an argparse Namespace.

        Args:
            options: Parsed CLI arguments

        Returns:
            ProgramState instance with all matching CLI options as attributes
        """
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        return cls(**filtered_options)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            vars_parse,
            readmix_build,
            files_update,
            results_report
        )
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
