#!/usr/bin/env python3
"""
readmix - Regenerate marked regions of text documents

Keeps README files and other documentation up to date: regions delimited by
directive comments are regenerated in place, everything else is left byte
for byte.

Philosophy:
    - In-place: the document is its own template
    - Round-trip: directive markers and surrounding text are never altered
    - Fail-fast: any error leaves the file untouched
    - Pluggable: projects add generators under their own namespaces

Directive format:
    <!-- rdmx :badges pypi:readmix license:readmix -->
    ...generated content...
    <!-- rdmx /:badges -->

Usage:
    readmix update README.md docs/guide.md

Examples:
    # Update without taking backups
    readmix update README.md --no-backup

    # Define variables for $references in directives
    readmix update README.md --var channel=stable --var org=acme

    # Use a project configuration declaring extra generators
    readmix update README.md -c tools/readmix.yaml -vv
"""

import sys
from argparse import ArgumentParser, ArgumentDefaultsHelpFormatter, BooleanOptionalAction
from typing import List, Optional

from .lib import Readmix, ReadmixError, format_error, __version__, LOG, state_connectToLogger
from .lib.project import ProjectConfig, ProjectConfigError
from .lib.log import sink_install
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
                    _           _
   _ __ ___  __ _  __| |_ __ ___ (_)_  __
  | '__/ _ \/ _` |/ _` | '_ ` _ \| \ \/ /
  | | |  __/ (_| | (_| | | | | | | |>  <
  |_|  \___|\__,_|\__,_|_| |_| |_|_/_/\_\

  Regenerate marked regions of text documents
"""

# Define CLI arguments
parser = ArgumentParser(
    prog="readmix",
    description="readmix - Regenerate marked regions of text documents",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")

subparsers = parser.add_subparsers(dest="command", required=True)

update_parser = subparsers.add_parser(
    "update",
    help="Regenerate the directive blocks of files in place",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

update_parser.add_argument("paths", nargs="+", metavar="PATH", help="Files to update")

update_parser.add_argument(
    "--backup",
    action=BooleanOptionalAction,
    default=None,
    help="Back up files before writing them (default from READMIX_BACKUP_ENABLED)",
)

update_parser.add_argument(
    "-d",
    "--backup-dir",
    dest="backupDir",
    default=None,
    type=str,
    help="Root directory for backups (default from READMIX_BACKUP_ROOT)",
)

update_parser.add_argument(
    "--var",
    action="append",
    default=[],
    metavar="KEY=VALUE",
    help="Define a variable, overriding project and scope variables (repeatable)",
)

update_parser.add_argument(
    "-c",
    "--config",
    default=None,
    type=str,
    help="Project configuration file (default: .readmix.yaml when present)",
)

update_parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Load the project configuration.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - projectConfig: Loaded ProjectConfig
            - envOK: True if the configuration loaded

    Exits:
        1 if the configuration file is missing or invalid
    """

    state = inputstate.copy()

    if state.verbosity >= 3:
        LOG(DISPLAY_TITLE, level=3)

    LOG("Checking environment...", level=2)

    try:
        state.projectConfig = ProjectConfig(state.config)
    except ProjectConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    LOG(f"Project configuration: {state.projectConfig}", level=2)

    state.envOK = True
    return state


def vars_parse(inputstate: ProgramState) -> ProgramState:
    """
    Parse KEY=VALUE variable definitions.

    Project variables come first; command line definitions override them.

    Args:
        inputstate: Program state with var and projectConfig

    Returns:
        ProgramState with added field:
            - variables: Dict of variable name -> string value

    Exits:
        1 on a definition without '=' or with an empty key
    """

    state = inputstate.copy()

    try:
        variables = state.projectConfig.vars_get() if state.projectConfig else {}
    except ProjectConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for definition in state.var:
        key, sep, value = definition.partition("=")
        key = key.strip()
        if not sep or not key:
            print(f"Error: invalid variable definition {definition!r}, expected KEY=VALUE", file=sys.stderr)
            sys.exit(1)
        variables[key] = value

    LOG(f"Defined variables: {', '.join(sorted(variables)) or 'none'}", level=2)
    state.variables = variables
    return state


def readmix_build(inputstate: ProgramState) -> ProgramState:
    """
    Build the Readmix pipeline from configuration and options.

    Args:
        inputstate: Program state with projectConfig and variables

    Returns:
        ProgramState with added field:
            - readmix: Configured Readmix instance

    Exits:
        1 if a generator or scope cannot be loaded
    """

    state = inputstate.copy()

    try:
        generators = state.projectConfig.generators_load() if state.projectConfig else {}
        scopes = state.projectConfig.scopes_load() if state.projectConfig else None
        state.readmix = Readmix(
            generators=generators,
            vars=state.variables,
            scopes=scopes,
            backup_enabled=state.backup,
            backup_dir=state.backupDir,
        )
    except (ProjectConfigError, TypeError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Built {state.readmix}", level=2)
    return state


def files_update(inputstate: ProgramState) -> ProgramState:
    """
    Update every file, continuing past failures.

    Args:
        inputstate: Program state with readmix and paths

    Returns:
        ProgramState with added field:
            - updateResults: path -> error message, None on success
    """

    state = inputstate.copy()
    results = {}

    for path in state.paths:
        try:
            state.readmix.update_file(path)
            results[path] = None
        except ReadmixError as e:
            results[path] = format_error(e)

    state.updateResults = results
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Report errors and set the exit status.

    Args:
        inputstate: Program state with updateResults

    Returns:
        ProgramState with added field:
            - exitCode: 0 if every file was updated, 1 otherwise
    """
    state: ProgramState = inputstate.copy()

    failed = {path: message for path, message in state.updateResults.items() if message}
    for message in failed.values():
        print(f"Error: {message}", file=sys.stderr)

    updated = len(state.updateResults) - len(failed)
    LOG(f"Updated {updated} of {len(state.updateResults)} files", level=1)

    state.exitCode = 1 if failed else 0
    return state


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point - update files from the command line.

    Orchestrates the update pipeline:
        1. env_check: Load the project configuration
        2. vars_parse: Merge project and CLI variables
        3. readmix_build: Configure generators, scopes and backups
        4. files_update: Update every path, collecting errors
        5. results_report: Print errors, compute the exit status

    Args:
        argv: Command line arguments, sys.argv[1:] when None

    Returns:
        Process exit status
    """

    options = parser.parse_args(argv)
    state: ProgramState = ProgramState.state_createFromNamespace(options)

    # Connect state to logger for entire pipeline
    sink_install()
    state_connectToLogger(state)

    # Execute update pipeline
    final = pipeline(state, env_check, vars_parse, readmix_build, files_update, results_report)
    return final.exitCode


if __name__ == "__main__":
    sys.exit(main())
