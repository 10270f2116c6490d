"""
Built-in generator of the rdmx namespace

Actions:
    app_dep  pyproject.toml dependency snippet for a package
    badges   img.shields.io markdown badges
    section  named container, renders its children unchanged
    eval     evaluates the Python code block of a previous section
"""

from ..models.generator import Generator, ParamSpec
from .app_dep import app_dep_generate
from .badges import badges_generate
from .eval import eval_generate
from .section import section_generate


class BuiltIn(Generator):
    """
    Actions available as `rdmx:action`, or `:action` for short.

    Example:
        <!-- rdmx :section name:usage -->
        ```python
        sum([1, 2, 3])
        ```
        <!-- rdmx /:section -->

        <!-- rdmx :eval section:usage -->
        <!-- rdmx /:eval -->
    """

    def __init__(self) -> None:
        super().__init__()

        self.action_register(
            "app_dep",
            app_dep_generate,
            params={
                "package": ParamSpec(
                    type="string",
                    doc="The distribution name. Defaults to the `package_name` variable.",
                ),
                "vsn": ParamSpec(
                    type="string",
                    doc="The version to require. Defaults to the installed version of the package.",
                ),
                "comma": ParamSpec(
                    type="boolean", default=True,
                    doc="Include a comma after the requirement string.",
                ),
                "patch": ParamSpec(
                    type="boolean", default=False,
                    doc="Include the patch component in the required version.",
                ),
                "extras": ParamSpec(
                    type="string",
                    doc="Extras to require, separated with commas.",
                ),
                "only": ParamSpec(
                    type="string",
                    doc=(
                        "Declares the requirement in `[project.optional-dependencies]` "
                        "under these groups, separated with commas."
                    ),
                ),
            },
            doc="Generates a fenced `pyproject.toml` snippet declaring a dependency on a package.",
        )

        self.action_register(
            "badges",
            badges_generate,
            params={
                "pypi": ParamSpec(
                    type="string",
                    doc=(
                        "Generates a version badge linking to PyPI. Requires a package name and "
                        "an optional query string for customization. "
                        'Example: `"readmix?color=4e2a8e"`.'
                    ),
                ),
                "github_action": ParamSpec(
                    type="string",
                    doc=(
                        "Generates a badge linking to the latest GitHub Action run. Requires "
                        "`owner/repo/workflow_file` and an optional query string. "
                        'Example: `"me/readmix/ci.yaml?label=CI&branch=main"`.'
                    ),
                ),
                "license": ParamSpec(
                    type="string",
                    doc='Generates a license badge for a PyPI package. Example: `"readmix"`.',
                ),
            },
            doc=(
                "Generates badges with `img.shields.io`.\n\n"
                "Badges are generated in the order of the action params. Any value may end "
                "with `|alt text` to replace the image alt text."
            ),
        )

        self.action_register(
            "section",
            section_generate,
            params={
                "name": ParamSpec(type="string", required=True, doc="The name of the section."),
            },
            doc=(
                "Defines a named block that other actions can retrieve during generation.\n\n"
                "The section itself doesn't transform content but allows nested blocks to be "
                "processed. Uniqueness of names is not enforced."
            ),
            container="name",
        )

        self.action_register(
            "eval",
            eval_generate,
            params={
                "section": ParamSpec(
                    type="string", required=True,
                    doc="The name of the section to evaluate.",
                ),
                "catch": ParamSpec(
                    type="boolean", default=False,
                    doc="Display exception banners as output instead of failing.",
                ),
            },
            doc=(
                "Evaluates the first fenced `python` code block of the last section with the "
                "given name at the same nesting level, and outputs the value of its final "
                "expression in a fenced code block."
            ),
        )
