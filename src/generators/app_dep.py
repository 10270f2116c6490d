"""
Dependency snippet for pyproject.toml

Renders a fenced TOML block declaring the package as a dependency with a
compatible-release specifier:

    ```toml
    [project]
    dependencies = [
        "readmix~=1.0",
    ]
    ```
"""

import re
from importlib.metadata import PackageNotFoundError, version as distribution_version
from typing import Any, Dict, List

from ..models.generator import Failure, Success


VERSION_RE = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(.*)$")


def version_trim(vsn: str, patch: bool) -> str:
    """
    Reduce a version to the precision used in the specifier.

    `~=` needs at least two release components, so a bare major version
    gains ".0".

    Raises:
        ValueError: If vsn does not start with a release number

    Example:
        >>> version_trim("1.2.3", patch=False), version_trim("1.2.3", patch=True)
        ('1.2', '1.2.3')
    """
    match = VERSION_RE.match(vsn.strip())
    if match is None:
        raise ValueError(f"invalid version {vsn!r}")
    major, minor, micro, rest = match.groups()
    minor = minor or "0"
    if patch and micro is not None:
        return f"{major}.{minor}.{micro}{rest}"
    if patch:
        return f"{major}.{minor}{rest}"
    return f"{major}.{minor}"


def requirement_make(package: str, vsn: str, extras: str = "") -> str:
    names = [name.strip() for name in extras.split(",") if name.strip()]
    extras_part = f"[{','.join(names)}]" if names else ""
    return f"{package}{extras_part}~={vsn}"


def app_dep_generate(params: Dict[str, Any], context: Any):
    package = params.get("package")
    if package is None:
        package = context.var_get("package_name")

    vsn = params.get("vsn")
    if vsn is None:
        try:
            vsn = distribution_version(package)
        except PackageNotFoundError:
            return Failure(("package_not_found", package))

    try:
        vsn = version_trim(vsn, params.get("patch", False))
    except ValueError as e:
        return Failure(("invalid_version", str(e)))

    comma = "," if params.get("comma", True) else ""
    entry = f'    "{requirement_make(package, vsn, params.get("extras") or "")}"{comma}\n'

    groups = [name.strip() for name in (params.get("only") or "").split(",") if name.strip()]

    lines: List[str] = ["```toml\n"]
    if groups:
        lines.append("[project.optional-dependencies]\n")
        for group in groups:
            lines.extend([f"{group} = [\n", entry, "]\n"])
    else:
        lines.extend(["[project]\n", "dependencies = [\n", entry, "]\n"])
    lines.append("```\n")
    return Success("".join(lines))
