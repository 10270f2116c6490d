"""
Markdown badges from img.shields.io

Each badge parameter is written `value` or `value|alt text`:

    <!-- rdmx :badges pypi:"readmix?color=4e2a8e" license:readmix -->

renders, in parameter order:

    [![PyPI Version](https://img.shields.io/pypi/v/readmix?color=4e2a8e)](https://pypi.org/project/readmix/)
    [![License](https://img.shields.io/pypi/l/readmix.svg)](https://pypi.org/project/readmix/)
"""

from typing import Any, Callable, Dict, Tuple
from urllib.parse import parse_qs, urlencode, urljoin, urlsplit, urlunsplit

from ..models.generator import Failure, Success


SHIELDS_URL = "https://img.shields.io/"
PYPI_URL = "https://pypi.org/project/"
GITHUB_URL = "https://github.com/"


def badgeAlt_split(arg: str, default_alt: str) -> Tuple[str, str]:
    """Split `value|alt` into (value, alt), falling back to default_alt"""
    value, sep, alt = arg.partition("|")
    return (value, alt) if sep else (value, default_alt)


def markdown_badge(img_alt: str, img_url: str, link_url: str) -> str:
    return f"[![{img_alt}]({img_url})]({link_url})"


def pypi_badge(arg: str) -> str:
    """Version badge; the value may carry a shields.io query string"""
    path, img_alt = badgeAlt_split(arg, "PyPI Version")
    img_url = urljoin(SHIELDS_URL + "pypi/v/", path)
    package = urlsplit(path).path
    return markdown_badge(img_alt, img_url, f"{PYPI_URL}{package}/")


def github_action_badge(arg: str) -> str:
    """
    Workflow status badge.

    The value is `owner/repo/workflow_file` with an optional query string.
    A `branch` query parameter also filters the linked workflow runs.

    Raises:
        ValueError: If the value does not name owner, repo and workflow
    """
    value, img_alt = badgeAlt_split(arg, "Build Status")
    parts = value.split("/", 2)
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"expected owner/repo/workflow, got: {value!r}")
    owner, repo, workflow = parts

    img_url = f"{SHIELDS_URL}github/actions/workflow/status/{owner}/{repo}/{workflow}"

    workflow_parts = urlsplit(workflow)
    branch = parse_qs(workflow_parts.query).get("branch", [""])[0]
    query = urlencode({"query": f"branch:{branch}"}) if branch else ""
    workflow_url = urlunsplit((
        "https",
        "github.com",
        f"/{owner}/{repo}/actions/workflows/{workflow_parts.path}",
        query,
        "",
    ))
    return markdown_badge(img_alt, img_url, workflow_url)


def license_badge(arg: str) -> str:
    package, img_alt = badgeAlt_split(arg, "License")
    img_url = f"{SHIELDS_URL}pypi/l/{package}.svg"
    return markdown_badge(img_alt, img_url, f"{PYPI_URL}{package}/")


BADGES: Dict[str, Callable[[str], str]] = {
    "pypi": pypi_badge,
    "github_action": github_action_badge,
    "license": license_badge,
}


def badges_generate(params: Dict[str, Any], context: Any):
    lines = []
    for key, value in params.items():
        make = BADGES.get(key)
        if make is None:
            continue
        try:
            lines.append(make(value) + "\n")
        except ValueError as e:
            return Failure(("invalid_badge", key, str(e)))
    return Success("".join(lines))
