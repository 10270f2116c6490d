"""
Shared test generators and fixtures
"""

import pytest

from readmix.lib.errors import SectionNotFoundError
from readmix.lib.renderer import Readmix
from readmix.models.generator import Failure, Generator, ParamSpec, Success


class Recorder(Generator):
    """Generator returning fixed content for any action and recording calls"""

    def __init__(self, actions=("x",), content="Z", params=None):
        super().__init__()
        self.content = content
        self.calls = []
        for action in actions:
            self.action_register(action, self.record, params=params or {"*": "any"})

    def record(self, params, context):
        self.calls.append(params)
        return Success(self.content)


class Boxes(Generator):
    """Named containers and a lookup action reading them"""

    def __init__(self):
        super().__init__()
        self.action_register(
            "box",
            self.box,
            params={"name": ParamSpec(type="string", required=True)},
            container="name",
        )
        self.action_register(
            "show",
            self.show,
            params={"name": ParamSpec(type="string", required=True)},
        )
        self.action_register("twice", self.twice)
        self.action_register("var", self.var, params={"key": ParamSpec(type="string", required=True)})
        self.action_register("fail", lambda params, context: Failure("broken"))
        self.action_register("bad", lambda params, context: "not a result")
        self.action_register("nonstr", lambda params, context: Success(42))
        self.action_register("peek", self.peek, params={"name": ParamSpec(type="string", required=True)})

    def box(self, params, context):
        return Success(context.children_render())

    def show(self, params, context):
        try:
            section = context.section_lookup(params["name"])
        except SectionNotFoundError:
            return Success("missing\n")
        return Success(section.rendered[1].upper())

    def peek(self, params, context):
        return Success(context.section_lookup(params["name"]).rendered[1])

    def twice(self, params, context):
        return Success(context.children_render() + context.children_render())

    def var(self, params, context):
        return Success(f"{context.var_get(params['key'])}\n")


@pytest.fixture
def readmix_new():
    """Build a Readmix without scopes or backups"""

    def build(**opts):
        opts.setdefault("scopes", [])
        opts.setdefault("backup_enabled", False)
        return Readmix(**opts)

    return build
