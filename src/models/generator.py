"""
Generator contract models

A generator exposes a catalog of actions (ActionSpec) and a generate()
operation returning Success or Failure. The Generator base class provides
the registration table most generators need; any object with compatible
actions()/generate() methods is accepted by the registry as well.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..lib.context import RenderContext


PARAM_TYPES = ("string", "integer", "float", "boolean", "any")

# Schema key admitting any parameter not declared explicitly
WILDCARD_PARAM = "*"


@dataclass(frozen=True)
class ParamSpec:
    """
    Schema of a single action parameter

    Attributes:
        type: One of PARAM_TYPES
        required: Whether the directive must provide the parameter
        default: Value used when the parameter is omitted (None: no default)
        doc: Human-readable description, used by docs_generate()
    """
    type: str = "any"
    required: bool = False
    default: Any = None
    doc: str = ""


@dataclass
class ActionSpec:
    """
    Catalog entry for one generator action

    Attributes:
        name: Action name as written in directives
        handler: Implementation (params, context) -> Success | Failure
        params: Parameter schema, key -> ParamSpec (or an equivalent dict)
        doc: Action documentation
        container: Name of the parameter holding the declared name when the
                   action is a named container visible to sibling lookups
    """
    name: str
    handler: Optional[Callable[[Dict[str, Any], "RenderContext"], Any]] = None
    params: Dict[str, Any] = field(default_factory=dict)
    doc: str = ""
    container: Optional[str] = None


@dataclass(frozen=True)
class Success:
    """Generator result carrying the new block content"""
    content: str


@dataclass(frozen=True)
class Failure:
    """Generator result carrying the reason of a failed generation"""
    reason: Any


class Generator:
    """
    Base class for generators built from an explicit registration table.

    Subclasses register their actions in __init__:

        class Greeter(Generator):
            def __init__(self) -> None:
                super().__init__()
                self.action_register(
                    "hello",
                    self.hello_generate,
                    params={"name": ParamSpec(type="string", required=True)},
                )

            def hello_generate(self, params, context):
                return Success(f"Hello {params['name']}\\n")
    """

    def __init__(self) -> None:
        self.specs: Dict[str, ActionSpec] = {}

    def action_register(
        self,
        name: str,
        handler: Callable[[Dict[str, Any], "RenderContext"], Any],
        params: Optional[Dict[str, Any]] = None,
        doc: str = "",
        container: Optional[str] = None,
    ) -> None:
        """Register an action and its implementation"""
        self.specs[name] = ActionSpec(
            name=name,
            handler=handler,
            params=dict(params or {}),
            doc=doc,
            container=container,
        )

    def actions(self) -> Dict[str, ActionSpec]:
        """Return the action catalog, in registration order"""
        return dict(self.specs)

    def generate(self, action: str, params: Dict[str, Any], context: "RenderContext") -> Any:
        """Dispatch to the registered handler of `action`"""
        spec = self.specs.get(action)
        if spec is None or spec.handler is None:
            return Failure(("unknown_action", action))
        return spec.handler(params, context)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
