"""
Generator registry for readmix

Maps directive namespaces to generators and compiles the parameter schema of
every action once, when the generator is registered.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from ..models.generator import ActionSpec
from .log import LOG
from .params import ParamsSchema, paramsSchema_build


@dataclass
class RegisteredGenerator:
    """A generator with its action catalog and compiled schemas"""
    generator: Any
    actions: Dict[str, ActionSpec] = field(default_factory=dict)
    schemas: Dict[str, ParamsSchema] = field(default_factory=dict)


def actionSpec_coerce(name: str, spec: Any) -> ActionSpec:
    """
    Normalize a catalog entry into an ActionSpec.

    Generators not derived from Generator may describe their actions with
    plain dicts: {"params": {...}, "doc": "...", "container": "name"}.

    Raises:
        ValueError: When the entry is neither an ActionSpec nor a mapping
    """
    if isinstance(spec, ActionSpec):
        return spec
    if spec is None:
        return ActionSpec(name=name)
    if isinstance(spec, Mapping):
        unknown = set(spec) - {"params", "doc", "container"}
        if unknown:
            raise ValueError(f"invalid spec for action {name!r}, unknown keys: {sorted(unknown)}")
        return ActionSpec(
            name=name,
            params=dict(spec.get("params") or {}),
            doc=spec.get("doc", ""),
            container=spec.get("container"),
        )
    raise ValueError(f"invalid spec for action {name!r}: {spec!r}")


class GeneratorRegistry:
    """
    Registry of generators by namespace

    Registration validates the generator's catalog and compiles its parameter
    schemas so that configuration mistakes surface at construction time,
    never while a document is being transformed.
    """

    def __init__(self) -> None:
        self.generators: Dict[str, RegisteredGenerator] = {}

    def register(self, namespace: str, generator: Any) -> None:
        """
        Register a generator under a namespace, replacing any previous one.

        Args:
            namespace: Namespace written in directives (e.g. "rdmx")
            generator: Object exposing actions() and generate()

        Raises:
            TypeError: If the generator does not implement the contract
            ValueError: If an action or parameter schema is invalid
        """
        if not (callable(getattr(generator, "actions", None))
                and callable(getattr(generator, "generate", None))):
            raise TypeError(
                f"invalid generator for namespace {namespace!r}, "
                f"expected actions() and generate(), got: {generator!r}"
            )

        catalog = generator.actions()
        if not isinstance(catalog, Mapping):
            raise ValueError(
                f"invalid return value from {generator!r}.actions(), expected a mapping, got: {catalog!r}"
            )

        entry = RegisteredGenerator(generator=generator)
        for name, spec in catalog.items():
            action = actionSpec_coerce(name, spec)
            try:
                schema = paramsSchema_build(name, action.params)
            except ValueError as e:
                raise ValueError(
                    f"invalid action parameters for action {name!r} of {generator!r} "
                    f"(mapped as {namespace!r}), {e}"
                ) from e
            entry.actions[name] = action
            entry.schemas[name] = schema

        self.generators[namespace] = entry
        LOG(f"Registered {generator!r} as {namespace} with {len(entry.actions)} actions", level=3)

    def generator_resolve(self, namespace: str) -> Optional[RegisteredGenerator]:
        """Return the generator registered for a namespace, or None"""
        return self.generators.get(namespace)

    def action_resolve(
        self, namespace: str, action: str
    ) -> Optional[Tuple[ActionSpec, ParamsSchema]]:
        """
        Look up an action's spec and compiled schema.

        Returns:
            (ActionSpec, ParamsSchema), or None when either the namespace or
            the action is unknown
        """
        entry = self.generators.get(namespace)
        if entry is None or action not in entry.actions:
            return None
        return entry.actions[action], entry.schemas[action]

    def namespaces(self) -> list[str]:
        return list(self.generators)
