"""
Parameter schemas for generator actions

An action declares its parameters as a mapping of key to ParamSpec (or an
equivalent plain dict). The schema is compiled once, when the generator is
registered, into a strict pydantic model:

    {"name": ParamSpec(type="string", required=True)}

    ->  create_model("section_params", p0=(StrictStr, Field(alias="name")))

Validation never coerces: `n:"1"` is a string and is rejected where an
integer is declared. The special key `*` admits any undeclared key.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple, Type

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    create_model,
)

from ..models.generator import PARAM_TYPES, WILDCARD_PARAM, ParamSpec
from .errors import InvalidParamsError


TYPE_MAP: Dict[str, Any] = {
    "string": StrictStr,
    "integer": StrictInt,
    "float": StrictFloat,
    "boolean": StrictBool,
    "any": Any,
}


@dataclass
class ParamsSchema:
    """
    Compiled parameter schema of one action

    Attributes:
        action: Action name, used to name the pydantic model
        specs: Declared parameters in declaration order
        model: Strict pydantic model validating the declared parameters
        fields: Parameter key -> model field name
        wildcard: Whether undeclared keys are admitted
    """
    action: str
    specs: Dict[str, ParamSpec] = field(default_factory=dict)
    model: Type[BaseModel] = BaseModel
    fields: Dict[str, str] = field(default_factory=dict)
    wildcard: bool = False


def paramSpec_coerce(key: str, spec: Any) -> ParamSpec:
    """
    Normalize a schema entry into a ParamSpec.

    Args:
        key: Parameter key the entry belongs to
        spec: ParamSpec, dict of ParamSpec fields, or a bare type name

    Returns:
        Validated ParamSpec

    Raises:
        ValueError: Unknown type name or unexpected entry shape
    """
    if isinstance(spec, str):
        spec = ParamSpec(type=spec)
    elif isinstance(spec, Mapping):
        try:
            spec = ParamSpec(**spec)
        except TypeError as e:
            raise ValueError(f"invalid schema for param {key!r}: {e}") from e
    elif not isinstance(spec, ParamSpec):
        raise ValueError(f"invalid schema for param {key!r}: {spec!r}")

    if spec.type not in PARAM_TYPES:
        raise ValueError(
            f"invalid type {spec.type!r} for param {key!r}, expected one of {', '.join(PARAM_TYPES)}"
        )
    return spec


def paramsSchema_build(action: str, raw_schema: Mapping[str, Any]) -> ParamsSchema:
    """
    Compile an action's parameter schema.

    Parameter keys become model aliases, so any directive identifier is
    accepted as a key, including names pydantic reserves for itself.

    Args:
        action: Action name
        raw_schema: Parameter key -> ParamSpec, dict or type name

    Returns:
        ParamsSchema ready for params_validate()

    Raises:
        ValueError: On an invalid schema entry
    """
    specs: Dict[str, ParamSpec] = {}
    wildcard = False
    for key, spec in (raw_schema or {}).items():
        if key == WILDCARD_PARAM:
            paramSpec_coerce(key, spec)
            wildcard = True
            continue
        specs[key] = paramSpec_coerce(key, spec)

    fields: Dict[str, str] = {}
    definitions: Dict[str, Any] = {}
    for index, (key, spec) in enumerate(specs.items()):
        name = f"p{index}"
        fields[key] = name
        if spec.required:
            definitions[name] = (TYPE_MAP[spec.type], Field(alias=key))
        else:
            definitions[name] = (TYPE_MAP[spec.type], Field(default=spec.default, alias=key))

    model = create_model(
        f"{action}_params",
        __config__=ConfigDict(extra="allow" if wildcard else "forbid", strict=True),
        **definitions,
    )
    return ParamsSchema(action=action, specs=specs, model=model, fields=fields, wildcard=wildcard)


def validationError_describe(error: ValidationError) -> str:
    """Turn pydantic errors into short, directive-oriented messages"""
    messages: List[str] = []
    for detail in error.errors():
        key = ".".join(str(part) for part in detail.get("loc", ()))
        if detail["type"] == "extra_forbidden":
            messages.append(f"unknown param {key}")
        elif detail["type"] == "missing":
            messages.append(f"required param {key} not found")
        else:
            messages.append(f"param {key}: {detail['msg']}")
    return ", ".join(messages)


def params_validate(schema: ParamsSchema, pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    """
    Validate directive parameters against a compiled schema.

    Args:
        schema: Compiled schema of the action
        pairs: (key, value) pairs in directive order, variables substituted

    Returns:
        Ordered mapping: given keys in directive order, followed by the
        defaults of omitted parameters that declare one

    Raises:
        InvalidParamsError: Duplicate key, unknown key, missing required key
            or value of the wrong type

    Example:
        >>> schema = paramsSchema_build("x", {"a": {"type": "integer", "default": 1},
        ...                                   "b": {"type": "string"}})
        >>> params_validate(schema, [("b", "hi")])
        {'b': 'hi', 'a': 1}
    """
    given: Dict[str, Any] = {}
    for key, value in pairs:
        if key in given:
            raise InvalidParamsError(f"duplicate param {key}")
        given[key] = value

    try:
        instance = schema.model.model_validate(given)
    except ValidationError as e:
        raise InvalidParamsError(validationError_describe(e)) from e

    extra = instance.model_extra or {}
    result: Dict[str, Any] = {}
    for key in given:
        if key in schema.fields:
            result[key] = getattr(instance, schema.fields[key])
        else:
            result[key] = extra[key]

    for key, spec in schema.specs.items():
        if key not in result and spec.default is not None:
            result[key] = spec.default

    return result
