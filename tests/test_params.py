"""
Parameter schema tests
"""

import pytest

from readmix.lib.errors import InvalidParamsError
from readmix.lib.params import paramsSchema_build, params_validate
from readmix.models.generator import ParamSpec


SCHEMA = {
    "name": ParamSpec(type="string", required=True),
    "count": ParamSpec(type="integer", default=3),
    "flag": ParamSpec(type="boolean"),
}


class TestParamsValidate:
    """Test validation of directive parameters"""

    def test_given_keys_then_defaults(self):
        """Given keys keep directive order, defaults follow"""
        schema = paramsSchema_build("demo", SCHEMA)
        assert params_validate(schema, [("flag", True), ("name", "x")]) == {
            "flag": True,
            "name": "x",
            "count": 3,
        }
        assert list(params_validate(schema, [("flag", True), ("name", "x")])) == ["flag", "name", "count"]

    def test_missing_required(self):
        """Required params must be given"""
        schema = paramsSchema_build("demo", SCHEMA)
        with pytest.raises(InvalidParamsError, match="required param name not found"):
            params_validate(schema, [])

    def test_unknown_key(self):
        """Undeclared keys are rejected"""
        schema = paramsSchema_build("demo", SCHEMA)
        with pytest.raises(InvalidParamsError, match="unknown param other"):
            params_validate(schema, [("name", "x"), ("other", 1)])

    def test_no_coercion(self):
        """Strings are not integers, integers are not booleans"""
        schema = paramsSchema_build("demo", SCHEMA)
        with pytest.raises(InvalidParamsError, match="param count"):
            params_validate(schema, [("name", "x"), ("count", "1")])
        with pytest.raises(InvalidParamsError, match="param flag"):
            params_validate(schema, [("name", "x"), ("flag", 1)])

    def test_duplicate_key(self):
        """A key may appear only once"""
        schema = paramsSchema_build("demo", SCHEMA)
        with pytest.raises(InvalidParamsError, match="duplicate param name"):
            params_validate(schema, [("name", "x"), ("name", "y")])

    def test_wildcard(self):
        """The * key admits any undeclared key"""
        schema = paramsSchema_build("demo", {"name": "string", "*": "any"})
        assert params_validate(schema, [("z", 1.5), ("name", "x")]) == {"z": 1.5, "name": "x"}

    def test_reserved_names(self):
        """Keys clashing with model attributes are plain params"""
        schema = paramsSchema_build("demo", {"model_config": "string", "schema": "integer"})
        assert params_validate(schema, [("schema", 2), ("model_config", "a")]) == {
            "schema": 2,
            "model_config": "a",
        }


class TestParamsSchemaBuild:
    """Test schema compilation"""

    def test_dict_entries(self):
        """Plain dicts describe params like ParamSpec"""
        schema = paramsSchema_build("demo", {"n": {"type": "float", "required": True}})
        assert schema.specs["n"] == ParamSpec(type="float", required=True)

    def test_unknown_type(self):
        """Only the known type names are accepted"""
        with pytest.raises(ValueError, match="invalid type"):
            paramsSchema_build("demo", {"n": "decimal"})

    def test_unknown_spec_field(self):
        """Dict entries only take ParamSpec fields"""
        with pytest.raises(ValueError):
            paramsSchema_build("demo", {"n": {"type": "string", "optional": True}})
