"""
Transform pipeline tests

Tests resolution, rendering, sibling lookup and the generator contract
through Readmix.transform_string().
"""

import pytest

from conftest import Boxes, Recorder
from readmix.lib.errors import ParseError, ReadmixError
from readmix.models.generator import ParamSpec
from readmix.models.tags import Position


def transform_error(rdmx, source, source_path=None):
    with pytest.raises(ReadmixError) as exc_info:
        rdmx.transform_string(source, source_path=source_path)
    return exc_info.value


class TestPassthrough:
    """Test that text outside directives is untouched"""

    def test_text_only_round_trip(self, readmix_new):
        """A document without directives is returned unchanged"""
        source = "# Title\r\n\r\nSome <!-- comment --> text\n\n"
        assert readmix_new().transform_string(source) == source

    def test_replace_block_content(self, readmix_new):
        """Only the content between markers is replaced"""
        rdmx = readmix_new(generators={"rdmx": Recorder(content="Z")})
        output = rdmx.transform_string("A<!-- rdmx :x k:1 -->B<!-- rdmx /:x -->C")
        assert output == "A<!-- rdmx :x k:1 -->Z<!-- rdmx /:x -->C"

    def test_children_passthrough_is_identity(self, readmix_new):
        """Rendering children unchanged reproduces the document"""
        source = (
            "intro\n"
            "<!-- rdmx t:box name:a -->\n"
            "  body text\n\n"
            "<!--- rdmx /t:box --->\n"
            "outro\n"
        )
        rdmx = readmix_new(generators={"t": Boxes()})
        assert rdmx.transform_string(source) == source

    def test_nested_generation(self, readmix_new):
        """Nested directives are rendered by their parent's children_render()"""
        source = (
            "<!-- rdmx t:box name:a -->\n"
            "Before\n"
            "<!-- rdmx g:x -->\n"
            "Old Content\n"
            "<!-- rdmx /g:x -->\n"
            "After\n"
            "<!-- rdmx /t:box -->\n"
        )
        rdmx = readmix_new(generators={"t": Boxes(), "g": Recorder(content="New Content\n")})
        assert rdmx.transform_string(source) == source.replace("Old Content", "New Content")

    def test_children_rendered_twice(self, readmix_new):
        """A generator may render its children more than once"""
        rdmx = readmix_new(generators={"t": Boxes(), "g": Recorder(content="n")})
        output = rdmx.transform_string("<!-- rdmx t:twice -->a<!-- rdmx g:x --><!-- rdmx /g:x --><!-- rdmx /t:twice -->")
        assert output == "<!-- rdmx t:twice -->a<!-- rdmx g:x -->n<!-- rdmx /g:x -->a<!-- rdmx g:x -->n<!-- rdmx /g:x --><!-- rdmx /t:twice -->"

    def test_generator_not_rendering_children(self, readmix_new):
        """Children of a generator that ignores them are never rendered"""
        inner = Recorder(content="never")
        rdmx = readmix_new(generators={"rdmx": Recorder(content=""), "g": inner})
        rdmx.transform_string("<!-- rdmx :x --><!-- rdmx g:x --><!-- rdmx /g:x --><!-- rdmx /:x -->")
        assert inner.calls == []


class TestParams:
    """Test parameters handed to generators"""

    def test_params_in_directive_order_then_defaults(self, readmix_new):
        """Given params keep their order, defaults follow"""
        gen = Recorder(params={
            "a": ParamSpec(type="integer", default=1),
            "b": ParamSpec(type="string"),
            "c": ParamSpec(type="boolean", default=False),
        })
        readmix_new(generators={"g": gen}).transform_string('<!-- rdmx g:x c:true b:"s" --><!-- rdmx /g:x -->')
        assert list(gen.calls[0].items()) == [("c", True), ("b", "s"), ("a", 1)]

    def test_variables_are_substituted(self, readmix_new):
        """$name values come from the variable table"""
        gen = Recorder(params={"k": ParamSpec(type="integer")})
        rdmx = readmix_new(generators={"g": gen}, vars={"num": 3})
        rdmx.transform_string("<!-- rdmx g:x k:$num --><!-- rdmx /g:x -->")
        assert gen.calls == [{"k": 3}]

    def test_wildcard_accepts_any_key(self, readmix_new):
        """The * key admits undeclared params of any type"""
        gen = Recorder()
        readmix_new(generators={"g": gen}).transform_string("<!-- rdmx g:x a:1 b:two c:1.5 --><!-- rdmx /g:x -->")
        assert gen.calls == [{"a": 1, "b": "two", "c": 1.5}]


class TestResolutionErrors:
    """Test errors raised before any generator runs"""

    def test_unresolved_generator(self, readmix_new):
        """An unknown namespace is reported at the directive"""
        e = transform_error(readmix_new(), "\n<!-- rdmx nope:x --><!-- rdmx /nope:x -->", "doc.md")
        assert e.kind == "unresolved_generator"
        assert e.arg == "nope"
        assert "doc.md:2:11" in e.message

    def test_unknown_action(self, readmix_new):
        """An action missing from the catalog is reported"""
        e = transform_error(readmix_new(), "<!-- rdmx :nope --><!-- rdmx /:nope -->")
        assert e.kind == "unknown_action"
        assert e.arg[0] == "nope"
        assert "rdmx:nope" in e.message

    def test_undefined_variable(self, readmix_new):
        """A variable missing from the table is undef_var"""
        rdmx = readmix_new(generators={"g": Recorder()})
        e = transform_error(rdmx, "<!-- rdmx g:x k:$missing --><!-- rdmx /g:x -->")
        assert e.kind == "undef_var"
        assert e.arg == "missing"
        assert e.message == "undefined variable $missing in nofile:1:11"

    def test_missing_required_param(self, readmix_new):
        """A required param must be given"""
        e = transform_error(readmix_new(), "<!-- rdmx :section -->\nSome content\n<!-- rdmx /:section -->\n")
        assert e.kind == "params_validation_error"
        assert "required param name not found" in e.message

    def test_unknown_param(self, readmix_new):
        """Undeclared params are rejected without a wildcard"""
        e = transform_error(readmix_new(), "<!-- rdmx :section name:s other:123 -->\n<!-- rdmx /:section -->\n")
        assert e.kind == "params_validation_error"
        assert "unknown param other" in e.message

    def test_wrong_type(self, readmix_new):
        """Values are not coerced between types"""
        gen = Recorder(params={"k": ParamSpec(type="integer")})
        e = transform_error(readmix_new(generators={"g": gen}), '<!-- rdmx g:x k:"1" --><!-- rdmx /g:x -->')
        assert e.kind == "params_validation_error"
        assert "param k" in e.message

    def test_duplicate_param(self, readmix_new):
        """A key given twice is rejected"""
        e = transform_error(readmix_new(generators={"g": Recorder()}), "<!-- rdmx g:x k:1 k:2 --><!-- rdmx /g:x -->")
        assert e.kind == "params_validation_error"
        assert "duplicate param k" in e.message

    def test_children_resolved_before_parent(self, readmix_new):
        """An error inside a block is reported before the block's own"""
        source = "<!-- rdmx :section -->\n<!-- rdmx :nope -->\n<!-- rdmx /:nope -->\n<!-- rdmx /:section -->\n"
        e = transform_error(readmix_new(), source)
        assert e.kind == "unknown_action"
        assert e.arg[0] == "nope"
        assert e.loc.line == 2

    def test_resolution_precedes_generation(self, readmix_new):
        """No generator runs when any directive fails to resolve"""
        gen = Recorder()
        source = "<!-- rdmx g:x --><!-- rdmx /g:x -->\n<!-- rdmx nope:x --><!-- rdmx /nope:x -->"
        transform_error(readmix_new(generators={"g": gen}), source)
        assert gen.calls == []

    def test_parse_errors_propagate(self, readmix_new):
        """Structural errors surface from transform_string"""
        with pytest.raises(ParseError) as exc_info:
            readmix_new().transform_string("<!-- rdmx :x -->content")
        assert exc_info.value.kind == "no_block_end"


class TestGeneratorContract:
    """Test generator return values"""

    def test_failure(self, readmix_new):
        """A Failure becomes generator_error carrying the reason"""
        e = transform_error(readmix_new(generators={"t": Boxes()}), "<!-- rdmx t:fail --><!-- rdmx /t:fail -->")
        assert e.kind == "generator_error"
        assert e.arg[1] == "fail"
        assert e.arg[3] == "broken"

    def test_invalid_return(self, readmix_new):
        """Anything but Success or Failure is invalid_generator_return"""
        e = transform_error(readmix_new(generators={"t": Boxes()}), "<!-- rdmx t:bad --><!-- rdmx /t:bad -->")
        assert e.kind == "invalid_generator_return"
        assert e.arg[3] == "not a result"

    def test_success_must_carry_text(self, readmix_new):
        """Success content must be a string"""
        e = transform_error(readmix_new(generators={"t": Boxes()}), "<!-- rdmx t:nonstr --><!-- rdmx /t:nonstr -->")
        assert e.kind == "invalid_generator_return"

    def test_var_get(self, readmix_new):
        """Generators read variables from the context"""
        rdmx = readmix_new(generators={"t": Boxes()}, vars={"who": "me"})
        output = rdmx.transform_string("<!-- rdmx t:var key:who --><!-- rdmx /t:var -->")
        assert output == "<!-- rdmx t:var key:who -->me\n<!-- rdmx /t:var -->"

    def test_var_get_undefined(self, readmix_new):
        """An undefined variable read by a generator is undef_var at its directive"""
        rdmx = readmix_new(generators={"t": Boxes()})
        e = transform_error(rdmx, "\n\n<!-- rdmx t:var key:nothing --><!-- rdmx /t:var -->")
        assert e.kind == "undef_var"
        assert e.arg == "nothing"
        assert e.loc.line == 3

    def test_uncaught_section_lookup(self, readmix_new):
        """A lookup the generator does not handle is a generator_error at its directive"""
        rdmx = readmix_new(generators={"t": Boxes()})
        e = transform_error(rdmx, "<!-- rdmx t:peek name:nope --><!-- rdmx /t:peek -->", "doc.md")
        assert e.kind == "generator_error"
        assert e.arg[3] == ("section_not_found", "nope")
        assert e.message.startswith("generator error in doc.md:1:11")

    def test_catalog_as_plain_dicts(self, readmix_new):
        """Any object with actions() and generate() is a generator"""

        class Plain:
            def actions(self):
                return {"hi": {"params": {"who": {"type": "string", "required": True}}}}

            def generate(self, action, params, context):
                from readmix.models.generator import Success
                return Success(f"hi {params['who']}")

        rdmx = readmix_new(generators={"p": Plain()})
        assert rdmx.transform_string("<!-- rdmx p:hi who:you --><!-- rdmx /p:hi -->") == (
            "<!-- rdmx p:hi who:you -->hi you<!-- rdmx /p:hi -->"
        )


class TestSiblingLookup:
    """Test RenderContext.section_lookup()"""

    def test_closest_match(self, readmix_new):
        """The last rendered container with the name wins"""
        source = (
            "<!-- rdmx t:box name:a -->one\n<!-- rdmx /t:box -->\n"
            "<!-- rdmx t:box name:a -->two\n<!-- rdmx /t:box -->\n"
            "<!-- rdmx t:show name:a -->\n<!-- rdmx /t:show -->\n"
        )
        output = readmix_new(generators={"t": Boxes()}).transform_string(source)
        assert "<!-- rdmx t:show name:a -->\nTWO\n<!-- rdmx /t:show -->" in output

    def test_following_siblings_not_visible(self, readmix_new):
        """A container after the caller is not rendered yet"""
        source = (
            "<!-- rdmx t:show name:a -->\n<!-- rdmx /t:show -->\n"
            "<!-- rdmx t:box name:a -->one\n<!-- rdmx /t:box -->\n"
        )
        output = readmix_new(generators={"t": Boxes()}).transform_string(source)
        assert output.startswith("<!-- rdmx t:show name:a -->\nmissing\n")

    def test_other_depths_not_visible(self, readmix_new):
        """A container nested one level down is not a sibling"""
        source = (
            "<!-- rdmx t:box name:outer -->\n"
            "<!-- rdmx t:box name:a -->one\n<!-- rdmx /t:box -->\n"
            "<!-- rdmx /t:box -->\n"
            "<!-- rdmx t:show name:a -->\n<!-- rdmx /t:show -->\n"
        )
        output = readmix_new(generators={"t": Boxes()}).transform_string(source)
        assert "<!-- rdmx t:show name:a -->\nmissing\n" in output

    def test_non_container_not_visible(self, readmix_new):
        """Only actions declaring a container are found"""
        source = (
            "<!-- rdmx g:x name:a --><!-- rdmx /g:x -->\n"
            "<!-- rdmx t:show name:a -->\n<!-- rdmx /t:show -->\n"
        )
        output = readmix_new(generators={"t": Boxes(), "g": Recorder()}).transform_string(source)
        assert "missing" in output


class TestConfiguration:
    """Test pipeline construction errors"""

    def test_invalid_param_type(self, readmix_new):
        """An unknown schema type is rejected at construction"""
        with pytest.raises(ValueError):
            readmix_new(generators={"g": Recorder(params={"k": {"type": "date"}})})

    def test_not_a_generator(self, readmix_new):
        """Objects without the generator methods are rejected"""
        with pytest.raises(TypeError):
            readmix_new(generators={"g": object()})

    def test_invalid_scope_return(self):
        """A scope must return a mapping"""
        from readmix.lib.renderer import Readmix

        class BadScope:
            def vars_get(self):
                return ["not", "a", "mapping"]

        with pytest.raises(TypeError):
            Readmix(scopes=[BadScope()], backup_enabled=False)

    def test_caller_generator_replaces_builtin(self, readmix_new):
        """A namespace given by the caller overrides the built-in one"""
        rdmx = readmix_new(generators={"rdmx": Recorder(actions=("section",), content="X")})
        output = rdmx.transform_string("<!-- rdmx :section --><!-- rdmx /:section -->")
        assert output == "<!-- rdmx :section -->X<!-- rdmx /:section -->"


def sections_nested(depth):
    return (
        "\n"
        + "<!-- rdmx :section name:s -->" * depth
        + "core"
        + "<!-- rdmx /:section -->" * depth
    )


class TestNesting:
    """Test deeply nested directives"""

    def test_deep_nesting_renders(self, readmix_new):
        """Moderately deep documents round-trip"""
        source = sections_nested(60)
        assert readmix_new().transform_string(source) == source

    def test_too_deep_for_render(self, readmix_new):
        """Exhausting the stack while rendering is reported at the outermost directive"""
        e = transform_error(readmix_new(), sections_nested(400), "deep.md")
        assert e.kind == "nesting_too_deep"
        assert e.loc == Position(2, 11)
        assert e.arg == 400
        assert e.message == "directives nested too deeply in deep.md:2:11, 400 levels"

    def test_too_deep_for_parse(self, readmix_new):
        """Exhausting the stack while parsing is a parse error"""
        with pytest.raises(ParseError) as exc_info:
            readmix_new().transform_string(sections_nested(5000), source_path="deep.md")
        assert exc_info.value.kind == "nesting_too_deep"
        assert exc_info.value.loc == Position(2, 11)
        assert exc_info.value.arg == 5000
