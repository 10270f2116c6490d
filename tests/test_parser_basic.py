"""
Basic parser tests - simplest cases

Tests empty source, plain text, single directives, marker spellings and the
newline owned by each marker.
"""

import pytest

from readmix.lib.parser import Parser, blocks_toText
from readmix.models.blocks import DirectiveNode, EndChunk, StartChunk, TextChunk, TextNode
from readmix.models.tags import Position


class TestEmptyAndSimple:
    """Test empty source and plain text"""

    def test_empty_source(self):
        """Empty string should parse to empty list"""
        parser = Parser("")
        assert parser.parse() == []

    def test_plain_text(self):
        """Text without markers is a single text node"""
        nodes = Parser("# Title\n\nSome text\n").parse()
        assert nodes == [TextNode("# Title\n\nSome text\n")]

    def test_html_comments_are_text(self):
        """Comments without the marker keyword are plain text"""
        source = "<!-- a comment -->\n<!--rdmx :x -->\n<!-- rdmxx :x -->\n"
        assert Parser(source).parse() == [TextNode(source)]

    def test_single_block(self):
        """Start, content and end form one directive node"""
        nodes = Parser("<!-- rdmx :section name:a -->\nhello\n<!-- rdmx /:section -->\n").parse()

        assert len(nodes) == 1
        node = nodes[0]
        assert isinstance(node, DirectiveNode)
        assert (node.namespace, node.action) == ("rdmx", "section")
        assert [(p.key, p.value) for p in node.params] == [("name", "a")]
        assert node.children == [TextNode("hello\n")]

    def test_empty_block(self):
        """A block may have no content at all"""
        nodes = Parser("<!-- rdmx :x --><!-- rdmx /:x -->").parse()
        assert nodes[0].children == []

    def test_text_around_block(self):
        """Text before and after a block is preserved"""
        nodes = Parser("A<!-- rdmx :x k:1 -->B<!-- rdmx /:x -->C").parse()

        assert nodes[0] == TextNode("A")
        assert nodes[1].children == [TextNode("B")]
        assert nodes[2] == TextNode("C")

    def test_default_file_name(self):
        """Nodes record the logical file name"""
        assert Parser("<!-- rdmx :x --><!-- rdmx /:x -->").parse()[0].file == "nofile"
        assert Parser("<!-- rdmx :x --><!-- rdmx /:x -->", "README.md").parse()[0].file == "README.md"


class TestMarkerSpelling:
    """Test two- and three-dash markers"""

    def test_three_dash_markers(self):
        """<!--- rdmx ... ---> is a valid marker"""
        source = "<!--- rdmx :x --->\nbody\n<!--- rdmx /:x --->\n"
        nodes = Parser(source).parse()
        assert nodes[0].raw_header == "<!--- rdmx :x --->\n"
        assert nodes[0].raw_footer == "<!--- rdmx /:x --->\n"

    def test_mixed_spellings(self):
        """Opener and closer dash counts are chosen independently"""
        source = "<!-- rdmx :x --->\nbody\n<!--- rdmx /:x -->\n"
        nodes = Parser(source).parse()
        assert nodes[0].children == [TextNode("body\n")]
        assert blocks_toText(nodes) == source

    def test_multiline_header(self):
        """Parameters may span lines"""
        source = (
            "<!-- rdmx :badges\n"
            "  pypi    : readmix\n"
            "  license : readmix\n"
            "  -->\n"
            "old\n"
            "<!-- rdmx /:badges -->\n"
        )
        nodes = Parser(source).parse()
        assert [p.key for p in nodes[0].params] == ["pypi", "license"]
        assert nodes[0].children == [TextNode("old\n")]


class TestOwnedNewline:
    """Test the newline following a marker"""

    def test_marker_owns_one_newline(self):
        """Exactly one newline after a marker belongs to it"""
        nodes = Parser("<!-- rdmx :x -->\n\ntext\n<!-- rdmx /:x -->\n\nafter").parse()

        assert nodes[0].raw_header == "<!-- rdmx :x -->\n"
        assert nodes[0].children == [TextNode("\ntext\n")]
        assert nodes[0].raw_footer == "<!-- rdmx /:x -->\n"
        assert nodes[1] == TextNode("\nafter")

    def test_marker_owns_crlf(self):
        """A \\r\\n pair counts as the owned newline"""
        nodes = Parser("<!-- rdmx :x -->\r\nbody\r\n<!-- rdmx /:x -->\r\n").parse()
        assert nodes[0].raw_header == "<!-- rdmx :x -->\r\n"
        assert nodes[0].children == [TextNode("body\r\n")]

    def test_no_newline(self):
        """A marker followed by text owns nothing"""
        nodes = Parser("<!-- rdmx :x -->body<!-- rdmx /:x -->").parse()
        assert nodes[0].raw_header == "<!-- rdmx :x -->"


class TestChunks:
    """Test the flat chunk sequence"""

    def test_chunk_kinds(self):
        """Text, start and end chunks in document order"""
        chunks = Parser("a<!-- rdmx :x -->b<!-- rdmx /:x -->c").chunks_scan()
        assert [type(c) for c in chunks] == [TextChunk, StartChunk, TextChunk, EndChunk, TextChunk]

    def test_directive_location_follows_opener(self):
        """A directive's position is right after its opener"""
        chunks = Parser("<!-- rdmx :x -->\n<!--- rdmx /:x -->").chunks_scan()
        assert chunks[0].loc == Position(1, 11)
        assert chunks[1].loc == Position(2, 12)

    def test_text_location(self):
        """Text chunks start where the previous marker ended"""
        chunks = Parser("ab\n<!-- rdmx :x -->\nc<!-- rdmx /:x -->").chunks_scan()
        assert chunks[0].loc == Position(1, 1)
        assert chunks[2].loc == Position(3, 1)

    def test_positions_increase(self):
        """Chunk positions strictly increase"""
        source = "x\n<!-- rdmx :a -->\n1<!-- rdmx :b -->2<!-- rdmx /:b -->\n<!-- rdmx /:a -->\ny\n"
        locs = [c.loc for c in Parser(source).chunks_scan()]
        assert locs == sorted(locs)
        assert len(set(locs)) == len(locs)


class TestRoundTrip:
    """Test reconstruction of source text"""

    @pytest.mark.parametrize("source", [
        "",
        "just text\r\n",
        "<!-- rdmx :x a:1, b:\"two\" -->\n\n  content\n<!--- rdmx /:x --->",
        "<!-- rdmx :a -->\n<!-- rdmx :b -->\ninner\n<!-- rdmx /:b -->\n<!-- rdmx /:a -->\ntail",
    ])
    def test_blocks_to_text(self, source):
        """blocks_toText reproduces the parsed source exactly"""
        assert blocks_toText(Parser(source).parse()) == source
