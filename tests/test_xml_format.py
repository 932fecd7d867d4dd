"""Tests for svg_editor.xml_format module."""

from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from svg_editor.xml_format import format_xml


class TestFormatXml:
    """Tests for format_xml function."""

    def test_text_element_stays_inline(self):
        assert format_xml("<a><b>x</b></a>").split("\n") == ["<a>", "  <b>x</b>", "</a>"]

    def test_nested_elements(self):
        result = format_xml("<svg><g><rect/><circle/></g></svg>")
        assert result == "<svg>\n  <g>\n    <rect/>\n    <circle/>\n  </g>\n</svg>"

    def test_collapses_existing_whitespace(self):
        messy = "<svg>\n\n      <g>\n<rect/>   </g>\n</svg>\n"
        assert format_xml(messy) == "<svg>\n  <g>\n    <rect/>\n  </g>\n</svg>"

    def test_idempotent(self):
        once = format_xml("<svg><g><text>hi</text></g></svg>")
        assert format_xml(once) == once

    def test_empty_element_pair_inline(self):
        assert format_xml("<svg><g></g></svg>") == "<svg>\n  <g></g>\n</svg>"

    def test_declaration_and_comment_do_not_indent(self):
        result = format_xml('<?xml version="1.0"?><!-- note --><svg><rect/></svg>')
        assert result.split("\n") == [
            '<?xml version="1.0"?>',
            "<!-- note -->",
            "<svg>",
            "  <rect/>",
            "</svg>",
        ]

    def test_attributes_kept(self):
        result = format_xml('<svg viewBox="0 0 10 10"><rect x="1" y="2"/></svg>')
        assert result.split("\n")[1] == '  <rect x="1" y="2"/>'

    def test_custom_indent(self):
        assert format_xml("<a><b/></a>", indent="\t") == "<a>\n\t<b/>\n</a>"

    def test_text_preserved_inside_inline_element(self):
        assert format_xml("<svg><text> a  b </text></svg>").split("\n")[1] == (
            "  <text> a  b </text>"
        )

    def test_mixed_content(self):
        result = format_xml("<p>one<b>two</b>three</p>")
        assert result.split("\n") == ["<p>", "  one", "  <b>two</b>", "  three", "</p>"]

    def test_extra_closing_tags_floor_at_zero(self):
        assert format_xml("</a></b><c/>") == "</a>\n</b>\n<c/>"

    def test_unclosed_tags(self):
        assert format_xml("<a><b><c/>") == "<a>\n  <b>\n    <c/>"

    def test_empty(self):
        assert format_xml("") == ""
        assert format_xml("   \n ") == ""
