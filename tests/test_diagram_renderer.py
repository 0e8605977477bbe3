"""Tests for rendering argument trees as diagram DSL."""

import pytest

from argmap.diagram.renderer import (
    connection_style,
    escape_label,
    node_class,
    node_shape,
    render_tree,
    sanitize_id,
    truncate,
)
from argmap.extraction.builder import parse_arguments
from argmap.extraction.models import ArgumentNode, ArgumentTree, ArgumentType, Framework

SCENARIO = (
    "Utilitarian Analysis:\n"
    "This clearly benefits society through measurable welfare gains.\n"
    "However critics argue it ignores individual rights.\n"
)


def node(node_type, framework=None, text="text"):
    return ArgumentNode("arg-1", text, node_type, 2, framework=framework, parent="section-1")


class TestHelpers:
    """Tests for label and style helpers."""

    def test_sanitize_id(self):
        assert sanitize_id("section-1") == "section_1"
        assert sanitize_id("root") == "root"

    def test_truncate(self):
        assert truncate("short") == "short"
        assert truncate("x" * 40) == "x" * 40
        assert truncate("x" * 41) == "x" * 37 + "..."
        assert len(truncate("y" * 100, 20)) == 20

    def test_escape_label(self):
        assert escape_label('Say "no"') == "Say #quot;no#quot;"
        assert escape_label("two\nlines") == "two<br/>lines"

    @pytest.mark.parametrize(
        "node_type,expected",
        [
            (ArgumentType.SUPPORTING, '["L"]'),
            (ArgumentType.NEUTRAL, '["L"]'),
            (ArgumentType.OPPOSING, '{"L"}'),
            (ArgumentType.COUNTERARGUMENT, '{"L"}'),
            (ArgumentType.EVIDENCE, '(("L"))'),
        ],
    )
    def test_node_shape(self, node_type, expected):
        assert node_shape(node(node_type), "L") == expected

    @pytest.mark.parametrize(
        "node_type,expected",
        [
            (ArgumentType.SUPPORTING, "-->|supports|"),
            (ArgumentType.OPPOSING, "-.->|opposes|"),
            (ArgumentType.COUNTERARGUMENT, "-.->|opposes|"),
            (ArgumentType.EVIDENCE, "-->|evidence|"),
            (ArgumentType.NEUTRAL, "-->"),
        ],
    )
    def test_connection_style(self, node_type, expected):
        assert connection_style(node(node_type)) == expected

    def test_framework_class_wins(self):
        assert node_class(node(ArgumentType.SUPPORTING, Framework.RULE_BASED)) == "rule_based"

    def test_unstyled_framework_falls_back_to_type(self):
        assert node_class(node(ArgumentType.EVIDENCE, Framework.LEGAL)) == "evidence"


class TestRenderTree:
    """Tests for render_tree."""

    @pytest.fixture
    def rendered(self):
        return render_tree(parse_arguments(SCENARIO)).splitlines()

    def test_header_and_class_definitions(self, rendered):
        assert rendered[0] == "graph TD"
        assert any(line.startswith("  classDef supporting fill:#dcfce7") for line in rendered)
        assert any(line.startswith("  classDef consequence_based ") for line in rendered)

    def test_nodes_and_edges_in_preorder(self, rendered):
        body = [line for line in rendered if line and not line.startswith(("graph", "  classDef", "  class "))]
        assert body[0] == '  root["Ethical Analysis"]'
        assert body[1] == '  section_1["Utilitarian Analysis"]'
        assert body[2] == "  root --> section_1"
        assert body[3] == '  arg_2["This clearly benefits society through..."]'
        assert body[4] == "  section_1 -->|supports| arg_2"
        assert body[5].startswith('  detail_3{"However critics')
        assert body[6] == "  arg_2 -.->|opposes| detail_3"
        assert len(body) == 7

    def test_class_assignments(self, rendered):
        classes = [line for line in rendered if line.startswith("  class ")]
        assert classes == [
            "  class root neutral",
            "  class section_1 consequence_based",
            "  class arg_2 consequence_based",
            "  class detail_3 consequence_based",
        ]

    def test_custom_label_length(self):
        lines = render_tree(parse_arguments(SCENARIO), max_label=10).splitlines()
        assert '  arg_2["This cl..."]' in lines

    def test_escapes_quotes(self):
        tree = ArgumentTree.from_root(ArgumentNode("root", 'Say "no"', ArgumentType.NEUTRAL, 0))
        assert '  root["Say #quot;no#quot;"]' in render_tree(tree).splitlines()

    def test_empty_tree(self):
        lines = render_tree(parse_arguments("")).splitlines()
        assert '  root["Ethical Analysis"]' in lines
        assert "-->" not in "\n".join(lines)
