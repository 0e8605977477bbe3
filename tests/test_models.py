"""Tests for argument tree data structures."""

import json

import pytest

from argmap.extraction.models import ArgumentNode, ArgumentTree, ArgumentType, Framework
from argmap.serialization import to_json


def leaf(node_id, parent, level, **kwargs):
    return ArgumentNode(
        id=node_id,
        text=f"text of {node_id}",
        type=kwargs.pop("type", ArgumentType.NEUTRAL),
        level=level,
        parent=parent,
        **kwargs,
    )


@pytest.fixture
def small_tree():
    detail = leaf("detail-3", "arg-2", 3, type=ArgumentType.EVIDENCE, strength=3)
    argument = ArgumentNode(
        id="arg-2",
        text="An argument",
        type=ArgumentType.SUPPORTING,
        level=2,
        framework=Framework.LEGAL,
        strength=4,
        parent="section-1",
        children=(detail,),
    )
    section = ArgumentNode(
        id="section-1",
        text="Legal Precedent",
        type=ArgumentType.NEUTRAL,
        level=1,
        framework=Framework.LEGAL,
        parent="root",
        children=(argument,),
    )
    root = ArgumentNode("root", "Ethical Analysis", ArgumentType.NEUTRAL, 0, children=(section,))
    return ArgumentTree.from_root(root)


class TestArgumentNode:
    """Tests for ArgumentNode validation and serialization."""

    def test_rejects_strength_out_of_range(self):
        with pytest.raises(ValueError):
            leaf("arg-1", "root", 1, strength=6)
        with pytest.raises(ValueError):
            leaf("arg-1", "root", 1, strength=0)

    def test_rejects_negative_level(self):
        with pytest.raises(ValueError):
            ArgumentNode("root", "x", ArgumentType.NEUTRAL, -1)

    def test_rejects_level_gap(self):
        child = leaf("detail-1", "root", 2)
        with pytest.raises(ValueError):
            ArgumentNode("root", "x", ArgumentType.NEUTRAL, 0, children=(child,))

    def test_rejects_wrong_parent(self):
        child = leaf("section-1", "elsewhere", 1)
        with pytest.raises(ValueError):
            ArgumentNode("root", "x", ArgumentType.NEUTRAL, 0, children=(child,))

    def test_is_frozen(self, small_tree):
        with pytest.raises(AttributeError):
            small_tree.root_node.text = "changed"

    def test_to_dict_omits_unset_optionals(self):
        data = ArgumentNode("root", "x", ArgumentType.NEUTRAL, 0).to_dict()
        assert data == {"id": "root", "text": "x", "type": "neutral", "children": [], "level": 0}

    def test_to_dict_includes_set_optionals(self, small_tree):
        data = small_tree.get("arg-2").to_dict()
        assert data["framework"] == "legal"
        assert data["strength"] == 4
        assert data["parent"] == "section-1"
        assert data["children"][0]["type"] == "evidence"


class TestArgumentTree:
    """Tests for ArgumentTree lookups and totals."""

    def test_totals(self, small_tree):
        assert small_tree.total_nodes == 4
        assert len(small_tree) == 4
        assert small_tree.max_depth == 3

    def test_lookup(self, small_tree):
        assert "arg-2" in small_tree
        assert "arg-99" not in small_tree
        assert small_tree.get("detail-3").type == ArgumentType.EVIDENCE
        assert small_tree.get("missing") is None

    def test_parent_of(self, small_tree):
        detail = small_tree.get("detail-3")
        assert small_tree.parent_of(detail).id == "arg-2"
        assert small_tree.parent_of(small_tree.root_node) is None

    def test_nodes_at_level(self, small_tree):
        assert [n.id for n in small_tree.nodes_at_level(2)] == ["arg-2"]

    def test_duplicate_ids_rejected(self):
        a = leaf("dup", "root", 1)
        b = leaf("dup", "root", 1)
        root = ArgumentNode("root", "x", ArgumentType.NEUTRAL, 0, children=(a, b))
        with pytest.raises(ValueError):
            ArgumentTree.from_root(root)

    def test_round_trip(self, small_tree):
        assert ArgumentTree.from_dict(small_tree.to_dict()) == small_tree

    def test_to_json(self, small_tree):
        data = json.loads(to_json(small_tree))
        assert data["totalNodes"] == 4
        assert data["rootNode"]["children"][0]["text"] == "Legal Precedent"
