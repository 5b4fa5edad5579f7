"""Unit tests for app.services.tree_builder.build_tree (pure, no database)."""

import unittest
from datetime import UTC, datetime, timedelta

from app.models import TreeNode
from app.schemas.tree import SYNTHETIC_ROOT_ID, SYNTHETIC_ROOT_NAME
from app.services.errors import InvalidRootError
from app.services.tree_builder import build_tree, to_dto


def _node(node_id: str, parent_id: str | None, path: str, name: str | None = None) -> TreeNode:
    return TreeNode(id=node_id, name=name or node_id.lower(), parent_id=parent_id, path=path)


def _forest() -> list[TreeNode]:
    """Two trees, A(B(C), D) and R, in path order."""
    return sorted(
        [
            _node("A", None, "A"),
            _node("B", "A", "A/B"),
            _node("C", "B", "A/B/C"),
            _node("D", "A", "A/D"),
            _node("R", None, "R"),
        ],
        key=lambda n: n.path,
    )


class TestToDto(unittest.TestCase):
    def test_copies_fields_without_children(self) -> None:
        dto = to_dto(_node("B", "A", "A/B", name="beta"))
        self.assertEqual(dto.id, "B")
        self.assertEqual(dto.name, "beta")
        self.assertEqual(dto.parent_id, "A")
        self.assertEqual(dto.path, "A/B")
        self.assertEqual(dto.children, [])

    def test_naive_timestamps_are_read_as_utc(self) -> None:
        node = _node("A", None, "A")
        node.created_at = datetime(2026, 1, 2, 3, 4, 5)
        node.updated_at = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)
        dto = to_dto(node)
        self.assertEqual(dto.created_at, datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC))
        self.assertEqual(dto.updated_at.utcoffset(), timedelta(0))


class TestBuildForest(unittest.TestCase):
    """Without root_id the result is a synthetic wrapper around all top-level nodes."""

    def test_wrapper_holds_parentless_nodes(self) -> None:
        tree = build_tree(_forest())
        self.assertEqual(tree.id, SYNTHETIC_ROOT_ID)
        self.assertEqual(tree.name, SYNTHETIC_ROOT_NAME)
        self.assertEqual([c.id for c in tree.children], ["A", "R"])

    def test_descendants_are_nested(self) -> None:
        tree = build_tree(_forest())
        a = tree.children[0]
        self.assertEqual([c.id for c in a.children], ["B", "D"])
        self.assertEqual([c.id for c in a.children[0].children], ["C"])
        self.assertEqual(a.children[1].children, [])

    def test_node_with_absent_parent_is_top_level(self) -> None:
        nodes = [_node("A", None, "A"), _node("Z", "GONE", "Z")]
        tree = build_tree(nodes)
        self.assertEqual([c.id for c in tree.children], ["A", "Z"])

    def test_empty_input(self) -> None:
        tree = build_tree([])
        self.assertEqual(tree.children, [])


class TestBuildSubtree(unittest.TestCase):
    """With root_id the requested node itself is returned with its subtree."""

    def test_returns_requested_node(self) -> None:
        nodes = [n for n in _forest() if n.path == "A/B" or n.path.startswith("A/B/")]
        tree = build_tree(nodes, "B")
        self.assertEqual(tree.id, "B")
        self.assertEqual([c.id for c in tree.children], ["C"])

    def test_leaf_root_has_no_children(self) -> None:
        tree = build_tree([_node("R", None, "R")], "R")
        self.assertEqual(tree.id, "R")
        self.assertEqual(tree.children, [])

    def test_missing_root_raises_invalid_root(self) -> None:
        with self.assertRaises(InvalidRootError):
            build_tree([_node("A", None, "A")], "B")


if __name__ == "__main__":
    unittest.main()
