"""Unit tests for app.services.tree_paths: path joining, recompute_path and cascade_paths."""

import unittest

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base, TreeNode
from app.services.errors import DanglingParentError
from app.services.tree_paths import (
    cascade_paths,
    descendant_prefix,
    join_path,
    load_descendants,
    recompute_path,
)


def _session() -> Session:
    """Fresh in-memory SQLite session with the schema created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)()


def _add(db: Session, node_id: str, parent: TreeNode | None = None) -> TreeNode:
    node = TreeNode(
        id=node_id,
        name=node_id,
        parent_id=parent.id if parent is not None else None,
        path=join_path(parent.path if parent is not None else None, node_id),
    )
    db.add(node)
    db.commit()
    return node


class TestJoinPath(unittest.TestCase):
    """join_path and descendant_prefix build '/'-separated ancestor chains."""

    def test_root_path_is_own_id(self) -> None:
        self.assertEqual(join_path(None, "A"), "A")
        self.assertEqual(join_path("", "A"), "A")

    def test_child_path_extends_parent(self) -> None:
        self.assertEqual(join_path("A/B", "C"), "A/B/C")

    def test_descendant_prefix(self) -> None:
        self.assertEqual(descendant_prefix("A/B"), "A/B/")


class TestRecomputePath(unittest.TestCase):
    """recompute_path reads the parent's stored path and appends the node id."""

    def setUp(self) -> None:
        self.db = _session()

    def tearDown(self) -> None:
        self.db.close()

    def test_root_node(self) -> None:
        node = TreeNode(id="R", name="r")
        self.assertEqual(recompute_path(self.db, node), "R")
        self.assertEqual(node.path, "R")

    def test_node_under_parent(self) -> None:
        a = _add(self.db, "A")
        b = _add(self.db, "B", a)
        node = TreeNode(id="C", name="c", parent_id=b.id)
        self.assertEqual(recompute_path(self.db, node), "A/B/C")

    def test_missing_parent_strict_raises(self) -> None:
        node = TreeNode(id="C", name="c", parent_id="missing")
        with self.assertRaises(DanglingParentError) as ctx:
            recompute_path(self.db, node, strict=True)
        self.assertEqual(ctx.exception.missing_id, "missing")

    def test_missing_parent_lenient_uses_root_path(self) -> None:
        node = TreeNode(id="C", name="c", parent_id="missing")
        self.assertEqual(recompute_path(self.db, node, strict=False), "C")


class TestCascadePaths(unittest.TestCase):
    """cascade_paths rewrites every descendant path breadth-first from the moved node."""

    def setUp(self) -> None:
        self.db = _session()
        self.a = _add(self.db, "A")
        self.b = _add(self.db, "B", self.a)
        self.c = _add(self.db, "C", self.b)
        self.d = _add(self.db, "D", self.c)
        self.e = _add(self.db, "E", self.b)
        self.x = _add(self.db, "X")

    def tearDown(self) -> None:
        self.db.close()

    def test_load_descendants_excludes_node_and_siblings(self) -> None:
        ids = [n.id for n in load_descendants(self.db, "A/B")]
        self.assertEqual(sorted(ids), ["C", "D", "E"])

    def test_move_subtree_under_other_root(self) -> None:
        old_path = self.b.path
        self.b.parent_id = self.x.id
        recompute_path(self.db, self.b)
        updated = cascade_paths(self.db, self.b, old_path)
        self.db.commit()

        self.assertEqual(updated, 3)
        self.assertEqual(self.db.get(TreeNode, "B").path, "X/B")
        self.assertEqual(self.db.get(TreeNode, "C").path, "X/B/C")
        self.assertEqual(self.db.get(TreeNode, "D").path, "X/B/C/D")
        self.assertEqual(self.db.get(TreeNode, "E").path, "X/B/E")
        self.assertEqual(self.db.get(TreeNode, "A").path, "A")

    def test_move_to_root(self) -> None:
        old_path = self.c.path
        self.c.parent_id = None
        recompute_path(self.db, self.c)
        updated = cascade_paths(self.db, self.c, old_path)
        self.db.commit()

        self.assertEqual(updated, 1)
        self.assertEqual(self.db.get(TreeNode, "C").path, "C")
        self.assertEqual(self.db.get(TreeNode, "D").path, "C/D")

    def test_unchanged_path_is_noop(self) -> None:
        self.assertEqual(cascade_paths(self.db, self.b, self.b.path), 0)


if __name__ == "__main__":
    unittest.main()
