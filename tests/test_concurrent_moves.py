"""Concurrent reparenting against a file-backed SQLite database must never persist a cycle."""

import os
import tempfile
import threading
import time
import unittest
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.database import configure_sqlite_transactions
from app.models import Base, TreeNode
from app.schemas.tree import CreateTreeNodeRequest, UpdateTreeNodeRequest
from app.services import tree_service
from app.services.errors import CycleDetectedError
from app.services.tree_validator import validate_no_cycle


class TestConcurrentMoves(unittest.TestCase):
    """Two threads move root A under B and root B under A at the same time."""

    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmpdir.name, "tree.db")
        self.engine = create_engine(
            f"sqlite:///{db_path}",
            connect_args={"check_same_thread": False, "timeout": 10},
        )
        configure_sqlite_transactions(self.engine)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

        db = self.Session()
        try:
            self.a = tree_service.create_node(db, CreateTreeNodeRequest(name="A")).id
            self.b = tree_service.create_node(db, CreateTreeNodeRequest(name="B")).id
        finally:
            db.close()

    def tearDown(self) -> None:
        self.engine.dispose()
        self.tmpdir.cleanup()

    def _move(self, node_id: str, parent_id: str, start: threading.Barrier, errors: list) -> None:
        db = self.Session()
        try:
            start.wait(timeout=5)
            tree_service.update_node(db, node_id, UpdateTreeNodeRequest(parent_id=parent_id))
        except Exception as e:
            errors.append(e)
        finally:
            db.close()

    def test_interleaved_moves_leave_tree_acyclic(self) -> None:
        def _slow_validate(*args, **kwargs):
            # Widen the gap between the ancestor check and the write.
            validate_no_cycle(*args, **kwargs)
            time.sleep(0.3)

        start = threading.Barrier(2)
        errors: list[Exception] = []
        with patch("app.services.tree_service.validate_no_cycle", side_effect=_slow_validate):
            threads = [
                threading.Thread(target=self._move, args=(self.a, self.b, start, errors)),
                threading.Thread(target=self._move, args=(self.b, self.a, start, errors)),
            ]
            for t in threads:
                t.start()
            for t in threads:
                t.join(timeout=30)

        self.assertEqual(len(errors), 1, errors)
        self.assertIsInstance(errors[0], CycleDetectedError)

        db = self.Session()
        try:
            a = db.get(TreeNode, self.a)
            b = db.get(TreeNode, self.b)
            self.assertFalse(a.parent_id == self.b and b.parent_id == self.a)
            if a.parent_id == self.b:
                self.assertEqual((b.parent_id, b.path), (None, self.b))
                self.assertEqual(a.path, f"{self.b}/{self.a}")
            else:
                self.assertEqual((a.parent_id, a.path), (None, self.a))
                self.assertEqual(b.parent_id, self.a)
                self.assertEqual(b.path, f"{self.a}/{self.b}")
        finally:
            db.close()


if __name__ == "__main__":
    unittest.main()
