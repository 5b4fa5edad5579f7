"""Materialized path maintenance: compute a node's path and rewrite descendant paths after a move."""

import logging
from collections import defaultdict, deque

from sqlalchemy.orm import Session

from app.models import TreeNode
from app.services.errors import DanglingParentError

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def join_path(parent_path: str | None, node_id: str) -> str:
    """Path of a node given its parent's path; roots (no parent path) are just their own id."""
    if not parent_path:
        return node_id
    return f"{parent_path}{PATH_SEPARATOR}{node_id}"


def descendant_prefix(path: str) -> str:
    """Prefix shared by the paths of every descendant of the node at path."""
    return f"{path}{PATH_SEPARATOR}"


def load_descendants(db: Session, path: str) -> list[TreeNode]:
    """All nodes strictly below the node at path, ancestors first."""
    return (
        db.query(TreeNode)
        .filter(TreeNode.path.startswith(descendant_prefix(path), autoescape=True))
        .order_by(TreeNode.path)
        .all()
    )


def recompute_path(db: Session, node: TreeNode, *, strict: bool = True) -> str:
    """
    Set node.path from its parent's current path and return it.

    A parent_id that does not resolve raises DanglingParentError when strict; otherwise
    the node gets the root-only path.
    """
    parent_path = None
    if node.parent_id is not None:
        parent = db.get(TreeNode, node.parent_id)
        if parent is None:
            if strict:
                raise DanglingParentError(node.id, node.parent_id)
            logger.warning(
                "Parent %s of node %s not found; using root path",
                node.parent_id,
                node.id,
            )
        else:
            parent_path = parent.path
    node.path = join_path(parent_path, node.id)
    return node.path


def cascade_paths(db: Session, node: TreeNode, old_path: str) -> int:
    """
    Rewrite the paths of every descendant of node after node.path changed from old_path.

    Descendants are found by the old prefix and updated breadth-first from node, so each
    child is joined onto a parent path that has already been rewritten. Returns the number
    of descendants updated.
    """
    if not old_path or old_path == node.path:
        return 0
    descendants = load_descendants(db, old_path)
    if not descendants:
        return 0

    children_by_parent: dict[str, list[TreeNode]] = defaultdict(list)
    for descendant in descendants:
        children_by_parent[descendant.parent_id].append(descendant)

    updated = 0
    queue: deque[TreeNode] = deque([node])
    while queue:
        parent = queue.popleft()
        for child in children_by_parent.get(parent.id, ()):
            child.path = join_path(parent.path, child.id)
            updated += 1
            queue.append(child)

    if updated != len(descendants):
        logger.warning(
            "Path cascade from node %s reached %s of %s descendants",
            node.id,
            updated,
            len(descendants),
        )
    return updated
