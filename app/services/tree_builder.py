"""Assemble nested node views from a flat list of nodes ordered by path."""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from app.models.base import as_utc
from app.schemas.tree import SYNTHETIC_ROOT_ID, SYNTHETIC_ROOT_NAME, TreeNodeDto
from app.services.errors import InvalidRootError

if TYPE_CHECKING:
    from app.models.tree_node import TreeNode

logger = logging.getLogger(__name__)


def to_dto(node: "TreeNode") -> TreeNodeDto:
    """Flat view of one node (no children)."""
    return TreeNodeDto(
        id=node.id,
        name=node.name,
        description=node.description,
        parent_id=node.parent_id,
        path=node.path,
        created_at=as_utc(node.created_at),
        updated_at=as_utc(node.updated_at),
    )


def build_tree(nodes: Sequence["TreeNode"], root_id: str | None = None) -> TreeNodeDto:
    """
    Link nodes into a tree of TreeNodeDto.

    With root_id, returns the view of that node with its subtree attached. Without it,
    returns a synthetic wrapper whose children are the top-level nodes: those with no
    parent, or whose parent is not in the list. Children keep the input order, so a
    path-ordered input yields ancestors before descendants. Raises InvalidRootError when
    root_id is not among nodes.
    """
    views: dict[str, TreeNodeDto] = {}
    for node in nodes:
        views[node.id] = to_dto(node)

    top_level: list[TreeNodeDto] = []
    for node in nodes:
        view = views[node.id]
        if root_id is not None and node.id == root_id:
            top_level.append(view)
            continue
        parent_view = views.get(node.parent_id) if node.parent_id is not None else None
        if parent_view is not None and node.parent_id != node.id:
            parent_view.children.append(view)
        elif root_id is None:
            top_level.append(view)
        else:
            logger.warning("Node %s has no parent in subtree of %s; skipped", node.id, root_id)

    if root_id is not None:
        if not top_level:
            raise InvalidRootError(root_id)
        return top_level[0]
    return TreeNodeDto(id=SYNTHETIC_ROOT_ID, name=SYNTHETIC_ROOT_NAME, children=top_level)
