"""Tree node operations: CRUD, subtree reads and JSON export over the materialized-path table."""

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.models import TreeNode
from app.models.base import new_id, utcnow
from app.schemas.tree import (
    CreateTreeNodeRequest,
    TreeNodeDto,
    TreeNodeExport,
    UpdateTreeNodeRequest,
)
from app.services.errors import InvalidRootError, NodeNotFoundError
from app.services.tree_builder import build_tree, to_dto
from app.services.tree_paths import (
    cascade_paths,
    descendant_prefix,
    recompute_path,
)
from app.services.tree_validator import validate_no_cycle

logger = logging.getLogger(__name__)


def _get_or_raise(db: Session, node_id: str, what: str = "Node") -> TreeNode:
    node = db.get(TreeNode, node_id)
    if node is None:
        raise NodeNotFoundError(node_id, what)
    return node


def _subtree_nodes(db: Session, root: TreeNode) -> list[TreeNode]:
    """root and all its descendants, ordered by path."""
    return (
        db.query(TreeNode)
        .filter(
            or_(
                TreeNode.id == root.id,
                TreeNode.path.startswith(descendant_prefix(root.path), autoescape=True),
            )
        )
        .order_by(TreeNode.path)
        .all()
    )


def get_node(db: Session, node_id: str) -> TreeNodeDto:
    logger.info("Get node %s", node_id)
    return to_dto(_get_or_raise(db, node_id))


def get_root_nodes(db: Session) -> list[TreeNodeDto]:
    """Nodes without a parent, ordered by name."""
    nodes = (
        db.query(TreeNode)
        .filter(TreeNode.parent_id.is_(None))
        .order_by(TreeNode.name, TreeNode.id)
        .all()
    )
    logger.info("Got %s root nodes", len(nodes))
    return [to_dto(n) for n in nodes]


def create_node(
    db: Session,
    request: CreateTreeNodeRequest,
    *,
    strict: bool = True,
) -> TreeNodeDto:
    """
    Insert a node under request.parent_id (or as a root) with its path computed.

    Raises NodeNotFoundError for an unknown parent in strict mode, CycleDetectedError or
    DanglingParentError from the ancestor walk. Nothing is written on failure.
    """
    logger.info("Create node name=%r parent_id=%s", request.name, request.parent_id)
    with transaction(db):
        node = TreeNode(
            id=new_id(),
            name=request.name,
            description=request.description,
            parent_id=request.parent_id,
        )
        if request.parent_id is not None:
            if strict:
                _get_or_raise(db, request.parent_id, "Parent node")
            validate_no_cycle(db, node.id, request.parent_id, strict=strict)
        recompute_path(db, node, strict=strict)
        db.add(node)
    db.refresh(node)
    logger.info("Created node %s path=%s", node.id, node.path)
    return to_dto(node)


def update_node(
    db: Session,
    node_id: str,
    request: UpdateTreeNodeRequest,
    *,
    strict: bool = True,
) -> TreeNodeDto:
    """
    Apply a partial update. A parent change is cycle-checked, then the node's path and
    every descendant path are rewritten in the same transaction.
    """
    logger.info("Update node %s", node_id)
    with transaction(db):
        node = _get_or_raise(db, node_id)

        if request.name is not None:
            node.name = request.name
        if "description" in request.model_fields_set:
            node.description = request.description

        if request.parent_id_set and request.parent_id != node.parent_id:
            new_parent_id = request.parent_id
            if new_parent_id is not None:
                if strict:
                    _get_or_raise(db, new_parent_id, "Parent node")
                validate_no_cycle(db, node.id, new_parent_id, strict=strict)

            old_path = node.path
            node.parent_id = new_parent_id
            recompute_path(db, node, strict=strict)
            moved = cascade_paths(db, node, old_path)
            logger.info(
                "Moved node %s under %s; %s descendant paths rewritten",
                node.id,
                new_parent_id,
                moved,
            )

        node.updated_at = utcnow()
    db.refresh(node)
    logger.info("Updated node %s", node.id)
    return to_dto(node)


def delete_node(db: Session, node_id: str) -> int:
    """Delete the node and its whole subtree. Returns the number of rows removed."""
    logger.info("Delete node %s", node_id)
    with transaction(db):
        node = _get_or_raise(db, node_id)
        ids = [
            row.id
            for row in db.query(TreeNode.id).filter(
                TreeNode.path.startswith(descendant_prefix(node.path), autoescape=True)
            )
        ]
        ids.append(node.id)
        deleted = (
            db.query(TreeNode)
            .filter(TreeNode.id.in_(ids))
            .delete(synchronize_session="fetch")
        )
    logger.info("Deleted node %s and %s descendants", node_id, deleted - 1)
    return deleted


def get_tree(db: Session, root_id: str | None = None) -> TreeNodeDto:
    """
    Tree rooted at root_id, or the whole forest under a synthetic root when root_id is None.

    Raises InvalidRootError when root_id does not exist.
    """
    logger.info("Get tree root_id=%s", root_id)
    if root_id is not None:
        root = db.get(TreeNode, root_id)
        if root is None:
            raise InvalidRootError(root_id)
        nodes = _subtree_nodes(db, root)
    else:
        nodes = db.query(TreeNode).order_by(TreeNode.path).all()
    logger.info("Got %s nodes", len(nodes))
    return build_tree(nodes, root_id)


def get_subtree(db: Session, node_id: str) -> list[TreeNodeDto]:
    """Children of node_id, each with its own subtree attached."""
    logger.info("Get subtree of node %s", node_id)
    node = _get_or_raise(db, node_id)
    nodes = _subtree_nodes(db, node)
    tree = build_tree(nodes, node.id)
    logger.info("Got %s nodes below %s", len(nodes) - 1, node_id)
    return tree.children


def export_tree(db: Session, root_id: str | None = None) -> str:
    """get_tree rendered as indented JSON with camelCase keys."""
    tree = get_tree(db, root_id)
    return TreeNodeExport.model_validate(tree.model_dump()).model_dump_json(by_alias=True, indent=2)
