"""Cycle detection for parent assignments."""

import logging

from sqlalchemy.orm import Session

from app.models import TreeNode
from app.services.errors import CycleDetectedError, DanglingParentError

logger = logging.getLogger(__name__)


def validate_no_cycle(
    db: Session,
    node_id: str,
    new_parent_id: str | None,
    *,
    strict: bool = True,
) -> None:
    """
    Raise CycleDetectedError if placing node_id under new_parent_id would make the node
    its own ancestor.

    Walks parent links upward from new_parent_id with a visited set seeded with node_id;
    any repeat is a cycle, reaching a root is success. A missing ancestor ends the walk
    (strict mode raises DanglingParentError instead).
    """
    if new_parent_id is None:
        return

    visited = {node_id}
    current_id: str | None = new_parent_id
    while current_id is not None:
        if current_id in visited:
            logger.warning(
                "Cycle detected placing node %s under %s (revisited %s)",
                node_id,
                new_parent_id,
                current_id,
            )
            raise CycleDetectedError(node_id, new_parent_id)
        visited.add(current_id)

        row = (
            db.query(TreeNode.id, TreeNode.parent_id)
            .filter(TreeNode.id == current_id)
            .first()
        )
        if row is None:
            if strict:
                raise DanglingParentError(node_id, current_id)
            logger.warning(
                "Ancestor %s not found while checking node %s; chain treated as ended",
                current_id,
                node_id,
            )
            return
        current_id = row.parent_id
