"""Tree endpoints: node CRUD, root listing, subtree and whole-tree reads, JSON export."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.api.v1.auth import require_admin, require_user_or_admin
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.schemas.tree import CreateTreeNodeRequest, TreeNodeDto, UpdateTreeNodeRequest
from app.services import tree_service
from app.services.errors import (
    CycleDetectedError,
    DanglingParentError,
    InvalidRootError,
    NodeNotFoundError,
    TreeServiceError,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_user_or_admin)])

EXPORT_FILENAME = "tree-export.json"


def _to_http(e: TreeServiceError) -> HTTPException:
    """Map a service error to the HTTP status the client sees."""
    if isinstance(e, NodeNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    if isinstance(e, (CycleDetectedError, InvalidRootError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    if isinstance(e, DanglingParentError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.get("/nodes", response_model=list[TreeNodeDto])
def get_root_nodes(
    db: Annotated[Session, Depends(get_db)],
) -> list[TreeNodeDto]:
    """Return the nodes that have no parent, ordered by name."""
    return tree_service.get_root_nodes(db)


@router.get("/nodes/{node_id}", response_model=TreeNodeDto)
def get_node(
    node_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> TreeNodeDto:
    try:
        return tree_service.get_node(db, node_id)
    except TreeServiceError as e:
        logger.warning("Node %s not found", node_id)
        raise _to_http(e) from e


@router.post("/nodes", response_model=TreeNodeDto, status_code=status.HTTP_201_CREATED)
def create_node(
    body: CreateTreeNodeRequest,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(require_user_or_admin)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TreeNodeDto:
    """
    Create a node. With parent_id the node is placed under that parent and its path
    extends the parent's path; without it the node is a new root.
    """
    logger.info("Creating node %r parent_id=%s by %s", body.name, body.parent_id, user.username)
    try:
        return tree_service.create_node(db, body, strict=settings.STRICT_ANCESTRY)
    except TreeServiceError as e:
        logger.warning("Create node %r by %s rejected: %s", body.name, user.username, e.message)
        raise _to_http(e) from e


@router.put("/nodes/{node_id}", response_model=TreeNodeDto)
def update_node(
    node_id: str,
    body: UpdateTreeNodeRequest,
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[CurrentUser, Depends(require_admin)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TreeNodeDto:
    """
    Update name/description and optionally move the node (admin only).

    Moving rewrites the paths of the node and all its descendants. A move under the node
    itself or one of its descendants is rejected with 400.
    """
    logger.info("Updating node %s by admin %s", node_id, admin.username)
    try:
        return tree_service.update_node(db, node_id, body, strict=settings.STRICT_ANCESTRY)
    except TreeServiceError as e:
        logger.warning("Update of node %s by %s rejected: %s", node_id, admin.username, e.message)
        raise _to_http(e) from e


@router.delete("/nodes/{node_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_node(
    node_id: str,
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[CurrentUser, Depends(require_admin)],
) -> Response:
    """Delete a node together with its whole subtree (admin only)."""
    logger.info("Deleting node %s by admin %s", node_id, admin.username)
    try:
        tree_service.delete_node(db, node_id)
    except TreeServiceError as e:
        logger.warning("Delete of node %s by %s rejected: %s", node_id, admin.username, e.message)
        raise _to_http(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/tree", response_model=TreeNodeDto)
def get_tree(
    db: Annotated[Session, Depends(get_db)],
    root_id: Annotated[str | None, Query(description="Return only the subtree of this node")] = None,
) -> TreeNodeDto:
    """
    Return the tree under root_id, or every tree under a synthetic "Root" wrapper when
    root_id is omitted. An unknown root_id is a 400.
    """
    try:
        return tree_service.get_tree(db, root_id)
    except TreeServiceError as e:
        logger.warning("Invalid root_id %s: %s", root_id, e.message)
        raise _to_http(e) from e


@router.get("/nodes/{node_id}/subtree", response_model=list[TreeNodeDto])
def get_subtree(
    node_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> list[TreeNodeDto]:
    """Return the children of node_id, each with its descendants nested."""
    try:
        return tree_service.get_subtree(db, node_id)
    except TreeServiceError as e:
        raise _to_http(e) from e


@router.get("/export")
def export_tree(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(require_user_or_admin)],
    root_id: Annotated[str | None, Query(description="Export only the subtree of this node")] = None,
) -> Response:
    """Download the tree (same shape as GET /tree) as indented camelCase JSON."""
    logger.info("Exporting tree by %s, root_id=%s", user.username, root_id)
    try:
        content = tree_service.export_tree(db, root_id)
    except TreeServiceError as e:
        logger.warning("Export by %s failed for root_id %s: %s", user.username, root_id, e.message)
        raise _to_http(e) from e
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
