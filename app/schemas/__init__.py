"""Pydantic request/response schemas."""

from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    TokenResponse,
    UserListItem,
    UsersListResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.tree import (
    CreateTreeNodeRequest,
    TreeNodeDto,
    UpdateTreeNodeRequest,
)

__all__ = [
    "CreateTreeNodeRequest",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "TokenResponse",
    "TreeNodeDto",
    "UpdateTreeNodeRequest",
    "UserListItem",
    "UsersListResponse",
]
