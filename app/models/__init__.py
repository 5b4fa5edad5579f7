"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.tree_node import TreeNode
from app.models.user import User

__all__ = ["Base", "TreeNode", "User"]
