"""ORM model for nodes of the hierarchical tree."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from app.models.base import Base, new_id, utcnow

NAME_MAX_LENGTH = 100
PATH_MAX_LENGTH = 1000


class TreeNode(Base):
    """
    One node of the tree.

    path holds the ancestor ids joined by '/', ending with the node's own id
    (e.g. "<root-id>/<child-id>/<id>"). Descendants of a node are exactly the rows
    whose path starts with that node's path followed by '/'.
    """

    __tablename__ = "tree_nodes"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(
        String(36),
        ForeignKey("tree_nodes.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    path = Column(String(PATH_MAX_LENGTH), nullable=False, default="", index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<TreeNode(id={self.id}, name={self.name!r}, parent_id={self.parent_id})>"
