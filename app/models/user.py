"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import Column, DateTime, String

from app.models.base import Base, new_id, utcnow


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'User' or 'Administrator'
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="User")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
