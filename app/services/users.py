"""User registration and lookup shared by the auth API and the create_user script."""

import logging

from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.security import ROLE_USER, ROLES, hash_password, verify_password
from app.models.user import User
from app.services.errors import UsernameTakenError

logger = logging.getLogger(__name__)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    """Return the user when the password matches, else None."""
    user = get_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def register_user(db: Session, username: str, password: str, role: str = ROLE_USER) -> User:
    """Create a user with a bcrypt password hash. Raises UsernameTakenError on duplicates."""
    if role not in ROLES:
        raise ValueError(f"role must be one of {sorted(ROLES)}")
    with transaction(db):
        if get_user_by_username(db, username) is not None:
            raise UsernameTakenError(username)
        user = User(
            username=username,
            password_hash=hash_password(password),
            role=role,
        )
        db.add(user)
    db.refresh(user)
    logger.info("Registered user %s (%s) with role %s", user.username, user.id, user.role)
    return user
