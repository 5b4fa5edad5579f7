"""JWT login, registration and auth dependencies (get_current_user, require_admin, require_user_or_admin)."""

import logging
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import (
    ROLE_ADMIN,
    ROLE_USER,
    ROLES,
    create_access_token,
    decode_access_token,
)
from app.models.user import User
from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    TokenResponse,
    UserListItem,
    UsersListResponse,
)
from app.services.errors import UsernameTakenError
from app.services.users import authenticate_user, register_user

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    logger.info("Login attempt: %s", body.username)
    user = authenticate_user(db, body.username, body.password)
    if user is None:
        logger.warning("Login failed: %s", body.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password.",
        )
    logger.info("Login successful: %s", body.username)
    return TokenResponse(access_token=create_access_token(user), token_type="bearer")


def _register(db: Session, body: LoginRequest, role: str) -> UserListItem:
    try:
        user = register_user(db, body.username, body.password, role)
    except UsernameTakenError as e:
        logger.warning("Registration failed: %s already exists", body.username)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    return UserListItem.model_validate(user)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    sub = payload.get("sub")
    if not sub or not isinstance(sub, str):
        raise _unauthorized("Invalid token payload")
    user = db.get(User, sub)
    if user is None:
        raise _unauthorized("User not found")
    return CurrentUser(id=user.id, username=user.username, role=user.role)


def require_user_or_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: any authenticated user holding a known role. Raises 403 otherwise."""
    if current_user.role not in ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User or Administrator role required",
        )
    return current_user


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'Administrator'. Raises 403 for others."""
    if current_user.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@router.post("/register", response_model=UserListItem, status_code=status.HTTP_201_CREATED)
def register(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> UserListItem:
    """Self-service registration; the account gets the 'User' role."""
    logger.info("Registration: %s", body.username)
    return _register(db, body, ROLE_USER)


@router.post(
    "/register-admin",
    response_model=UserListItem,
    status_code=status.HTTP_201_CREATED,
)
def register_admin(
    body: LoginRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserListItem:
    """Create an 'Administrator' account (admin only)."""
    logger.info("Admin registration by %s: %s", admin.username, body.username)
    return _register(db, body, ROLE_ADMIN)


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only)."""
    users = db.query(User).order_by(User.created_at, User.username).all()
    return UsersListResponse(users=[UserListItem.model_validate(u) for u in users])
