"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import auth, health, tree

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(tree.router, prefix="/tree", tags=["tree"])
