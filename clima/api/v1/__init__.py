"""API v1 routes."""

from fastapi import APIRouter

from clima.api.v1 import auth, health, session_check

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(session_check.router, tags=["auth"])
