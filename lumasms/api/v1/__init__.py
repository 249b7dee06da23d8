"""API v1 routes."""

from fastapi import APIRouter

from lumasms.api.v1 import auth, health, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
# auth first: its fixed paths (/login, /verify, ...) must win over /user/{uid}
router.include_router(auth.router, prefix="/user", tags=["auth"])
router.include_router(users.router, prefix="/user", tags=["users"])
